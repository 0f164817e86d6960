"""Storage queries: raw storage values, keys, read proofs and storage subscriptions."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from subrpc.errors import RpcError
from subrpc.hashing import decode_hex, encode_hex, storage_key
from subrpc.rpc import Subscription
from subrpc.status import ReadProof

_log = logging.getLogger(__name__)


class StateMixin:
    """State RPC calls. The host class provides ``client``, an RPC client."""

    client: Any

    def get_opaque_storage_by_key_hash(
        self, key: bytes, at_block: str | None = None
    ) -> bytes | None:
        """Return the raw storage data under ``key``, or None if there is none."""
        data = self.client.request("state_getStorage", [key, at_block])
        if data is None:
            return None
        if not isinstance(data, str):
            raise RpcError(f"invalid storage data: {data!r}")
        return decode_hex(data)

    def get_opaque_storage_value(
        self, pallet: str, storage_key_name: str, at_block: str | None = None
    ) -> bytes | None:
        """Return the raw data of the plain storage value ``pallet``.``storage_key_name``."""
        key = storage_key(pallet, storage_key_name)
        _log.info("storage key is: %s", encode_hex(key))
        return self.get_opaque_storage_by_key_hash(key, at_block)

    def get_storage_keys_paged(
        self,
        prefix: bytes | None,
        count: int,
        start_key: bytes | None = None,
        at_block: str | None = None,
    ) -> list[bytes]:
        """Return up to ``count`` keys with ``prefix``, following ``start_key`` if given."""
        keys = self.client.request(
            "state_getKeysPaged", [prefix, count, start_key, at_block]
        )
        if not isinstance(keys, list) or not all(isinstance(k, str) for k in keys):
            raise RpcError(f"invalid storage keys: {keys!r}")
        return [decode_hex(k) for k in keys]

    def get_storage_proof_by_keys(
        self, keys: Iterable[bytes], at_block: str | None = None
    ) -> ReadProof | None:
        """Return a read proof for ``keys``, or None if the node has none."""
        proof = self.client.request("state_getReadProof", [list(keys), at_block])
        if proof is None:
            return None
        try:
            return ReadProof.from_json(proof)
        except ValueError as exc:
            raise RpcError(str(exc)) from exc

    def get_storage_value_proof(
        self, pallet: str, storage_key_name: str, at_block: str | None = None
    ) -> ReadProof | None:
        """Return a read proof for the plain storage value ``pallet``.``storage_key_name``."""
        key = storage_key(pallet, storage_key_name)
        _log.info("storage key is: %s", encode_hex(key))
        return self.get_storage_proof_by_keys([key], at_block)

    def get_keys(self, key: bytes, at_block: str | None = None) -> list[str] | None:
        """Return the hex keys starting with ``key``."""
        return self.client.request("state_getKeys", [key, at_block])

    def subscribe_state(self, pallet: str, storage_key_name: str) -> Subscription:
        """Subscribe to changes of the plain storage value ``pallet``.``storage_key_name``."""
        _log.debug("subscribing to storage changes")
        key = storage_key(pallet, storage_key_name)
        return self.client.subscribe(
            "state_subscribeStorage", [[key]], "state_unsubscribeStorage"
        )