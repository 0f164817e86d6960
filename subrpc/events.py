"""Event queries: raw block events, extrinsic lookup and event subscriptions."""

from __future__ import annotations

import logging
from typing import Any

from subrpc.errors import BlockNotFoundError, ExtrinsicNotFoundError, RpcError
from subrpc.hashing import blake2_256, decode_hex, encode_hex, storage_key
from subrpc.rpc import Subscription

_log = logging.getLogger(__name__)

_EVENTS_PALLET = "System"
_EVENTS_STORAGE = "Events"


def _hash_bytes(value: str | bytes) -> bytes:
    if isinstance(value, str):
        return decode_hex(value)
    return bytes(value)


class EventSubscription:
    """Wraps a subscription to the events storage key and yields raw event data."""

    def __init__(self, subscription: Subscription) -> None:
        self.subscription = subscription

    def next_event(self) -> bytes | None:
        """Wait for the next change of the events storage and return its raw bytes.

        Returns None once the subscription has ended or when the change
        carries no data.
        """
        change_set = self.subscription.next()
        if change_set is None:
            return None
        try:
            changes = change_set["changes"]
            # Only the events key was subscribed, so the first change is the one.
            data = changes[0][1]
        except (KeyError, IndexError, TypeError) as exc:
            raise RpcError(f"invalid storage change set: {change_set!r}") from exc
        if data is None:
            return None
        if not isinstance(data, str):
            raise RpcError(f"invalid storage data: {data!r}")
        try:
            return decode_hex(data)
        except ValueError as exc:
            raise RpcError(str(exc)) from exc

    def unsubscribe(self) -> None:
        """End the underlying subscription."""
        self.subscription.unsubscribe()


class EventsMixin:
    """Event RPC calls.

    The host class provides ``client`` and the chain and state queries
    ``get_block`` and ``get_opaque_storage_by_key_hash``.
    """

    client: Any

    def fetch_event_bytes(self, block_hash: str) -> bytes:
        """Return the raw, encoded events of block ``block_hash``."""
        key = storage_key(_EVENTS_PALLET, _EVENTS_STORAGE)
        event_bytes = self.get_opaque_storage_by_key_hash(key, block_hash)  # type: ignore[attr-defined]
        if event_bytes is None:
            raise BlockNotFoundError(f"no events found for block {block_hash}")
        return event_bytes

    def retrieve_extrinsic_index_from_block(
        self, block_hash: str, extrinsic_hash: str | bytes
    ) -> int:
        """Return the position of the extrinsic with ``extrinsic_hash`` in block ``block_hash``."""
        block = self.get_block(block_hash)  # type: ignore[attr-defined]
        if block is None:
            raise BlockNotFoundError(f"block {block_hash} not found")
        extrinsics = block.get("extrinsics") if isinstance(block, dict) else None
        if not isinstance(extrinsics, list) or not all(isinstance(x, str) for x in extrinsics):
            raise RpcError(f"invalid block: {block!r}")
        wanted = _hash_bytes(extrinsic_hash)
        for index, extrinsic in enumerate(extrinsics):
            xt_hash = blake2_256(decode_hex(extrinsic))
            _log.debug(
                "looking for %s, got extrinsic hash %s", encode_hex(wanted), encode_hex(xt_hash)
            )
            if xt_hash == wanted:
                return index
        raise ExtrinsicNotFoundError(
            f"extrinsic {encode_hex(wanted)} not found in block {block_hash}"
        )

    def subscribe_events(self) -> EventSubscription:
        """Subscribe to the events storage of every new block."""
        key = storage_key(_EVENTS_PALLET, _EVENTS_STORAGE)
        subscription = self.client.subscribe(
            "state_subscribeStorage", [[key]], "state_unsubscribeStorage"
        )
        return EventSubscription(subscription)