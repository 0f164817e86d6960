"""Node API client caching the genesis hash, metadata and runtime version."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from subrpc.author import AuthorMixin
from subrpc.chain import ChainMixin
from subrpc.errors import ApiError, FetchGenesisHashError, RpcError
from subrpc.events import EventsMixin
from subrpc.hashing import decode_hex
from subrpc.payment import PaymentMixin
from subrpc.state import StateMixin
from subrpc.system import SystemMixin

_log = logging.getLogger(__name__)

_METADATA_MAGIC = b"meta"


def _field(value: dict[str, Any], name: str, expected: type, default: Any) -> Any:
    item = value.get(name, default)
    if isinstance(item, bool) or not isinstance(item, expected):
        raise ValueError(f"invalid runtime version field {name!r}: {item!r}")
    return item


def _parse_apis(raw: Any) -> tuple[tuple[str, int], ...]:
    if not isinstance(raw, list):
        raise ValueError(f"invalid runtime version apis: {raw!r}")
    apis = []
    for entry in raw:
        if (
            not isinstance(entry, (list, tuple))
            or len(entry) != 2
            or not isinstance(entry[0], str)
            or isinstance(entry[1], bool)
            or not isinstance(entry[1], int)
        ):
            raise ValueError(f"invalid runtime api entry: {entry!r}")
        apis.append((entry[0], entry[1]))
    return tuple(apis)


@dataclass(frozen=True)
class RuntimeVersion:
    """Version information of the runtime a node is running."""

    spec_name: str = ""
    impl_name: str = ""
    authoring_version: int = 0
    spec_version: int = 0
    impl_version: int = 0
    apis: tuple[tuple[str, int], ...] = field(default_factory=tuple)
    transaction_version: int = 0
    state_version: int = 0

    @classmethod
    def from_json(cls, value: Any) -> RuntimeVersion:
        """Build a runtime version from its JSON-RPC representation."""
        if not isinstance(value, dict):
            raise ValueError(f"invalid runtime version: {value!r}")
        return cls(
            spec_name=_field(value, "specName", str, ""),
            impl_name=_field(value, "implName", str, ""),
            authoring_version=_field(value, "authoringVersion", int, 0),
            spec_version=_field(value, "specVersion", int, 0),
            impl_version=_field(value, "implVersion", int, 0),
            apis=_parse_apis(value.get("apis", [])),
            transaction_version=_field(value, "transactionVersion", int, 0),
            state_version=_field(value, "stateVersion", int, 0),
        )

    def to_json(self) -> dict[str, Any]:
        """Return the JSON-RPC representation of this runtime version."""
        return {
            "specName": self.spec_name,
            "implName": self.impl_name,
            "authoringVersion": self.authoring_version,
            "specVersion": self.spec_version,
            "implVersion": self.impl_version,
            "apis": [[api_id, version] for api_id, version in self.apis],
            "transactionVersion": self.transaction_version,
            "stateVersion": self.state_version,
        }


class Api(ChainMixin, StateMixin, SystemMixin, PaymentMixin, EventsMixin, AuthorMixin):
    """Talks to a Substrate node through any RPC client.

    The genesis hash, the encoded metadata and the runtime version are
    cached; call ``update_runtime`` to refresh the latter two.
    """

    def __init__(
        self,
        client: Any,
        genesis_hash: str,
        metadata: bytes,
        runtime_version: RuntimeVersion,
    ) -> None:
        self.client = client
        self.genesis_hash = genesis_hash
        self.metadata = bytes(metadata)
        self.runtime_version = runtime_version
        self.signer: Any = None

    @classmethod
    def connect(cls, client: Any) -> Api:
        """Create an api, fetching genesis hash, metadata and runtime version from the node."""
        genesis_hash = cls._fetch_genesis_hash(client)
        _log.info("got genesis hash: %s", genesis_hash)
        metadata = cls._fetch_metadata(client)
        _log.debug("metadata: %d bytes", len(metadata))
        runtime_version = cls._fetch_runtime_version(client)
        _log.info("runtime version: %r", runtime_version)
        return cls(client, genesis_hash, metadata, runtime_version)

    @property
    def spec_version(self) -> int:
        """The cached spec version of the runtime."""
        return self.runtime_version.spec_version

    def set_signer(self, signer: Any) -> None:
        """Set the account that signs extrinsics."""
        self.signer = signer

    def update_runtime(self) -> None:
        """Refresh the cached metadata and runtime version from the node."""
        metadata = self._fetch_metadata(self.client)
        _log.debug("metadata: %d bytes", len(metadata))
        runtime_version = self._fetch_runtime_version(self.client)
        _log.info("runtime version: %r", runtime_version)
        self.metadata = metadata
        self.runtime_version = runtime_version

    @staticmethod
    def _fetch_genesis_hash(client: Any) -> str:
        genesis = client.request("chain_getBlockHash", [0])
        if genesis is None:
            raise FetchGenesisHashError("the node returned no genesis hash")
        if not isinstance(genesis, str):
            raise RpcError(f"invalid genesis hash: {genesis!r}")
        return genesis

    @staticmethod
    def _fetch_runtime_version(client: Any) -> RuntimeVersion:
        raw = client.request("state_getRuntimeVersion", [])
        try:
            return RuntimeVersion.from_json(raw)
        except ValueError as exc:
            raise RpcError(str(exc)) from exc

    @staticmethod
    def _fetch_metadata(client: Any) -> bytes:
        raw = client.request("state_getMetadata", [])
        if not isinstance(raw, str):
            raise RpcError(f"invalid metadata: {raw!r}")
        try:
            metadata = decode_hex(raw)
        except ValueError as exc:
            raise ApiError(str(exc)) from exc
        if not metadata.startswith(_METADATA_MAGIC):
            raise ApiError("metadata lacks the 'meta' magic prefix")
        return metadata