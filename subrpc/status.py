"""Transaction status types and reports returned while watching extrinsics."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any

from subrpc.errors import UnexpectedTxStatus, UnexpectedTxStatusError
from subrpc.hashing import decode_hex, encode_hex


class XtStatus(IntEnum):
    """Status up to which a submitted extrinsic is watched."""

    READY = 1
    BROADCAST = 2
    IN_BLOCK = 3
    FINALIZED = 6


class TxStatusKind(IntEnum):
    """Every status a transaction can report, in order of progress."""

    FUTURE = 0
    READY = 1
    BROADCAST = 2
    IN_BLOCK = 3
    RETRACTED = 4
    FINALITY_TIMEOUT = 5
    FINALIZED = 6
    USURPED = 7
    DROPPED = 8
    INVALID = 9


_TAGS = {
    TxStatusKind.FUTURE: "future",
    TxStatusKind.READY: "ready",
    TxStatusKind.BROADCAST: "broadcast",
    TxStatusKind.IN_BLOCK: "inBlock",
    TxStatusKind.RETRACTED: "retracted",
    TxStatusKind.FINALITY_TIMEOUT: "finalityTimeout",
    TxStatusKind.FINALIZED: "finalized",
    TxStatusKind.USURPED: "usurped",
    TxStatusKind.DROPPED: "dropped",
    TxStatusKind.INVALID: "invalid",
}
_KINDS_BY_TAG = {tag: kind for kind, tag in _TAGS.items()}

_UNIT_KINDS = frozenset(
    {TxStatusKind.FUTURE, TxStatusKind.READY, TxStatusKind.DROPPED, TxStatusKind.INVALID}
)

_BLOCK_HASH_KINDS = frozenset(
    {
        TxStatusKind.IN_BLOCK,
        TxStatusKind.RETRACTED,
        TxStatusKind.FINALITY_TIMEOUT,
        TxStatusKind.FINALIZED,
    }
)

_UNEXPECTED = {
    TxStatusKind.FUTURE: UnexpectedTxStatus.FUTURE,
    TxStatusKind.RETRACTED: UnexpectedTxStatus.RETRACTED,
    TxStatusKind.FINALITY_TIMEOUT: UnexpectedTxStatus.FINALITY_TIMEOUT,
    TxStatusKind.USURPED: UnexpectedTxStatus.USURPED,
    TxStatusKind.DROPPED: UnexpectedTxStatus.DROPPED,
    TxStatusKind.INVALID: UnexpectedTxStatus.INVALID,
}


@dataclass(frozen=True)
class TransactionStatus:
    """A transaction status event.

    ``hash`` carries the block hash (or, for ``USURPED``, the replacing
    transaction hash); ``peers`` carries the peers of a ``BROADCAST``.
    """

    kind: TxStatusKind
    hash: str | None = None
    peers: tuple[str, ...] = ()

    def as_int(self) -> int:
        """Return the numeric progress level of this status."""
        return int(self.kind)

    def check_expected(self) -> None:
        """Raise UnexpectedTxStatusError if this status ends a watch with an error."""
        unexpected = _UNEXPECTED.get(self.kind)
        if unexpected is not None:
            raise UnexpectedTxStatusError(unexpected)

    def reached_status(self, status: XtStatus) -> bool:
        """Return True if ``status`` has been reached or passed."""
        return self.as_int() >= int(status)

    def maybe_block_hash(self) -> str | None:
        """Return the block hash carried by this status, if any."""
        return self.hash if self.kind in _BLOCK_HASH_KINDS else None

    @classmethod
    def from_json(cls, value: Any) -> TransactionStatus:
        """Build a status from its JSON-RPC representation."""
        if isinstance(value, str):
            kind = _KINDS_BY_TAG.get(value)
            if kind is None or kind not in _UNIT_KINDS:
                raise ValueError(f"invalid transaction status: {value!r}")
            return cls(kind)
        if isinstance(value, dict) and len(value) == 1:
            ((tag, payload),) = value.items()
            kind = _KINDS_BY_TAG.get(tag)
            if kind is None or kind in _UNIT_KINDS:
                raise ValueError(f"invalid transaction status: {value!r}")
            if kind is TxStatusKind.BROADCAST:
                if not isinstance(payload, list) or not all(isinstance(p, str) for p in payload):
                    raise ValueError(f"invalid broadcast peers: {payload!r}")
                return cls(kind, peers=tuple(payload))
            if not isinstance(payload, str):
                raise ValueError(f"invalid hash in transaction status: {payload!r}")
            return cls(kind, hash=payload)
        raise ValueError(f"invalid transaction status: {value!r}")

    def to_json(self) -> Any:
        """Return the JSON-RPC representation of this status."""
        tag = _TAGS[self.kind]
        if self.kind in _UNIT_KINDS:
            return tag
        if self.kind is TxStatusKind.BROADCAST:
            return {tag: list(self.peers)}
        return {tag: self.hash}


@dataclass
class ExtrinsicReport:
    """What is known about a submitted extrinsic once watching ends."""

    extrinsic_hash: str
    block_hash: str | None
    status: TransactionStatus
    events: list[Any] | None = None


@dataclass(frozen=True)
class ReadProof:
    """A storage read proof at a given block."""

    at: str
    proof: tuple[bytes, ...] = field(default_factory=tuple)

    @classmethod
    def from_json(cls, value: Any) -> ReadProof:
        """Build a read proof from its JSON-RPC representation."""
        try:
            at = value["at"]
            proof = value["proof"]
        except (KeyError, TypeError) as exc:
            raise ValueError(f"invalid read proof: {value!r}") from exc
        if not isinstance(at, str) or not isinstance(proof, list):
            raise ValueError(f"invalid read proof: {value!r}")
        return cls(at=at, proof=tuple(decode_hex(item) for item in proof))

    def to_json(self) -> dict[str, Any]:
        """Return the JSON-RPC representation of this proof."""
        return {"at": self.at, "proof": [encode_hex(item) for item in self.proof]}