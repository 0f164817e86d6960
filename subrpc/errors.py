"""Exceptions raised by the RPC layer and the node API."""

from __future__ import annotations

from enum import Enum


class UnexpectedTxStatus(Enum):
    """Transaction statuses that end a watch with an error."""

    FUTURE = "future"
    RETRACTED = "retracted"
    FINALITY_TIMEOUT = "finalityTimeout"
    USURPED = "usurped"
    DROPPED = "dropped"
    INVALID = "invalid"


class RpcError(Exception):
    """Failure of an RPC client while talking to a node."""


class ConnectionClosedError(RpcError):
    """The connection to the node was closed."""


class MaxConnectionAttemptsExceededError(RpcError):
    """No connection could be made within the allowed attempts."""


class InvalidUrlError(RpcError):
    """The node URL could not be parsed."""


class ApiError(Exception):
    """Failure of a node API operation."""


class FetchGenesisHashError(ApiError):
    """The genesis hash could not be fetched from the node."""


class NoSignerError(ApiError):
    """A signer was expected, but none is assigned."""


class UnexpectedTxStatusError(ApiError):
    """An unexpected transaction status was met while watching an extrinsic."""

    def __init__(self, status: UnexpectedTxStatus) -> None:
        super().__init__(f"unexpected transaction status: {status.name}")
        self.status = status


class NoStreamError(ApiError):
    """The subscription stream ended unexpectedly."""


class ExtrinsicNotFoundError(ApiError):
    """The expected extrinsic could not be found."""


class BlockHashNotFoundError(ApiError):
    """The expected block hash could not be found."""


class BlockNotFoundError(ApiError):
    """The expected block could not be found."""


class NumberConversionError(ApiError):
    """A number sent by the node could not be converted."""