"""Client interfaces for JSON-RPC requests and subscriptions, plus a mock client."""

from __future__ import annotations

import json
import threading
from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from typing import Any

from subrpc.errors import RpcError
from subrpc.hashing import encode_hex


def _to_json_value(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray, memoryview)):
        return encode_hex(bytes(value))
    if isinstance(value, Mapping):
        return {key: _to_json_value(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_json_value(item) for item in value]
    return value


def to_json_req(method: str, params: Sequence[Any] | None = None) -> str:
    """Build the JSON-RPC 2.0 request text for ``method`` with positional ``params``.

    Byte strings among the parameters are sent as ``0x``-prefixed hex.
    """
    request = {
        "method": method,
        "params": _to_json_value(list(params or ())),
        "jsonrpc": "2.0",
        "id": "1",
    }
    return json.dumps(request, separators=(",", ":"), sort_keys=True)


class Request(ABC):
    """A client able to send RPC requests to a node."""

    @abstractmethod
    def request(self, method: str, params: Sequence[Any] | None = None) -> Any:
        """Send a request and return the decoded ``result`` value."""


class Subscription(ABC):
    """A stream of notifications from a node subscription."""

    @abstractmethod
    def next(self) -> Any:
        """Return the next notification, or None once the stream has ended."""

    @abstractmethod
    def unsubscribe(self) -> None:
        """End the subscription."""


class Subscribe(ABC):
    """A client able to open subscriptions on a node."""

    @abstractmethod
    def subscribe(
        self, sub: str, params: Sequence[Any] | None, unsub: str
    ) -> Subscription:
        """Subscribe with method ``sub``; ``unsub`` names the closing method."""


class MockRpcClient(Request):
    """A client answering each method with a fixed, serialized JSON response."""

    def __init__(self, state: Mapping[str, str] | None = None) -> None:
        self._state: dict[str, str] = dict(state or {})
        self._lock = threading.Lock()

    def update_entry(self, key: str, value: str) -> None:
        """Set the serialized response for method ``key``."""
        with self._lock:
            self._state[key] = value

    def request(self, method: str, params: Sequence[Any] | None = None) -> Any:
        with self._lock:
            try:
                response = self._state[method]
            except KeyError:
                raise RpcError(f"no mock response for method {method!r}") from None
        return json.loads(response)