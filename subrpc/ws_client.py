"""WebSocket JSON-RPC client with request and subscription support."""

from __future__ import annotations

import json
import logging
import queue
import threading
import time
from collections.abc import Iterator, Sequence
from typing import Any
from urllib.parse import urlparse

import websocket

from subrpc.errors import (
    ConnectionClosedError,
    InvalidUrlError,
    MaxConnectionAttemptsExceededError,
    RpcError,
)
from subrpc.rpc import Request, Subscribe, Subscription, to_json_req

_log = logging.getLogger(__name__)

DEFAULT_URL = "ws://127.0.0.1:9944"
_RECONNECT_DELAY = 5.0
_END = object()


def should_reconnect(error: BaseException) -> bool:
    """Return True if a subscription should reconnect after ``error``.

    Malformed JSON, a closed connection and websocket transport errors are
    worth another attempt; anything else ends the subscription.
    """
    return isinstance(
        error,
        (json.JSONDecodeError, ConnectionClosedError, websocket.WebSocketException),
    )


def parse_response_result(message: str) -> Any:
    """Return the ``result`` member of a JSON-RPC response, or None if absent.

    Raises json.JSONDecodeError if ``message`` is not valid JSON.
    """
    value = json.loads(message)
    if isinstance(value, dict):
        return value.get("result")
    return None


def parse_subscription_notification(message: str) -> Any:
    """Return the result carried by a subscription notification.

    Replies that carry a string ``id`` are answers to a request rather than
    notifications; for them None is returned. Raises json.JSONDecodeError
    if ``message`` is not valid JSON.
    """
    value = json.loads(message)
    if not isinstance(value, dict):
        return None
    if isinstance(value.get("id"), str):
        _log.warning("expected a subscription, but received an id response: %r", value)
        return None
    params = value.get("params")
    if not isinstance(params, dict):
        return None
    return params.get("result")


def _read_text(sock: Any) -> str:
    """Read frames until a text frame arrives and return its text."""
    while True:
        try:
            opcode, data = sock.recv_data()
        except websocket.WebSocketConnectionClosedException as exc:
            raise ConnectionClosedError("connection closed by the node") from exc
        if opcode == websocket.ABNF.OPCODE_TEXT:
            if isinstance(data, (bytes, bytearray)):
                return bytes(data).decode("utf-8")
            return data
        if opcode == websocket.ABNF.OPCODE_CLOSE:
            raise ConnectionClosedError("connection closed by the node")
        _log.debug("skipping frame with opcode %#x", opcode)


class WebSocketSubscription(Subscription):
    """Notifications of one subscription, delivered through a queue."""

    def __init__(self, notifications: queue.Queue) -> None:
        self._notifications = notifications
        self._stopped = threading.Event()
        self._lock = threading.Lock()
        self._socket: Any = None

    def next(self) -> Any:
        """Block until the next notification; None once the stream has ended."""
        if self._stopped.is_set():
            return None
        item = self._notifications.get()
        if item is _END:
            self._notifications.put(_END)
            return None
        return item

    def unsubscribe(self) -> None:
        """Stop the subscription and close its connection."""
        self._stopped.set()
        self._notifications.put(_END)
        with self._lock:
            sock, self._socket = self._socket, None
        if sock is not None:
            try:
                sock.close()
            except (websocket.WebSocketException, OSError) as exc:
                _log.error("could not shut down websocket connection: %r", exc)

    def __iter__(self) -> Iterator[Any]:
        while (item := self.next()) is not None:
            yield item

    def _attach(self, sock: Any) -> bool:
        with self._lock:
            if not self._stopped.is_set():
                self._socket = sock
                return True
        sock.close()
        return False

    def _detach(self, sock: Any) -> None:
        with self._lock:
            if self._socket is sock:
                self._socket = None

    def _finish(self) -> None:
        self._notifications.put(_END)


class WebSocketRpcClient(Request, Subscribe):
    """JSON-RPC client that opens a websocket connection per request or subscription."""

    def __init__(self, url: str, max_attempts: int) -> None:
        try:
            parsed = urlparse(url)
        except ValueError as exc:
            raise InvalidUrlError(f"invalid url: {url!r}") from exc
        if not parsed.scheme or not parsed.netloc:
            raise InvalidUrlError(f"invalid url: {url!r}")
        if not 0 <= max_attempts <= 255:
            raise ValueError(f"max_attempts must be between 0 and 255, got {max_attempts}")
        self.url = url
        self.max_attempts = max_attempts

    @classmethod
    def with_default_url(cls, max_attempts: int) -> WebSocketRpcClient:
        """Return a client for a node on the local default port."""
        return cls(DEFAULT_URL, max_attempts)

    def request(self, method: str, params: Sequence[Any] | None = None) -> Any:
        json_req = to_json_req(method, params)
        sock = self._connect()
        try:
            sock.send(json_req)
            message = _read_text(sock)
        except (websocket.WebSocketException, OSError) as exc:
            raise RpcError(f"websocket error: {exc}") from exc
        finally:
            sock.close()
        _log.debug("got response %s", message)
        return parse_response_result(message)

    def subscribe(
        self, sub: str, params: Sequence[Any] | None, unsub: str
    ) -> WebSocketSubscription:
        json_req = to_json_req(sub, params)
        subscription = WebSocketSubscription(queue.Queue())
        worker = threading.Thread(
            target=self._run_subscription,
            args=(json_req, subscription),
            name="subscription",
            daemon=True,
        )
        worker.start()
        return subscription

    def _connect(self) -> Any:
        for attempt in range(self.max_attempts + 1):
            try:
                return websocket.create_connection(self.url)
            except (websocket.WebSocketException, OSError) as exc:
                _log.warning("connection attempt failed due to %r", exc)
            _log.debug("trying to reconnect, current attempt %d", attempt)
            time.sleep(_RECONNECT_DELAY)
        raise MaxConnectionAttemptsExceededError(
            f"could not connect to {self.url} after {self.max_attempts + 1} attempts"
        )

    def _run_subscription(self, json_req: str, subscription: WebSocketSubscription) -> None:
        try:
            for _ in range(self.max_attempts + 1):
                if subscription._stopped.is_set():
                    break
                try:
                    self._stream_notifications(json_req, subscription)
                except Exception as error:
                    if subscription._stopped.is_set():
                        break
                    if not should_reconnect(error):
                        _log.debug("subscription ended: %r", error)
                        break
                    _log.debug("subscription interrupted, reconnecting: %r", error)
        finally:
            subscription._finish()

    def _stream_notifications(self, json_req: str, subscription: WebSocketSubscription) -> None:
        sock = self._connect()
        if not subscription._attach(sock):
            return
        try:
            sock.send(json_req)
            while not subscription._stopped.is_set():
                message = _read_text(sock)
                _log.debug("got subscription message %s", message)
                notification = parse_subscription_notification(message)
                if notification is not None:
                    subscription._notifications.put(notification)
        finally:
            subscription._detach(sock)
            sock.close()