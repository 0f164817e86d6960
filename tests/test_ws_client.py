import json
import queue
from unittest import mock

import pytest
import websocket

from subrpc.errors import (
    ConnectionClosedError,
    InvalidUrlError,
    MaxConnectionAttemptsExceededError,
    RpcError,
)
from subrpc.rpc import to_json_req
from subrpc.ws_client import (
    WebSocketRpcClient,
    WebSocketSubscription,
    parse_response_result,
    parse_subscription_notification,
    should_reconnect,
)


class FakeSocket:
    def __init__(self, frames):
        self._frames = list(frames)
        self.sent = []
        self.closed = False

    def send(self, payload):
        self.sent.append(payload)

    def recv_data(self):
        if not self._frames:
            raise websocket.WebSocketConnectionClosedException("closed")
        frame = self._frames.pop(0)
        if isinstance(frame, BaseException):
            raise frame
        return frame

    def close(self):
        self.closed = True


def text(obj):
    return (websocket.ABNF.OPCODE_TEXT, json.dumps(obj).encode("utf-8"))


def notification(result):
    return text(
        {"jsonrpc": "2.0", "method": "sub", "params": {"subscription": "s1", "result": result}}
    )


def _json_error():
    try:
        json.loads("{not json")
    except json.JSONDecodeError as exc:
        return exc
    raise AssertionError("expected a decode error")


def test_should_reconnect_on_transient_errors():
    assert should_reconnect(ConnectionClosedError()) is True
    assert should_reconnect(_json_error()) is True
    assert should_reconnect(websocket.WebSocketException("boom")) is True


def test_should_not_reconnect_on_other_errors():
    assert should_reconnect(MaxConnectionAttemptsExceededError()) is False
    assert should_reconnect(InvalidUrlError("x")) is False
    assert should_reconnect(RpcError("x")) is False
    assert should_reconnect(OSError("io")) is False


def test_parse_response_result_returns_result():
    message = '{"jsonrpc":"2.0","result":"0xabc","id":"1"}'
    assert parse_response_result(message) == "0xabc"


def test_parse_response_result_missing_result_is_none():
    assert parse_response_result('{"jsonrpc":"2.0","id":"1"}') is None


def test_parse_response_result_invalid_json():
    with pytest.raises(ValueError):
        parse_response_result("{not json")


def test_parse_subscription_notification_skips_id_responses():
    assert parse_subscription_notification('{"jsonrpc":"2.0","result":"s1","id":"1"}') is None


def test_parse_subscription_notification_returns_result():
    message = json.dumps(
        {"jsonrpc": "2.0", "method": "m", "params": {"subscription": "s1", "result": {"a": 1}}}
    )
    assert parse_subscription_notification(message) == {"a": 1}


def test_invalid_url_raises():
    with pytest.raises(InvalidUrlError):
        WebSocketRpcClient("not a url", 1)


def test_max_attempts_out_of_range():
    with pytest.raises(ValueError):
        WebSocketRpcClient("ws://localhost:9944", 256)


def test_with_default_url():
    client = WebSocketRpcClient.with_default_url(3)
    assert client.url == "ws://127.0.0.1:9944"
    assert client.max_attempts == 3


def test_request_skips_non_text_frames_and_returns_result():
    sock = FakeSocket(
        [
            (websocket.ABNF.OPCODE_BINARY, b"\x00"),
            (websocket.ABNF.OPCODE_PONG, b""),
            text({"jsonrpc": "2.0", "result": ["0x01", "0x02"], "id": "1"}),
        ]
    )
    client = WebSocketRpcClient("ws://localhost:9944", 0)
    with mock.patch("websocket.create_connection", return_value=sock):
        result = client.request("state_getKeys", ["0x00"])
    assert result == ["0x01", "0x02"]
    assert sock.sent == [to_json_req("state_getKeys", ["0x00"])]
    assert sock.closed is True


def test_request_close_frame_raises_connection_closed():
    sock = FakeSocket([(websocket.ABNF.OPCODE_CLOSE, b"")])
    client = WebSocketRpcClient("ws://localhost:9944", 0)
    with mock.patch("websocket.create_connection", return_value=sock):
        with pytest.raises(ConnectionClosedError):
            client.request("system_name", [])
    assert sock.closed is True


def test_request_gives_up_after_max_attempts():
    client = WebSocketRpcClient("ws://localhost:9944", 2)
    with mock.patch(
        "websocket.create_connection", side_effect=ConnectionRefusedError("refused")
    ) as connect, mock.patch("time.sleep") as sleep:
        with pytest.raises(MaxConnectionAttemptsExceededError):
            client.request("system_name", [])
    assert connect.call_count == 3
    assert sleep.call_count == 3


def test_subscribe_delivers_notifications_until_stream_ends():
    sock = FakeSocket(
        [
            text({"jsonrpc": "2.0", "result": "s1", "id": "1"}),
            notification({"block": 1}),
            notification({"block": 2}),
            (websocket.ABNF.OPCODE_CLOSE, b""),
        ]
    )
    client = WebSocketRpcClient("ws://localhost:9944", 0)
    with mock.patch("websocket.create_connection", return_value=sock):
        subscription = client.subscribe("chain_subscribeFinalizedHeads", [], "unsub")
        received = list(subscription)
    assert received == [{"block": 1}, {"block": 2}]
    assert sock.sent == [to_json_req("chain_subscribeFinalizedHeads", [])]
    assert subscription.next() is None


def test_subscribe_reconnects_after_connection_closed():
    first = FakeSocket([notification("a")])
    second = FakeSocket([notification("b")])
    client = WebSocketRpcClient("ws://localhost:9944", 1)
    with mock.patch("websocket.create_connection", side_effect=[first, second]), mock.patch(
        "time.sleep"
    ):
        subscription = client.subscribe("state_subscribeStorage", [["0x00"]], "unsub")
        received = list(subscription)
    assert received == ["a", "b"]
    assert first.closed and second.closed


def test_subscribe_stops_on_non_reconnect_error():
    sock = FakeSocket([OSError("io failure"), notification("never")])
    client = WebSocketRpcClient("ws://localhost:9944", 5)
    with mock.patch("websocket.create_connection", return_value=sock) as connect:
        subscription = client.subscribe("state_subscribeStorage", [], "unsub")
        received = list(subscription)
    assert received == []
    assert connect.call_count == 1


def test_subscription_returns_queued_items_then_none_after_unsubscribe():
    notifications = queue.Queue()
    notifications.put({"x": 1})
    notifications.put({"x": 2})
    subscription = WebSocketSubscription(notifications)
    assert subscription.next() == {"x": 1}
    subscription.unsubscribe()
    assert subscription.next() is None
    assert list(subscription) == []