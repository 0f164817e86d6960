from typing import Any

import pytest

from subrpc.chain import ChainMixin
from subrpc.errors import RpcError
from subrpc.rpc import Request, Subscribe, Subscription


class FakeSubscription(Subscription):
    def next(self):
        return None

    def unsubscribe(self):
        pass


class RecordingClient(Request, Subscribe):
    def __init__(self, responses: dict[str, Any]):
        self.responses = responses
        self.calls: list[tuple[str, list]] = []
        self.subscriptions: list[tuple[str, list, str]] = []
        self.subscription = FakeSubscription()

    def request(self, method, params=None):
        self.calls.append((method, list(params or [])))
        return self.responses.get(method)

    def subscribe(self, sub, params, unsub):
        self.subscriptions.append((sub, list(params or []), unsub))
        return self.subscription


class Node(ChainMixin):
    def __init__(self, client):
        self.client = client


BLOCK_HASH = "0x" + "11" * 32
SIGNED_BLOCK = {"block": {"header": {"number": "0x5"}, "extrinsics": []}, "justifications": None}


def test_get_finalized_head():
    client = RecordingClient({"chain_getFinalizedHead": BLOCK_HASH})
    assert ChainMixin.get_finalized_head(Node(client)) == BLOCK_HASH
    assert client.calls == [("chain_getFinalizedHead", [])]


def test_get_header_passes_hash():
    header = {"number": "0x1"}
    client = RecordingClient({"chain_getHeader": header})
    assert ChainMixin.get_header(Node(client), BLOCK_HASH) == header
    assert client.calls == [("chain_getHeader", [BLOCK_HASH])]


def test_get_header_none_sends_null():
    client = RecordingClient({})
    assert ChainMixin.get_header(Node(client)) is None
    assert client.calls == [("chain_getHeader", [None])]


def test_get_block_hash():
    client = RecordingClient({"chain_getBlockHash": BLOCK_HASH})
    assert ChainMixin.get_block_hash(Node(client), 7) == BLOCK_HASH
    assert client.calls == [("chain_getBlockHash", [7])]


def test_get_signed_block_and_block():
    client = RecordingClient({"chain_getBlock": SIGNED_BLOCK})
    node = Node(client)
    assert ChainMixin.get_signed_block(node, BLOCK_HASH) == SIGNED_BLOCK
    assert ChainMixin.get_block(node, BLOCK_HASH) == SIGNED_BLOCK["block"]
    assert client.calls == [("chain_getBlock", [BLOCK_HASH])] * 2


def test_get_block_missing_returns_none():
    assert ChainMixin.get_block(Node(RecordingClient({})), BLOCK_HASH) is None


def test_get_block_invalid_response_raises():
    client = RecordingClient({"chain_getBlock": {"header": {}}})
    with pytest.raises(RpcError):
        ChainMixin.get_block(Node(client), BLOCK_HASH)


def test_get_block_by_num_looks_up_hash_first():
    client = RecordingClient({"chain_getBlockHash": BLOCK_HASH, "chain_getBlock": SIGNED_BLOCK})
    assert ChainMixin.get_block_by_num(Node(client), 3) == SIGNED_BLOCK["block"]
    assert client.calls == [("chain_getBlockHash", [3]), ("chain_getBlock", [BLOCK_HASH])]


def test_get_signed_block_by_num_unknown_hash_queries_best_block():
    client = RecordingClient({"chain_getBlock": SIGNED_BLOCK})
    assert ChainMixin.get_signed_block_by_num(Node(client), 99) == SIGNED_BLOCK
    assert client.calls == [("chain_getBlockHash", [99]), ("chain_getBlock", [None])]


def test_subscribe_finalized_heads():
    client = RecordingClient({})
    assert ChainMixin.subscribe_finalized_heads(Node(client)) is client.subscription
    assert client.subscriptions == [
        ("chain_subscribeFinalizedHeads", [], "chain_unsubscribeFinalizedHeads")
    ]