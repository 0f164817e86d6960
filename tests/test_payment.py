from typing import Any

import pytest

from subrpc.errors import NumberConversionError, RpcError
from subrpc.payment import FeeDetails, InclusionFee, PaymentMixin, number_or_hex_to_int
from subrpc.rpc import Request


class RecordingClient(Request):
    def __init__(self, responses: dict[str, Any]):
        self.responses = responses
        self.calls: list[tuple[str, list]] = []

    def request(self, method, params=None):
        self.calls.append((method, list(params or [])))
        return self.responses.get(method)


class Node(PaymentMixin):
    def __init__(self, client):
        self.client = client


BLOCK_HASH = "0x" + "33" * 32


def test_number_passes_through():
    assert number_or_hex_to_int(125) == 125


def test_hex_value_is_parsed():
    assert number_or_hex_to_int("0x10") == 16


@pytest.mark.parametrize("number", [0, 1, 1000, 2**64, 2**128 - 1])
def test_hex_round_trip(number):
    assert number_or_hex_to_int(hex(number)) == number


@pytest.mark.parametrize(
    "value", [hex(2**128), 2**128, -1, True, None, "10", "0x", "0xzz", "0x1_0", 1.5]
)
def test_invalid_numbers_raise(value):
    with pytest.raises(NumberConversionError):
        number_or_hex_to_int(value)


def test_inclusion_fee_from_json():
    fee = InclusionFee.from_json(
        {"baseFee": 10, "lenFee": hex(2**100), "adjustedWeightFee": "0x0"}
    )
    assert fee == InclusionFee(base_fee=10, len_fee=2**100, adjusted_weight_fee=0)


def test_inclusion_fee_missing_field_raises():
    with pytest.raises(ValueError):
        InclusionFee.from_json({"baseFee": 10})


def test_fee_details_without_inclusion_fee():
    details = FeeDetails.from_json({"inclusionFee": None})
    assert details == FeeDetails(inclusion_fee=None, tip=0)


def test_fee_details_with_tip():
    details = FeeDetails.from_json(
        {"inclusionFee": {"baseFee": 1, "lenFee": 2, "adjustedWeightFee": 3}, "tip": 4}
    )
    assert details.inclusion_fee == InclusionFee(1, 2, 3)
    assert details.tip == 4


def test_get_fee_details():
    raw = {"inclusionFee": {"baseFee": "0x5", "lenFee": 7, "adjustedWeightFee": 9}}
    client = RecordingClient({"payment_queryFeeDetails": raw})
    details = PaymentMixin.get_fee_details(Node(client), b"\x01\x02", BLOCK_HASH)
    assert details == FeeDetails(InclusionFee(5, 7, 9))
    assert client.calls == [("payment_queryFeeDetails", [b"\x01\x02", BLOCK_HASH])]


def test_get_fee_details_none():
    assert PaymentMixin.get_fee_details(Node(RecordingClient({})), b"\x01") is None


def test_get_fee_details_out_of_range_raises():
    raw = {"inclusionFee": {"baseFee": hex(2**130), "lenFee": 0, "adjustedWeightFee": 0}}
    node = Node(RecordingClient({"payment_queryFeeDetails": raw}))
    with pytest.raises(NumberConversionError):
        PaymentMixin.get_fee_details(node, b"\x01")


def test_get_fee_details_malformed_raises():
    node = Node(RecordingClient({"payment_queryFeeDetails": [1]}))
    with pytest.raises(RpcError):
        PaymentMixin.get_fee_details(node, b"\x01")


def test_get_payment_info():
    info = {"weight": {"refTime": 1, "proofSize": 2}, "class": "normal", "partialFee": "3"}
    client = RecordingClient({"payment_queryInfo": info})
    assert PaymentMixin.get_payment_info(Node(client), b"\x09") == info
    assert client.calls == [("payment_queryInfo", [b"\x09", None])]