"""Transaction payment queries: fee details and dispatch info of extrinsics."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from subrpc.errors import NumberConversionError, RpcError

_BALANCE_LIMIT = 1 << 128


def number_or_hex_to_int(value: Any) -> int:
    """Convert a JSON number or ``0x`` hex string into a 128-bit balance.

    Raises NumberConversionError if the value is malformed, negative or too large.
    """
    if isinstance(value, bool):
        raise NumberConversionError(f"not a number: {value!r}")
    if isinstance(value, int):
        number = value
    elif isinstance(value, str):
        if value[:2] not in ("0x", "0X") or "_" in value:
            raise NumberConversionError(f"invalid hex number: {value!r}")
        try:
            number = int(value[2:], 16)
        except ValueError as exc:
            raise NumberConversionError(f"invalid hex number: {value!r}") from exc
    else:
        raise NumberConversionError(f"not a number: {value!r}")
    if not 0 <= number < _BALANCE_LIMIT:
        raise NumberConversionError(f"number out of balance range: {value!r}")
    return number


@dataclass(frozen=True)
class InclusionFee:
    """Fee charged for including an extrinsic in a block."""

    base_fee: int
    len_fee: int
    adjusted_weight_fee: int

    @classmethod
    def from_json(cls, value: Any) -> InclusionFee:
        """Build the fee from its JSON-RPC representation."""
        try:
            return cls(
                base_fee=number_or_hex_to_int(value["baseFee"]),
                len_fee=number_or_hex_to_int(value["lenFee"]),
                adjusted_weight_fee=number_or_hex_to_int(value["adjustedWeightFee"]),
            )
        except (KeyError, TypeError) as exc:
            raise ValueError(f"invalid inclusion fee: {value!r}") from exc


@dataclass(frozen=True)
class FeeDetails:
    """Breakdown of the fee of an extrinsic."""

    inclusion_fee: InclusionFee | None
    tip: int = 0

    @classmethod
    def from_json(cls, value: Any) -> FeeDetails:
        """Build fee details from their JSON-RPC representation."""
        if not isinstance(value, dict):
            raise ValueError(f"invalid fee details: {value!r}")
        raw_fee = value.get("inclusionFee")
        inclusion_fee = None if raw_fee is None else InclusionFee.from_json(raw_fee)
        tip = number_or_hex_to_int(value.get("tip", 0))
        return cls(inclusion_fee=inclusion_fee, tip=tip)


class PaymentMixin:
    """Transaction payment RPC calls. The host class provides ``client``."""

    client: Any

    def get_fee_details(
        self, encoded_extrinsic: bytes, at_block: str | None = None
    ) -> FeeDetails | None:
        """Return the fee details of ``encoded_extrinsic``, or None if unavailable."""
        details = self.client.request(
            "payment_queryFeeDetails", [encoded_extrinsic, at_block]
        )
        if details is None:
            return None
        try:
            return FeeDetails.from_json(details)
        except ValueError as exc:
            if isinstance(exc, NumberConversionError):
                raise
            raise RpcError(str(exc)) from exc

    def get_payment_info(
        self, encoded_extrinsic: bytes, at_block: str | None = None
    ) -> dict[str, Any] | None:
        """Return the dispatch info (weight, class, partial fee) of ``encoded_extrinsic``."""
        return self.client.request("payment_queryInfo", [encoded_extrinsic, at_block])