"""Extrinsic submission and watching of its transaction status."""

from __future__ import annotations

import logging
from typing import Any

from subrpc.errors import NoStreamError, RpcError
from subrpc.hashing import blake2_256, encode_hex
from subrpc.rpc import Subscription
from subrpc.status import ExtrinsicReport, TransactionStatus, XtStatus

_log = logging.getLogger(__name__)


class AuthorMixin:
    """Author RPC calls. The host class provides ``client``, an RPC client."""

    client: Any

    def submit_extrinsic(self, encoded_extrinsic: bytes) -> str:
        """Submit an encoded extrinsic and return its hash."""
        params = [bytes(encoded_extrinsic)]
        _log.debug("sending extrinsic: %s", encode_hex(params[0]))
        return self.client.request("author_submitExtrinsic", params)

    def submit_and_watch_extrinsic(self, encoded_extrinsic: bytes) -> Subscription:
        """Submit an encoded extrinsic and return a subscription to its status."""
        return self.client.subscribe(
            "author_submitAndWatchExtrinsic",
            [bytes(encoded_extrinsic)],
            "author_unsubmitAndWatchExtrinsic",
        )

    def submit_and_watch_extrinsic_until(
        self, encoded_extrinsic: bytes, watch_until: XtStatus
    ) -> ExtrinsicReport:
        """Submit an encoded extrinsic and block until ``watch_until`` is reached.

        Raises UnexpectedTxStatusError on a status that ends the watch, and
        NoStreamError if the subscription ends first.
        """
        encoded = bytes(encoded_extrinsic)
        tx_hash = encode_hex(blake2_256(encoded))
        subscription = self.submit_and_watch_extrinsic(encoded)
        while (notification := subscription.next()) is not None:
            try:
                status = TransactionStatus.from_json(notification)
            except ValueError as exc:
                raise RpcError(str(exc)) from exc
            try:
                status.check_expected()
            except Exception:
                subscription.unsubscribe()
                raise
            if status.reached_status(watch_until):
                subscription.unsubscribe()
                return ExtrinsicReport(
                    extrinsic_hash=tx_hash,
                    block_hash=status.maybe_block_hash(),
                    status=status,
                    events=None,
                )
        raise NoStreamError("transaction status stream ended unexpectedly")