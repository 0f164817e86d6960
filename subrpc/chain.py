"""Chain queries: block hashes, headers, blocks and finalized-head subscriptions."""

from __future__ import annotations

from typing import Any

from subrpc.errors import RpcError
from subrpc.rpc import Subscription


class ChainMixin:
    """Chain RPC calls. The host class provides ``client``, an RPC client."""

    client: Any

    def get_finalized_head(self) -> str | None:
        """Return the hash of the last finalized block."""
        return self.client.request("chain_getFinalizedHead", [])

    def get_header(self, hash: str | None = None) -> dict[str, Any] | None:
        """Return the header of block ``hash``, or of the best block if None."""
        return self.client.request("chain_getHeader", [hash])

    def get_block_hash(self, number: int | None = None) -> str | None:
        """Return the hash of block ``number``, or of the best block if None."""
        return self.client.request("chain_getBlockHash", [number])

    def get_block(self, hash: str | None = None) -> dict[str, Any] | None:
        """Return block ``hash`` without its justifications."""
        return _block_of(self.get_signed_block(hash))

    def get_block_by_num(self, number: int | None = None) -> dict[str, Any] | None:
        """Return block ``number`` without its justifications."""
        return _block_of(self.get_signed_block_by_num(number))

    def get_signed_block(self, hash: str | None = None) -> dict[str, Any] | None:
        """Return block ``hash`` together with its justifications, which may be None."""
        return self.client.request("chain_getBlock", [hash])

    def get_signed_block_by_num(self, number: int | None = None) -> dict[str, Any] | None:
        """Return block ``number`` together with its justifications."""
        return self.get_signed_block(self.get_block_hash(number))

    def subscribe_finalized_heads(self) -> Subscription:
        """Subscribe to the headers of newly finalized blocks."""
        return self.client.subscribe(
            "chain_subscribeFinalizedHeads", [], "chain_unsubscribeFinalizedHeads"
        )


def _block_of(signed_block: Any) -> dict[str, Any] | None:
    if signed_block is None:
        return None
    if not isinstance(signed_block, dict) or "block" not in signed_block:
        raise RpcError(f"invalid signed block: {signed_block!r}")
    return signed_block["block"]