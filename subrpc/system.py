"""System RPC calls describing the node and the chain it runs."""

from __future__ import annotations

from typing import Any

from subrpc.errors import RpcError


def _checked(value: Any, expected: type | tuple[type, ...], method: str) -> Any:
    if not isinstance(value, expected):
        raise RpcError(f"invalid response to {method}: {value!r}")
    return value


class SystemMixin:
    """System RPC calls. The host class provides ``client``, an RPC client."""

    client: Any

    def _string(self, method: str) -> str:
        return _checked(self.client.request(method, []), str, method)

    def get_system_name(self) -> str:
        """Return the node's implementation name."""
        return self._string("system_name")

    def get_system_version(self) -> str:
        """Return the node implementation's version."""
        return self._string("system_version")

    def get_system_chain(self) -> str:
        """Return the chain's name."""
        return self._string("system_chain")

    def get_system_chain_type(self) -> str | dict[str, Any]:
        """Return the chain's type, a name or a ``{"Custom": name}`` mapping."""
        method = "system_chainType"
        return _checked(self.client.request(method, []), (str, dict), method)

    def get_system_properties(self) -> dict[str, Any]:
        """Return the custom properties defined in the chain spec."""
        method = "system_properties"
        return _checked(self.client.request(method, []), dict, method)

    def get_system_health(self) -> dict[str, Any]:
        """Return the node's health: peers, sync state and whether it should have peers."""
        method = "system_health"
        return _checked(self.client.request(method, []), dict, method)

    def get_system_local_peer_id(self) -> str:
        """Return the base58-encoded peer id of the node."""
        return self._string("system_localPeerId")

    def get_system_local_listen_addresses(self) -> list[str]:
        """Return the multi-addresses the node listens on."""
        method = "system_localListenAddresses"
        addresses = _checked(self.client.request(method, []), list, method)
        if not all(isinstance(address, str) for address in addresses):
            raise RpcError(f"invalid response to {method}: {addresses!r}")
        return addresses