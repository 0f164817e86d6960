"""Synchronous JSON-RPC client for Substrate-based nodes over WebSocket."""

__version__ = "0.1.0"