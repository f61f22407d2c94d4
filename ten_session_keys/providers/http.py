"""
JSON-RPC provider for a TEN gateway endpoint.

Implements the wallet provider interface over HTTP with httpx so the
session key subsystem can be driven from a script or the CLI, without a
browser wallet.
"""

from __future__ import annotations

import asyncio
import inspect
import itertools
import logging
from typing import Any, Dict, List, Optional

import httpx

from ..config import settings
from .base import Listener, ProviderEvent


logger = logging.getLogger(__name__)


class JsonRpcError(RuntimeError):
    """The endpoint answered with a JSON-RPC error object."""

    def __init__(self, error: Any):
        if isinstance(error, dict):
            message = error.get("message") or str(error)
            self.code = error.get("code")
            self.data = error.get("data")
        else:
            message = str(error)
            self.code = None
            self.data = None
        super().__init__(f"RPC error: {message}")


class JsonRpcProvider:
    """
    HTTP JSON-RPC provider with a minimal event emitter.

    ``disconnect`` is emitted once when the provider is closed; callers that
    detect a chain switch can ``emit("chainChanged", chain_id)`` themselves.
    """

    def __init__(
        self,
        rpc_url: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.rpc_url = rpc_url or settings.rpc_url
        self._client = client or httpx.AsyncClient(
            timeout=timeout if timeout is not None else settings.request_timeout_seconds
        )
        self._ids = itertools.count(1)
        self._listeners: Dict[str, List[Listener]] = {}
        self._closed = False

    async def request(self, method: str, params: Optional[List[Any]] = None) -> Any:
        payload = {
            "jsonrpc": "2.0",
            "method": method,
            "params": params or [],
            "id": next(self._ids),
        }

        response = await self._client.post(self.rpc_url, json=payload)
        response.raise_for_status()
        result = response.json()

        if "error" in result:
            raise JsonRpcError(result["error"])

        return result.get("result")

    def on(self, event: str, listener: Listener) -> None:
        self._listeners.setdefault(event, []).append(listener)

    def remove_listener(self, event: str, listener: Listener) -> None:
        listeners = self._listeners.get(event, [])
        if listener in listeners:
            listeners.remove(listener)

    def listener_count(self, event: str) -> int:
        return len(self._listeners.get(event, []))

    async def emit(self, event: str, *args: Any) -> None:
        for listener in list(self._listeners.get(event, [])):
            try:
                result = listener(*args)
                if inspect.isawaitable(result):
                    await result
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error(f"Error in {event} listener: {e}")

    async def close(self) -> None:
        """Close the HTTP client and notify ``disconnect`` listeners."""
        if self._closed:
            return
        self._closed = True
        await self._client.aclose()
        await self.emit(ProviderEvent.DISCONNECT.value)

    async def __aenter__(self) -> "JsonRpcProvider":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()
