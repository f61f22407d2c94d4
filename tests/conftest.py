"""
Shared fixtures: a scripted wallet provider and fast settings.
"""

import inspect
from typing import Any, Callable, Dict, List, Optional, Tuple

import pytest

from ten_session_keys.config import Settings
from ten_session_keys.core.state import MemoryStorage, StateStore


SESSION_KEY = "0x1234567890abcdef1234567890abcdef12345678"
USER_ADDRESS = "0x9999999999999999999999999999999999999999"
RECIPIENT = "0xAbCdEf0123456789aBcDeF0123456789AbCdEf01"


class FakeProvider:
    """
    Wallet provider answering from a method -> response table.

    A response may be a value, an exception instance (raised), or a callable
    taking the params (sync or async). Every request is recorded in ``calls``.
    """

    def __init__(self, responses: Optional[Dict[str, Any]] = None, chain_id: int = 443):
        self.responses: Dict[str, Any] = {"eth_chainId": hex(chain_id)}
        self.responses.update(responses or {})
        self.calls: List[Tuple[str, List[Any]]] = []
        self.listeners: Dict[str, List[Callable[..., Any]]] = {}

    async def request(self, method: str, params: Optional[List[Any]] = None) -> Any:
        params = list(params or [])
        self.calls.append((method, params))
        if method not in self.responses:
            raise RuntimeError(f"unexpected call {method}")
        response = self.responses[method]
        if isinstance(response, Exception):
            raise response
        if callable(response):
            response = response(params)
            if inspect.isawaitable(response):
                response = await response
            if isinstance(response, Exception):
                raise response
        return response

    def on(self, event: str, listener: Callable[..., Any]) -> None:
        self.listeners.setdefault(event, []).append(listener)

    def remove_listener(self, event: str, listener: Callable[..., Any]) -> None:
        if listener in self.listeners.get(event, []):
            self.listeners[event].remove(listener)

    async def emit(self, event: str, *args: Any) -> None:
        for listener in list(self.listeners.get(event, [])):
            result = listener(*args)
            if inspect.isawaitable(result):
                await result

    def methods(self) -> List[str]:
        return [method for method, _ in self.calls]

    def calls_to(self, method: str) -> List[List[Any]]:
        return [params for name, params in self.calls if name == method]

    def storage_reads(self) -> List[str]:
        """Addresses read through the actuation channel, in order."""
        return [params[0] for params in self.calls_to("eth_getStorageAt")]


@pytest.fixture
def fast_settings() -> Settings:
    """Default settings with short confirmation polling."""
    return Settings(
        _env_file=None,
        funding_poll_interval_seconds=0.01,
        funding_confirmation_timeout_seconds=0.2,
    )


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def store(storage: MemoryStorage) -> StateStore:
    return StateStore(storage)


@pytest.fixture
def make_provider() -> Callable[..., FakeProvider]:
    return FakeProvider
