"""
High-level entry point for TEN session keys.

``SessionKeyClient`` wires one ``StateStore`` to a lifecycle manager and a
transaction executor so applications deal with a single object.
"""

import asyncio
from decimal import Decimal
from typing import Callable, Optional, Union

from .config import Settings, settings as default_settings
from .core.errors import SessionKeyError
from .core.execution import FeePriority, SessionTransactionExecutor, TransactionParams
from .core.state import (
    BalanceSnapshot,
    JsonFileStorage,
    KeyValueStorage,
    SessionKeyState,
    StateStore,
    StateSubscriber,
)
from .core.wallet import SessionKeyManager, SessionKeyStatus
from .providers.base import EIP1193Provider


class SessionKeyClient:
    """
    Session key lifecycle, execution and state for one application.

    Each client owns its own store; create several clients for independent
    session keys.
    """

    def __init__(
        self,
        storage: Optional[KeyValueStorage] = None,
        config: Optional[Settings] = None,
        store: Optional[StateStore] = None,
    ):
        self.settings = config or default_settings
        self.store = store or StateStore(storage)
        self.manager = SessionKeyManager(self.store, self.settings)
        self.executor = SessionTransactionExecutor(self.store, self.settings)

    @classmethod
    def with_file_storage(cls, config: Optional[Settings] = None) -> "SessionKeyClient":
        """Client persisting to ``settings.state_file``."""
        config = config or default_settings
        return cls(storage=JsonFileStorage(config.state_file), config=config)

    @property
    def status(self) -> SessionKeyStatus:
        return self.manager.status

    # Lifecycle
    async def create_session_key(self, provider: EIP1193Provider) -> str:
        return await self.manager.create_session_key(provider)

    async def fund_session_key(
        self,
        session_key_address: str,
        amount: Union[str, Decimal],
        provider: EIP1193Provider,
        user_address: str,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> str:
        return await self.manager.fund_session_key(
            session_key_address, amount, provider, user_address, cancel_event
        )

    async def activate_session_key(self, provider: EIP1193Provider) -> None:
        await self.manager.activate_session_key(provider)

    async def deactivate_session_key(self, provider: EIP1193Provider) -> None:
        await self.manager.deactivate_session_key(provider)

    async def delete_session_key(self, provider: EIP1193Provider) -> None:
        await self.manager.delete_session_key(provider)

    async def cleanup_session_key(self, provider: EIP1193Provider) -> None:
        await self.manager.cleanup_session_key(provider)

    async def refresh_balance(self, provider: EIP1193Provider) -> BalanceSnapshot:
        return await self.manager.refresh_balance(provider)

    def detach_listeners(self) -> None:
        self.manager.detach_listeners()

    # Execution
    async def send_transaction(
        self,
        params: TransactionParams,
        provider: EIP1193Provider,
        priority: FeePriority = FeePriority.MEDIUM,
    ) -> Optional[str]:
        return await self.executor.send_transaction(params, provider, priority)

    # State
    def get_state(self) -> SessionKeyState:
        return self.store.get_state()

    def subscribe_to_state(self, callback: StateSubscriber) -> Callable[[], None]:
        return self.store.subscribe_to_state(callback)

    def get_session_key(self) -> Optional[str]:
        return self.store.get_session_key()

    def get_is_active(self) -> bool:
        return self.store.get_is_active()

    def get_balance(self) -> Optional[BalanceSnapshot]:
        return self.store.get_balance()

    def get_is_loading(self) -> bool:
        return self.store.get_is_loading()

    def get_error(self) -> Optional[SessionKeyError]:
        return self.store.get_error()
