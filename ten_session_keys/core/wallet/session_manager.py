"""
Session key manager for delegated execution on TEN.

Manages the lifecycle of a session key:
- Creation (or retrieval of an existing key)
- Funding from the user's wallet
- Activation / deactivation
- Deletion and cleanup

Every lifecycle action is triggered by reading a well-known address with
``eth_getStorageAt``; the TEN gateway interprets those reads as commands.
"""

import asyncio
import logging
from decimal import Decimal
from typing import Any, Callable, Optional, Union

from ...config import Settings, settings as default_settings
from ...providers.base import EIP1193Provider, ProviderEvent
from ...providers.models import TransactionReceipt
from ...providers.rpc import RpcClient
from ...services.chains import Actuation, address_from_storage_word, is_empty_storage_word
from ...services.encoding import estimate_transactions, format_ether, parse_ether
from ..errors import (
    ConfirmationTimeoutError,
    CreationFailedError,
    EncodingFailureError,
    NoSessionKeyError,
    ProviderError,
)
from ..state.models import BalanceSnapshot
from ..state.store import StateStore, track_operation
from .models import SessionKeyStatus


logger = logging.getLogger(__name__)


class SessionKeyManager:
    """
    Drives the session key through its lifecycle and records the outcome in
    a ``StateStore``.

    Each operation checks that the provider is on the target chain before it
    issues any actuation call, marks the store as loading, and on failure
    stores the normalized error before re-raising it.
    """

    def __init__(self, store: StateStore, config: Optional[Settings] = None):
        self.store = store
        self.settings = config or default_settings
        self.status = SessionKeyStatus.from_state(store.get_state())
        self._listener_cleanup: Optional[Callable[[], None]] = None

    def _address(self, action: Actuation) -> str:
        return self.settings.actuation_addresses[action.value]

    async def _check_network(self, rpc: RpcClient) -> int:
        return await rpc.ensure_chain(self.settings.target_chain_id)

    # ------------------------------------------------------------------
    # Provider events
    # ------------------------------------------------------------------

    def _attach_listeners(self, provider: EIP1193Provider) -> None:
        """Attach disconnect/chainChanged handlers, replacing any previous pair."""
        self.detach_listeners()

        on = getattr(provider, "on", None)
        if on is None:
            return
        remove = getattr(provider, "remove_listener", None)

        async def handle_disconnect(*args: Any) -> None:
            await self._mark_inactive("Provider disconnected")

        async def handle_chain_changed(*args: Any) -> None:
            chain = f" to {args[0]}" if args else ""
            await self._mark_inactive(f"Chain changed{chain}")

        on(ProviderEvent.DISCONNECT.value, handle_disconnect)
        on(ProviderEvent.CHAIN_CHANGED.value, handle_chain_changed)

        def cleanup() -> None:
            if remove is not None:
                remove(ProviderEvent.DISCONNECT.value, handle_disconnect)
                remove(ProviderEvent.CHAIN_CHANGED.value, handle_chain_changed)

        self._listener_cleanup = cleanup

    def detach_listeners(self) -> None:
        """Remove the provider listeners attached by this manager, if any."""
        if self._listener_cleanup is not None:
            self._listener_cleanup()
            self._listener_cleanup = None

    async def _mark_inactive(self, reason: str) -> None:
        logger.warning(f"Session key deactivated locally: {reason}")
        if self.status == SessionKeyStatus.ACTIVE:
            self.status = SessionKeyStatus.INACTIVE
        await self.store.update_state(is_active=False, error=ProviderError(reason))

    # ------------------------------------------------------------------
    # Lifecycle operations
    # ------------------------------------------------------------------

    async def create_session_key(self, provider: EIP1193Provider) -> str:
        """
        Create a session key, or retrieve the existing one.

        Returns:
            The session key address

        Raises:
            WrongNetworkError: Provider is not on TEN
            CreationFailedError: Creation and retrieval both came back empty
            ProviderError: RPC failure or malformed response
        """
        async with track_operation(self.store, "create_session_key") as op:
            rpc = RpcClient(provider)
            await self._check_network(rpc)
            self._attach_listeners(provider)

            logger.info(f"Creating session key via {self._address(Actuation.CREATE)}")
            response = await rpc.actuate(self._address(Actuation.CREATE))

            if is_empty_storage_word(response):
                logger.info("Creation returned an empty response, retrieving existing session key")
                response = await rpc.actuate(self._address(Actuation.RETRIEVE))
                if is_empty_storage_word(response):
                    raise CreationFailedError()

            try:
                address = address_from_storage_word(response)
            except ValueError as e:
                raise ProviderError(f"Malformed session key response: {response!r}") from e

            current = self.store.get_session_key()
            same_key = current is not None and current.lower() == address.lower()
            if current is not None and not same_key:
                # A different key replaces the old one and starts inactive
                op.finish(session_key=address, is_active=False, balance=None)
            else:
                op.finish(session_key=address)

        if not same_key or self.status not in (SessionKeyStatus.ACTIVE, SessionKeyStatus.INACTIVE):
            self.status = SessionKeyStatus.CREATED
        logger.info(f"Session key ready: {address}")
        return address

    async def fund_session_key(
        self,
        session_key_address: str,
        amount: Union[str, Decimal],
        provider: EIP1193Provider,
        user_address: str,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> str:
        """
        Send ``amount`` ether from the user's wallet to the session key and
        wait for the receipt.

        Args:
            session_key_address: Recipient (the session key)
            amount: Decimal ether amount, e.g. ``"0.1"``
            provider: Wallet provider; the transfer is signed by the wallet
            user_address: Sender
            cancel_event: Setting this event stops waiting for confirmation

        Returns:
            The funding transaction hash

        Raises:
            ConfirmationTimeoutError: No receipt within the configured timeout
            asyncio.CancelledError: ``cancel_event`` was set while waiting
        """
        async with track_operation(self.store, "fund_session_key"):
            rpc = RpcClient(provider)
            await self._check_network(rpc)

            try:
                value_wei = parse_ether(amount)
            except ValueError as e:
                raise EncodingFailureError(str(e)) from e

            logger.info(f"Funding session key {session_key_address} with {amount} ETH")
            tx_hash = await rpc.send_transaction(user_address, session_key_address, value_wei)
            logger.info(f"Funding transaction sent: {tx_hash}")

            await self._wait_for_receipt(rpc, tx_hash, cancel_event)

        return tx_hash

    async def _wait_for_receipt(
        self,
        rpc: RpcClient,
        tx_hash: str,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> TransactionReceipt:
        """Poll for a receipt until it appears, the deadline passes or the wait is cancelled."""
        loop = asyncio.get_running_loop()
        timeout = self.settings.funding_confirmation_timeout_seconds
        poll_interval = self.settings.funding_poll_interval_seconds
        deadline = loop.time() + timeout

        while True:
            if cancel_event is not None and cancel_event.is_set():
                raise asyncio.CancelledError(f"Confirmation of {tx_hash} cancelled")

            receipt = await rpc.get_transaction_receipt(tx_hash)
            if receipt is not None:
                if not receipt.succeeded:
                    logger.warning(f"Funding transaction {tx_hash} was mined but reverted")
                else:
                    logger.info(f"Funding confirmed: {tx_hash}")
                return receipt

            remaining = deadline - loop.time()
            if remaining <= 0:
                raise ConfirmationTimeoutError(tx_hash, timeout)

            await self._pause(min(poll_interval, remaining), cancel_event)

    @staticmethod
    async def _pause(delay: float, cancel_event: Optional[asyncio.Event]) -> None:
        if cancel_event is None:
            await asyncio.sleep(delay)
            return
        try:
            await asyncio.wait_for(cancel_event.wait(), timeout=delay)
        except asyncio.TimeoutError:
            pass

    async def activate_session_key(self, provider: EIP1193Provider) -> None:
        """Ask TEN to start honoring the session key."""
        async with track_operation(self.store, "activate_session_key") as op:
            rpc = RpcClient(provider)
            await self._check_network(rpc)

            if self.store.get_session_key() is None:
                raise NoSessionKeyError("No session key to activate. Create a session key first.")

            await rpc.actuate(self._address(Actuation.ACTIVATE))
            self._attach_listeners(provider)
            op.finish(is_active=True)

        if not self.store.get_is_active():
            logger.warning("Session key not active after activation, it was deleted or disconnected meanwhile")
            self.detach_listeners()
            return
        self.status = SessionKeyStatus.ACTIVE
        logger.info("Session key activated")

    async def deactivate_session_key(self, provider: EIP1193Provider) -> None:
        """Ask TEN to stop honoring the session key."""
        async with track_operation(self.store, "deactivate_session_key") as op:
            rpc = RpcClient(provider)
            await self._check_network(rpc)

            await rpc.actuate(self._address(Actuation.DEACTIVATE))
            op.finish(is_active=False)

        if self.store.get_session_key() is not None:
            self.status = SessionKeyStatus.INACTIVE
        logger.info("Session key deactivated")

    async def delete_session_key(self, provider: EIP1193Provider) -> None:
        """Delete the session key on TEN and reset local state."""
        async with track_operation(self.store, "delete_session_key"):
            rpc = RpcClient(provider)
            await self._check_network(rpc)

            await rpc.actuate(self._address(Actuation.DELETE))
            await self._reset()

        self.status = SessionKeyStatus.DELETED
        logger.info("Session key deleted")

    async def cleanup_session_key(self, provider: EIP1193Provider) -> None:
        """
        Deactivate, then delete, the session key.

        If deactivation fails the delete call is never made and the error
        propagates; local state is only reset after both calls succeed.
        """
        async with track_operation(self.store, "cleanup_session_key"):
            rpc = RpcClient(provider)
            await self._check_network(rpc)

            await rpc.actuate(self._address(Actuation.DEACTIVATE))
            await rpc.actuate(self._address(Actuation.DELETE))
            await self._reset()

        self.status = SessionKeyStatus.DELETED
        logger.info("Session key cleaned up")

    async def _reset(self) -> None:
        await self.store.update_state(session_key=None, is_active=False, balance=None)
        self.store.clear_persisted_state()
        self.detach_listeners()

    async def refresh_balance(self, provider: EIP1193Provider) -> BalanceSnapshot:
        """
        Read the session key balance and store it with a transaction estimate.

        Raises:
            NoSessionKeyError: No session key has been created
        """
        async with track_operation(self.store, "refresh_balance") as op:
            rpc = RpcClient(provider)
            await self._check_network(rpc)

            session_key = self.store.get_session_key()
            if session_key is None:
                raise NoSessionKeyError("No session key to query. Create a session key first.")

            balance_wei = await rpc.get_balance(session_key)
            eth = format_ether(balance_wei)
            snapshot = BalanceSnapshot(
                eth=eth,
                estimated_transactions=estimate_transactions(
                    eth, self.settings.estimated_transaction_cost_eth
                ),
            )
            op.finish(balance=snapshot)

        return snapshot
