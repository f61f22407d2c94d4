"""
Session key state store.

Holds the single record of session key status for one application, applies
updates one at a time in the order they were submitted, persists the durable
subset and notifies subscribers after every change.
"""

import asyncio
import itertools
import json
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Callable, Dict, Optional, Type

from ..errors import ProviderError, SessionKeyError, normalize_error
from .models import BalanceSnapshot, SessionKeyState
from .persistence import STATE_STORAGE_KEY, KeyValueStorage


logger = logging.getLogger(__name__)

StateSubscriber = Callable[[SessionKeyState], None]


class StateStore:
    """
    Single source of truth for session key state.

    Features:
    - Updates serialized through an asyncio lock (FIFO, one in flight)
    - ``session_key`` / ``is_active`` persisted to a key-value storage
    - Subscribers called with a fresh copy after each update
    - Storage and subscriber failures are logged, never raised
    """

    def __init__(
        self,
        storage: Optional[KeyValueStorage] = None,
        storage_key: str = STATE_STORAGE_KEY,
    ):
        self._storage = storage
        self._storage_key = storage_key
        self._subscribers: Dict[int, StateSubscriber] = {}
        self._tokens = itertools.count()
        self._lock = asyncio.Lock()
        self._state = self._load()

    def _load(self) -> SessionKeyState:
        if self._storage is None:
            return SessionKeyState()
        try:
            raw = self._storage.get(self._storage_key)
            if raw:
                data = json.loads(raw)
                if isinstance(data, dict):
                    return SessionKeyState.from_persisted(data)
                logger.warning(f"Ignoring persisted state of unexpected type {type(data).__name__}")
        except Exception as e:
            logger.warning(f"Failed to load persisted state: {e}")
        return SessionKeyState()

    def _persist(self) -> None:
        if self._storage is None:
            return
        try:
            self._storage.set(self._storage_key, json.dumps(self._state.to_persisted()))
        except Exception as e:
            logger.warning(f"Failed to persist state: {e}")

    def get_state(self) -> SessionKeyState:
        """Return a copy of the current state."""
        return self._state.copy()

    async def update_state(self, **updates: Any) -> SessionKeyState:
        """
        Merge ``updates`` into the state.

        Concurrent callers queue on the lock and are applied in submission
        order, each seeing the result of the previous update. Subscribers are
        plain callables and must not wait on ``update_state`` themselves.

        Returns:
            A copy of the state after this update

        Raises:
            TypeError: If an update names a field the state does not have
        """
        async with self._lock:
            self._state = self._state.merge(updates)

            if SessionKeyState.PERSISTED_FIELDS & updates.keys():
                self._persist()

            for callback in list(self._subscribers.values()):
                try:
                    callback(self._state.copy())
                except Exception as e:
                    logger.error(f"Error in state subscriber: {e}")

            return self._state.copy()

    def subscribe_to_state(self, callback: StateSubscriber) -> Callable[[], None]:
        """
        Register ``callback`` for state changes.

        Returns:
            A function that removes the subscription (safe to call twice)
        """
        token = next(self._tokens)
        self._subscribers[token] = callback

        def unsubscribe() -> None:
            self._subscribers.pop(token, None)

        return unsubscribe

    def clear_persisted_state(self) -> None:
        """Remove the persisted record. In-memory state is left alone."""
        if self._storage is None:
            return
        try:
            self._storage.remove(self._storage_key)
        except Exception as e:
            logger.warning(f"Failed to clear persisted state: {e}")

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    # State getters
    def get_session_key(self) -> Optional[str]:
        return self.get_state().session_key

    def get_is_active(self) -> bool:
        return self.get_state().is_active

    def get_balance(self) -> Optional[BalanceSnapshot]:
        return self.get_state().balance

    def get_is_loading(self) -> bool:
        return self.get_state().is_loading

    def get_error(self) -> Optional[SessionKeyError]:
        return self.get_state().error


class OperationScope:
    """Collects the fields an operation writes when it succeeds."""

    def __init__(self) -> None:
        self.updates: Dict[str, Any] = {}

    def finish(self, **updates: Any) -> None:
        self.updates.update(updates)


@asynccontextmanager
async def track_operation(
    store: StateStore,
    name: str,
    fallback: Type[SessionKeyError] = ProviderError,
) -> AsyncIterator[OperationScope]:
    """
    Run a public operation against ``store``.

    Sets ``is_loading`` and clears ``error`` on entry. On success the scope's
    updates are applied together with ``is_loading=False``. On failure the
    exception is normalized, stored in ``error`` and re-raised. Cancellation
    only clears ``is_loading``.
    """
    scope = OperationScope()
    await store.update_state(is_loading=True, error=None)
    try:
        yield scope
    except asyncio.CancelledError:
        await store.update_state(is_loading=False)
        raise
    except Exception as e:
        error = normalize_error(e, fallback)
        logger.error(f"{name} failed: {error}")
        await store.update_state(error=error, is_loading=False)
        if error is e:
            raise
        raise error from e
    await store.update_state(**scope.updates, is_loading=False)
