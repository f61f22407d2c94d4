"""
Session key state

- SessionKeyState: the record (session key, active flag, balance, loading, error)
- StateStore: serialized updates, persistence, subscriptions
- Storage backends for the persisted subset

Usage:
    from ten_session_keys.core.state import JsonFileStorage, StateStore

    store = StateStore(JsonFileStorage("~/.ten_session_keys/state.json"))
    unsubscribe = store.subscribe_to_state(lambda state: print(state.is_active))
    await store.update_state(is_active=False)
"""

from .models import BalanceSnapshot, SessionKeyState
from .persistence import (
    STATE_STORAGE_KEY,
    JsonFileStorage,
    KeyValueStorage,
    MemoryStorage,
)
from .store import OperationScope, StateStore, StateSubscriber, track_operation

__all__ = [
    "BalanceSnapshot",
    "SessionKeyState",
    "STATE_STORAGE_KEY",
    "JsonFileStorage",
    "KeyValueStorage",
    "MemoryStorage",
    "OperationScope",
    "StateStore",
    "StateSubscriber",
    "track_operation",
]
