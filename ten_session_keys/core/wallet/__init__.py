"""
Session Key Lifecycle

- SessionKeyManager: create, fund, activate, deactivate, delete and clean up
  the session key on TEN
- SessionKeyStatus: where the key is in its lifecycle

Usage:
    from ten_session_keys.core.state import StateStore
    from ten_session_keys.core.wallet import SessionKeyManager

    manager = SessionKeyManager(StateStore())
    address = await manager.create_session_key(provider)
    await manager.fund_session_key(address, "0.05", provider, user_address)
    await manager.activate_session_key(provider)
"""

from .models import SessionKeyStatus
from .session_manager import SessionKeyManager

__all__ = [
    "SessionKeyManager",
    "SessionKeyStatus",
]
