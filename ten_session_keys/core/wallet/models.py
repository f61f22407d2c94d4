"""
Session key lifecycle models.
"""

from enum import Enum

from ..state.models import SessionKeyState


class SessionKeyStatus(str, Enum):
    """Lifecycle position of the session key."""
    UNINITIALIZED = "uninitialized"  # No key created yet
    CREATED = "created"              # Key exists, not activated
    ACTIVE = "active"                # Chain honors the key for execution
    INACTIVE = "inactive"            # Deactivated, or provider disconnected
    DELETED = "deleted"              # Key removed on chain, state reset

    @classmethod
    def from_state(cls, state: SessionKeyState) -> "SessionKeyStatus":
        """Best guess at the status for a record loaded from storage."""
        if state.session_key is None:
            return cls.UNINITIALIZED
        if state.is_active:
            return cls.ACTIVE
        return cls.CREATED
