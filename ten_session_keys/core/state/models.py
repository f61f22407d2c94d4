"""
Session key state models.
"""

from dataclasses import dataclass, fields, replace
from decimal import Decimal
from typing import Any, Dict, Optional

from ..errors import SessionKeyError


@dataclass(frozen=True)
class BalanceSnapshot:
    """Last observed funding of the session key. Advisory only."""
    eth: Decimal
    estimated_transactions: int


@dataclass
class SessionKeyState:
    """
    The process-wide record of session key status.

    Only ``session_key`` and ``is_active`` survive a restart; the other fields
    describe the running process.
    """
    session_key: Optional[str] = None
    is_active: bool = False
    balance: Optional[BalanceSnapshot] = None
    is_loading: bool = False
    error: Optional[SessionKeyError] = None

    PERSISTED_FIELDS = frozenset({"session_key", "is_active"})

    def copy(self) -> "SessionKeyState":
        return replace(self)

    def merge(self, updates: Dict[str, Any]) -> "SessionKeyState":
        """Return a new state with ``updates`` applied."""
        unknown = set(updates) - self.field_names()
        if unknown:
            raise TypeError(f"Unknown session key state fields: {sorted(unknown)}")
        merged = replace(self, **updates)
        if merged.session_key is None and merged.is_active:
            # A key cannot be active without an address
            merged.is_active = False
        return merged

    def to_persisted(self) -> Dict[str, Any]:
        """The JSON blob written to persistent storage."""
        return {
            "sessionKey": self.session_key,
            "isActive": self.is_active,
        }

    @classmethod
    def from_persisted(cls, data: Dict[str, Any]) -> "SessionKeyState":
        session_key = data.get("sessionKey")
        if not isinstance(session_key, str) or not session_key:
            session_key = None
        # A key cannot be active without an address
        is_active = bool(data.get("isActive")) and session_key is not None
        return cls(session_key=session_key, is_active=is_active)

    @classmethod
    def field_names(cls) -> frozenset:
        return frozenset(f.name for f in fields(cls))
