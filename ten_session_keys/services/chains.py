"""TEN chain constants and helpers for the session key actuation protocol."""

from __future__ import annotations

from enum import Enum
from typing import Optional

TEN_CHAIN_ID = 443

# eth_getStorageAt answer meaning "nothing here"
EMPTY_STORAGE_WORD = "0x" + "0" * 64

# Slot argument used for every lifecycle actuation call
ACTUATION_SLOT = "0x0"


class Actuation(str, Enum):
    """Lifecycle actions, each keyed by a well-known address on TEN."""
    CREATE = "create"
    RETRIEVE = "retrieve"
    ACTIVATE = "activate"
    DEACTIVATE = "deactivate"
    DELETE = "delete"
    EXECUTE = "execute"


def is_empty_storage_word(value: Optional[str]) -> bool:
    """``True`` for a missing response or the 32 zero byte sentinel."""
    if not value:
        return True
    digits = value[2:] if value[:2].lower() == "0x" else value
    return not digits or set(digits) == {"0"}


def address_from_storage_word(word: str) -> str:
    """Take the low 20 bytes of a 32 byte storage word as an address."""
    digits = word[2:] if word[:2].lower() == "0x" else word
    if len(digits) < 40:
        raise ValueError(f"Storage word too short to hold an address: {word!r}")
    return "0x" + digits[-40:]


__all__ = [
    "TEN_CHAIN_ID",
    "EMPTY_STORAGE_WORD",
    "ACTUATION_SLOT",
    "Actuation",
    "is_empty_storage_word",
    "address_from_storage_word",
]
