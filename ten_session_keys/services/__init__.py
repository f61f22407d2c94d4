"""Service layer helpers"""

from .chains import (
    ACTUATION_SLOT,
    EMPTY_STORAGE_WORD,
    TEN_CHAIN_ID,
    Actuation,
    address_from_storage_word,
    is_empty_storage_word,
)
from .encoding import (
    WEI_PER_ETHER,
    estimate_transactions,
    format_ether,
    hex_to_bytes,
    parse_ether,
    parse_quantity,
    to_hex,
)

__all__ = [
    "ACTUATION_SLOT",
    "EMPTY_STORAGE_WORD",
    "TEN_CHAIN_ID",
    "Actuation",
    "address_from_storage_word",
    "is_empty_storage_word",
    "WEI_PER_ETHER",
    "estimate_transactions",
    "format_ether",
    "hex_to_bytes",
    "parse_ether",
    "parse_quantity",
    "to_hex",
]
