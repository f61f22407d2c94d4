"""
TEN session keys

Create, fund, activate and use a session key on the TEN network so
transactions can be sent without a wallet prompt for every call.

Usage:
    from ten_session_keys import SessionKeyClient, TransactionParams

    client = SessionKeyClient()
    address = await client.create_session_key(provider)
    await client.fund_session_key(address, "0.05", provider, user_address)
    await client.activate_session_key(provider)
    await client.send_transaction(TransactionParams(to="0x...", data="0x..."), provider)
"""

from .client import SessionKeyClient
from .config import Settings, settings
from .core.errors import (
    ConfirmationTimeoutError,
    CreationFailedError,
    EncodingFailureError,
    ErrorKind,
    NoSessionKeyError,
    ProviderError,
    SessionKeyError,
    WrongNetworkError,
    normalize_error,
)
from .core.execution import (
    FeePriority,
    GasFeeCalculator,
    SessionTransactionExecutor,
    TransactionBuilder,
    TransactionParams,
)
from .core.state import (
    BalanceSnapshot,
    JsonFileStorage,
    KeyValueStorage,
    MemoryStorage,
    SessionKeyState,
    StateStore,
)
from .core.wallet import SessionKeyManager, SessionKeyStatus
from .providers import EIP1193Provider, JsonRpcProvider, RpcClient
from .services.chains import TEN_CHAIN_ID
from .services.encoding import estimate_transactions, format_ether, parse_ether

__version__ = "0.1.0"

__all__ = [
    "SessionKeyClient",
    "Settings",
    "settings",
    # Errors
    "ConfirmationTimeoutError",
    "CreationFailedError",
    "EncodingFailureError",
    "ErrorKind",
    "NoSessionKeyError",
    "ProviderError",
    "SessionKeyError",
    "WrongNetworkError",
    "normalize_error",
    # Execution
    "FeePriority",
    "GasFeeCalculator",
    "SessionTransactionExecutor",
    "TransactionBuilder",
    "TransactionParams",
    # State
    "BalanceSnapshot",
    "JsonFileStorage",
    "KeyValueStorage",
    "MemoryStorage",
    "SessionKeyState",
    "StateStore",
    # Lifecycle
    "SessionKeyManager",
    "SessionKeyStatus",
    # Providers
    "EIP1193Provider",
    "JsonRpcProvider",
    "RpcClient",
    # Helpers
    "TEN_CHAIN_ID",
    "estimate_transactions",
    "format_ether",
    "parse_ether",
]
