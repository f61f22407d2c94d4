from enum import Enum
from typing import Any, Callable, List, Optional, Protocol, runtime_checkable


Listener = Callable[..., Any]


class RpcMethod(str, Enum):
    """RPC methods consumed by the session key subsystem."""
    CHAIN_ID = "eth_chainId"
    GET_TRANSACTION_COUNT = "eth_getTransactionCount"
    FEE_HISTORY = "eth_feeHistory"
    ESTIMATE_GAS = "eth_estimateGas"
    GET_BALANCE = "eth_getBalance"
    GET_TRANSACTION_RECEIPT = "eth_getTransactionReceipt"
    SEND_TRANSACTION = "eth_sendTransaction"
    # Read-looking call that TEN uses to trigger session key actions
    GET_STORAGE_AT = "eth_getStorageAt"


class ProviderEvent(str, Enum):
    DISCONNECT = "disconnect"
    CHAIN_CHANGED = "chainChanged"


@runtime_checkable
class EIP1193Provider(Protocol):
    """Wallet provider interface (request/response RPC)."""

    async def request(self, method: str, params: Optional[List[Any]] = None) -> Any:
        """Send an RPC request and return its ``result``."""
        ...


@runtime_checkable
class EventfulProvider(EIP1193Provider, Protocol):
    """
    Provider that also emits ``disconnect`` and ``chainChanged``.

    Listeners may be coroutine functions; emitters are expected to await
    whatever a listener returns when it is awaitable.
    """

    def on(self, event: str, listener: Listener) -> None:
        ...

    def remove_listener(self, event: str, listener: Listener) -> None:
        ...
