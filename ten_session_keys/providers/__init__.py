"""
Provider layer

- EIP1193Provider / EventfulProvider: the wallet interface consumed by the core
- RpcClient: typed, validating wrapper used for every RPC call
- JsonRpcProvider: httpx-based provider for a TEN gateway URL
"""

from .base import EIP1193Provider, EventfulProvider, Listener, ProviderEvent, RpcMethod
from .http import JsonRpcError, JsonRpcProvider
from .models import FeeHistory, TransactionReceipt
from .rpc import RpcClient

__all__ = [
    "EIP1193Provider",
    "EventfulProvider",
    "Listener",
    "ProviderEvent",
    "RpcMethod",
    "JsonRpcError",
    "JsonRpcProvider",
    "FeeHistory",
    "TransactionReceipt",
    "RpcClient",
]
