"""
Error Classification

Every public session key operation fails with one of the error kinds below.
Foreign exceptions are mapped into the taxonomy by ``normalize_error`` so
observers of the shared state only ever see domain errors.
"""

from enum import Enum
from typing import Optional, Type


class ErrorKind(str, Enum):
    """Kinds of failure surfaced to callers and state observers."""

    WRONG_NETWORK = "wrong_network"          # Provider attached to another chain
    NO_SESSION_KEY = "no_session_key"        # Operation needs a key that is absent
    CREATION_FAILED = "creation_failed"      # Create and retrieve both came back empty
    PROVIDER = "provider"                    # RPC failed or returned malformed data
    ENCODING_FAILURE = "encoding_failure"    # Transaction assembly invariant broken
    CONFIRMATION_TIMEOUT = "confirmation_timeout"  # Funding receipt never showed up


class SessionKeyError(Exception):
    """Base exception for session key errors."""

    kind: ErrorKind = ErrorKind.PROVIDER

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class WrongNetworkError(SessionKeyError):
    """The provider reports a chain other than the target chain."""

    kind = ErrorKind.WRONG_NETWORK

    def __init__(self, expected_chain_id: int, actual_chain_id: Optional[int] = None):
        super().__init__(
            f"Session keys are only supported on TEN (chain id {expected_chain_id}); "
            f"the wallet is connected to chain {actual_chain_id}. Add or switch to TEN."
        )
        self.expected_chain_id = expected_chain_id
        self.actual_chain_id = actual_chain_id


class NoSessionKeyError(SessionKeyError):
    """An active session key is required but none is available."""

    kind = ErrorKind.NO_SESSION_KEY

    def __init__(self, message: str = "No active session key. Create and activate a session key first."):
        super().__init__(message)


class CreationFailedError(SessionKeyError):
    """Neither creation nor retrieval produced a session key address."""

    kind = ErrorKind.CREATION_FAILED

    def __init__(
        self,
        message: str = "Failed to create session key - both creation and retrieval returned an empty response",
    ):
        super().__init__(message)


class ProviderError(SessionKeyError):
    """The provider call failed or returned data of the wrong shape."""

    kind = ErrorKind.PROVIDER

    def __init__(self, message: str, method: Optional[str] = None):
        super().__init__(message)
        self.method = method


class EncodingFailureError(SessionKeyError):
    """Transaction assembly produced something other than the expected shape."""

    kind = ErrorKind.ENCODING_FAILURE


class ConfirmationTimeoutError(SessionKeyError):
    """A funding transaction was not confirmed within the allowed time."""

    kind = ErrorKind.CONFIRMATION_TIMEOUT

    def __init__(self, tx_hash: str, timeout_seconds: float):
        super().__init__(f"Transaction {tx_hash} not confirmed within {timeout_seconds:g}s")
        self.tx_hash = tx_hash
        self.timeout_seconds = timeout_seconds


def normalize_error(
    exc: BaseException,
    fallback: Type[SessionKeyError] = ProviderError,
) -> SessionKeyError:
    """
    Map an arbitrary exception into the session key error taxonomy.

    Domain errors pass through untouched. Anything else becomes ``fallback``
    carrying the original message, with the original chained as ``__cause__``.
    """
    if isinstance(exc, SessionKeyError):
        return exc

    message = str(exc) or exc.__class__.__name__
    error = fallback(message)
    error.__cause__ = exc
    return error


__all__ = [
    "ErrorKind",
    "SessionKeyError",
    "WrongNetworkError",
    "NoSessionKeyError",
    "CreationFailedError",
    "ProviderError",
    "EncodingFailureError",
    "ConfirmationTimeoutError",
    "normalize_error",
]
