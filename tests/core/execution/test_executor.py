"""
Tests for sending transactions through the session key.
"""

import base64
import json

import pytest
import rlp

from conftest import RECIPIENT, SESSION_KEY, FakeProvider
from ten_session_keys.core.errors import (
    EncodingFailureError,
    NoSessionKeyError,
    ProviderError,
    WrongNetworkError,
)
from ten_session_keys.core.execution import (
    FeePriority,
    SessionTransactionExecutor,
    TransactionParams,
)
from ten_session_keys.core.state import STATE_STORAGE_KEY, StateStore


EXECUTE = "0x0000000000000000000000000000000000000007"
GWEI = 10**9
SUBMITTED = "0x" + "ef" * 32

FEE_HISTORY = {
    "baseFeePerGas": [hex(10 * GWEI)],
    "reward": [[hex(1 * GWEI), hex(2 * GWEI), hex(3 * GWEI)]],
}


def decode_payload(provider: FakeProvider) -> list:
    """Fields of the transaction submitted on the execute address."""
    (params,) = provider.calls_to("eth_getStorageAt")
    assert params[0] == EXECUTE
    assert params[2] == "latest"
    raw = base64.b64decode(params[1])
    assert raw[:1] == b"\x02"
    return rlp.decode(raw[1:])


def as_int(field: bytes) -> int:
    return int.from_bytes(field, "big")


def chain_responses(**overrides):
    responses = {
        "eth_getTransactionCount": "0x5",
        "eth_feeHistory": FEE_HISTORY,
        "eth_estimateGas": hex(50_000),
        "eth_getStorageAt": SUBMITTED,
    }
    responses.update(overrides)
    return responses


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def active_store(storage) -> StateStore:
    storage.set(STATE_STORAGE_KEY, json.dumps({"sessionKey": SESSION_KEY, "isActive": True}))
    return StateStore(storage)


@pytest.fixture
def executor(active_store, fast_settings) -> SessionTransactionExecutor:
    return SessionTransactionExecutor(active_store, fast_settings)


# =============================================================================
# Happy path
# =============================================================================

class TestSendTransaction:
    @pytest.mark.asyncio
    async def test_resolves_missing_fields(self, executor):
        provider = FakeProvider(chain_responses())
        params = TransactionParams(to=RECIPIENT, data="0xa9059cbb", value="0x10")

        result = await executor.send_transaction(params, provider)

        assert result == SUBMITTED
        assert provider.calls_to("eth_getTransactionCount") == [[SESSION_KEY, "pending"]]
        assert provider.calls_to("eth_estimateGas") == [[{
            "to": RECIPIENT,
            "data": "0xa9059cbb",
            "value": "0x10",
            "from": SESSION_KEY,
        }]]

        fields = decode_payload(provider)
        assert as_int(fields[0]) == 443
        assert as_int(fields[1]) == 5
        assert as_int(fields[2]) == 2 * GWEI
        assert as_int(fields[3]) == 12 * GWEI + 2 * GWEI
        assert as_int(fields[4]) == 50_000
        assert fields[5] == bytes.fromhex(RECIPIENT[2:].lower())
        assert as_int(fields[6]) == 16
        assert fields[7] == bytes.fromhex("a9059cbb")

        assert executor.store.get_is_loading() is False
        assert executor.store.get_error() is None

    @pytest.mark.asyncio
    async def test_caller_values_win(self, executor):
        provider = FakeProvider(chain_responses())
        params = TransactionParams(
            to=RECIPIENT,
            data="0x",
            nonce=0,
            gas_limit=21_000,
            max_fee_per_gas=7 * GWEI,
            max_priority_fee_per_gas=GWEI,
        )

        await executor.send_transaction(params, provider)

        assert provider.methods() == ["eth_chainId", "eth_getStorageAt"]
        fields = decode_payload(provider)
        assert fields[1] == b""
        assert as_int(fields[2]) == GWEI
        assert as_int(fields[3]) == 7 * GWEI
        assert as_int(fields[4]) == 21_000

    @pytest.mark.asyncio
    async def test_one_fee_given_still_uses_fee_history(self, executor):
        provider = FakeProvider(chain_responses())
        params = TransactionParams(to=RECIPIENT, nonce=1, gas_limit=21_000, max_fee_per_gas=99)

        await executor.send_transaction(params, provider, FeePriority.HIGH)

        fields = decode_payload(provider)
        assert as_int(fields[2]) == 3 * GWEI
        assert as_int(fields[3]) == 15 * GWEI + 3 * GWEI

    @pytest.mark.asyncio
    async def test_fee_history_failure_falls_back(self, executor):
        provider = FakeProvider(chain_responses(eth_feeHistory=RuntimeError("not supported")))
        params = TransactionParams(to=RECIPIENT, nonce=0)

        result = await executor.send_transaction(params, provider)

        assert result == SUBMITTED
        fields = decode_payload(provider)
        assert fields[1] == b""
        assert as_int(fields[2]) == GWEI
        assert as_int(fields[3]) == 1_200_000_000 + GWEI

    @pytest.mark.asyncio
    async def test_result_returned_unmodified(self, executor):
        provider = FakeProvider(chain_responses(eth_getStorageAt=None))

        assert await executor.send_transaction(TransactionParams(to=RECIPIENT), provider) is None


# =============================================================================
# Failures
# =============================================================================

class TestSendTransactionFailures:
    @pytest.mark.asyncio
    async def test_wrong_network(self, executor):
        provider = FakeProvider(chain_responses(), chain_id=1)

        with pytest.raises(WrongNetworkError):
            await executor.send_transaction(TransactionParams(to=RECIPIENT), provider)

        assert provider.methods() == ["eth_chainId"]
        assert isinstance(executor.store.get_error(), WrongNetworkError)

    @pytest.mark.asyncio
    async def test_requires_session_key(self, store, fast_settings):
        executor = SessionTransactionExecutor(store, fast_settings)
        provider = FakeProvider(chain_responses())

        with pytest.raises(NoSessionKeyError):
            await executor.send_transaction(TransactionParams(to=RECIPIENT), provider)

        assert provider.methods() == ["eth_chainId"]

    @pytest.mark.asyncio
    async def test_requires_active_key(self, store, fast_settings):
        await store.update_state(session_key=SESSION_KEY, is_active=False)
        executor = SessionTransactionExecutor(store, fast_settings)

        with pytest.raises(NoSessionKeyError):
            await executor.send_transaction(TransactionParams(to=RECIPIENT), FakeProvider(chain_responses()))

        assert isinstance(store.get_error(), NoSessionKeyError)
        assert store.get_is_loading() is False

    @pytest.mark.asyncio
    async def test_gas_estimate_failure(self, executor):
        provider = FakeProvider(chain_responses(eth_estimateGas=RuntimeError("execution reverted")))

        with pytest.raises(ProviderError) as exc_info:
            await executor.send_transaction(TransactionParams(to=RECIPIENT, nonce=0), provider)

        assert "execution reverted" in exc_info.value.message
        assert provider.calls_to("eth_getStorageAt") == []

    @pytest.mark.asyncio
    async def test_bad_recipient(self, executor):
        provider = FakeProvider(chain_responses())
        params = TransactionParams(to="0x1234", nonce=0, gas_limit=21_000)

        with pytest.raises(EncodingFailureError):
            await executor.send_transaction(params, provider)

        assert provider.calls_to("eth_getStorageAt") == []
        assert isinstance(executor.store.get_error(), EncodingFailureError)
