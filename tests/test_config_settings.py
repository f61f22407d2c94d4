from decimal import Decimal

import pytest
from pydantic import ValidationError

from ten_session_keys.config import Settings
from ten_session_keys.services.chains import TEN_CHAIN_ID


def test_defaults():
    """Defaults target TEN with the well-known actuation addresses."""

    settings = Settings(_env_file=None)

    assert settings.target_chain_id == TEN_CHAIN_ID == 443
    assert settings.actuation_addresses["create"].endswith("03")
    assert settings.actuation_addresses["execute"].endswith("07")
    assert settings.actuation_addresses["retrieve"].endswith("08")
    assert settings.base_fee_multipliers == {
        "LOW": Decimal("1.1"),
        "MEDIUM": Decimal("1.2"),
        "HIGH": Decimal("1.5"),
    }
    assert settings.fee_history_blocks == 4


def test_env_prefix(monkeypatch):
    """Environment variables use the TEN_ prefix."""

    monkeypatch.setenv("TEN_TARGET_CHAIN_ID", "8443")
    monkeypatch.setenv("TEN_FUNDING_POLL_INTERVAL_SECONDS", "0.5")

    settings = Settings(_env_file=None)

    assert settings.target_chain_id == 8443
    assert settings.funding_poll_interval_seconds == 0.5


def test_multiplier_keys_are_normalized():
    settings = Settings(_env_file=None, base_fee_multipliers={"low": "1.05", "medium": "1.3", "high": "2"})

    assert settings.base_fee_multipliers["HIGH"] == Decimal("2")


def test_multipliers_must_be_ordered():
    with pytest.raises(ValidationError):
        Settings(_env_file=None, base_fee_multipliers={"LOW": "1.5", "MEDIUM": "1.2", "HIGH": "1.1"})


def test_three_percentiles_required():
    with pytest.raises(ValidationError):
        Settings(_env_file=None, priority_fee_percentiles=[10, 90])
