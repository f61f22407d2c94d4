from decimal import Decimal
from pathlib import Path
from typing import Dict, List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .services.chains import TEN_CHAIN_ID


BASE_DIR = Path(__file__).resolve().parents[1]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        env_file_encoding="utf-8",
        env_prefix="TEN_",
        case_sensitive=False,
        extra="ignore"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")

    # Network
    rpc_url: str = Field(
        default="https://testnet.ten.xyz/v1/",
        description="TEN gateway JSON-RPC endpoint (including the user token query string)",
    )
    request_timeout_seconds: float = Field(default=30.0, description="RPC request timeout")
    target_chain_id: int = Field(default=TEN_CHAIN_ID, description="The only chain session keys are supported on")

    # Well-known actuation addresses, read through eth_getStorageAt
    session_key_create_address: str = Field(default="0x0000000000000000000000000000000000000003")
    session_key_activate_address: str = Field(default="0x0000000000000000000000000000000000000004")
    session_key_deactivate_address: str = Field(default="0x0000000000000000000000000000000000000005")
    session_key_delete_address: str = Field(default="0x0000000000000000000000000000000000000006")
    session_key_execute_address: str = Field(default="0x0000000000000000000000000000000000000007")
    session_key_retrieve_address: str = Field(default="0x0000000000000000000000000000000000000008")

    # Gas
    fee_history_blocks: int = Field(default=4, ge=1, description="Blocks sampled by eth_feeHistory")
    priority_fee_percentiles: List[int] = Field(
        default_factory=lambda: [25, 50, 75],
        description="Reward percentiles for the LOW/MEDIUM/HIGH tiers",
    )
    base_fee_multipliers: Dict[str, Decimal] = Field(
        default_factory=lambda: {
            "LOW": Decimal("1.1"),
            "MEDIUM": Decimal("1.2"),
            "HIGH": Decimal("1.5"),
        },
        description="Base fee headroom per priority tier",
    )
    fallback_priority_fee_wei: int = Field(
        default=1_000_000_000,
        description="Priority fee used when fee history is unavailable (1 gwei)",
    )
    fallback_base_fee_wei: int = Field(
        default=1_000_000_000,
        description="Base fee used when fee history is unavailable (1 gwei)",
    )

    # Funding confirmation
    funding_poll_interval_seconds: float = Field(default=2.0, gt=0)
    funding_confirmation_timeout_seconds: float = Field(default=120.0, gt=0)

    # Persistence
    state_file: Path = Field(
        default=Path.home() / ".ten_session_keys" / "state.json",
        description="JSON file holding the persisted session key record",
    )

    # Rough per-transaction cost used for the balance estimate
    estimated_transaction_cost_eth: Decimal = Field(default=Decimal("0.005"), gt=0)

    @field_validator("priority_fee_percentiles")
    @classmethod
    def _three_percentiles(cls, value: List[int]) -> List[int]:
        if len(value) != 3:
            raise ValueError("priority_fee_percentiles needs one entry per tier (LOW, MEDIUM, HIGH)")
        return value

    @field_validator("base_fee_multipliers")
    @classmethod
    def _ordered_multipliers(cls, value: Dict[str, Decimal]) -> Dict[str, Decimal]:
        normalized = {k.upper(): v for k, v in value.items()}
        missing = {"LOW", "MEDIUM", "HIGH"} - normalized.keys()
        if missing:
            raise ValueError(f"base_fee_multipliers missing tiers: {sorted(missing)}")
        if not normalized["LOW"] < normalized["MEDIUM"] < normalized["HIGH"]:
            raise ValueError("base_fee_multipliers must satisfy LOW < MEDIUM < HIGH")
        return normalized

    @property
    def actuation_addresses(self) -> Dict[str, str]:
        return {
            "create": self.session_key_create_address,
            "retrieve": self.session_key_retrieve_address,
            "activate": self.session_key_activate_address,
            "deactivate": self.session_key_deactivate_address,
            "delete": self.session_key_delete_address,
            "execute": self.session_key_execute_address,
        }


# Global settings instance
settings = Settings()
