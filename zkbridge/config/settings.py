"""
Settings Module
===============

Pydantic-based configuration with environment variable loading.

Version: 0.1.0
"""

from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


if TYPE_CHECKING:
    from zkbridge.contracts.targets import EVMTarget, LedgerTarget
    from zkbridge.zk.prover import ProverConfig


class Environment(str, Enum):
    """Deployment environment."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TESTING = "testing"


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class ChainMode(str, Enum):
    """Chain client operation mode."""

    MOCK = "mock"
    TESTNET = "testnet"
    MAINNET = "mainnet"


class CircuitSettings(BaseSettings):
    """Circuit artifact locations for the external prover and verifier."""

    model_config = SettingsConfigDict(env_prefix="ZKBRIDGE_CIRCUIT_")

    wasm_path: Path | None = None
    zkey_path: Path | None = None
    vkey_path: Path | None = None
    snarkjs_command: str = "npx snarkjs"


class EVMSettings(BaseSettings):
    """EVM verifier contract configuration."""

    model_config = SettingsConfigDict(env_prefix="ZKBRIDGE_EVM_")

    network: str = "ethereum"
    rpc_url: str = ""
    contract_address: str = ""


class LedgerSettings(BaseSettings):
    """Ledger (Soroban-style) verifier contract configuration."""

    model_config = SettingsConfigDict(env_prefix="ZKBRIDGE_LEDGER_")

    network: str = "testnet"
    rpc_url: str = ""
    contract_id: str = ""
    cli_tool: str = "stellar"
    source_account: SecretStr = SecretStr("")


class Settings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables with sensible defaults.
    Use the global `settings` singleton or call `get_settings()`.
    """

    model_config = SettingsConfigDict(
        env_prefix="ZKBRIDGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # General
    environment: Environment = Environment.DEVELOPMENT
    log_level: LogLevel = LogLevel.INFO
    json_logs: bool = False

    # Chain client mode and default verifier runtime
    chain_mode: ChainMode = ChainMode.MOCK
    default_chain: str = "evm"

    # Components
    circuit: CircuitSettings = Field(default_factory=CircuitSettings)
    evm: EVMSettings = Field(default_factory=EVMSettings)
    ledger: LedgerSettings = Field(default_factory=LedgerSettings)

    @field_validator("log_level", mode="before")
    @classmethod
    def uppercase_log_level(cls, v: str | LogLevel) -> LogLevel:
        """Ensure log level is uppercase."""
        if isinstance(v, str):
            return LogLevel(v.upper())
        return v

    @field_validator("default_chain")
    @classmethod
    def check_default_chain(cls, v: str) -> str:
        """Only the two verifier runtimes can be the default."""
        v = v.lower()
        if v not in ("evm", "ledger"):
            raise ValueError(f"default_chain must be 'evm' or 'ledger', got {v!r}")
        return v

    @property
    def is_testing(self) -> bool:
        """Check if running in test mode."""
        return self.environment == Environment.TESTING

    def ledger_source(self) -> str | None:
        """Source account for ledger CLI commands, or None when unset."""
        return self.ledger.source_account.get_secret_value() or None

    def prover_config(self) -> "ProverConfig":
        """Build the immutable prover configuration."""
        from zkbridge.zk.prover import ProverConfig

        return ProverConfig(
            wasm_path=self.circuit.wasm_path,
            zkey_path=self.circuit.zkey_path,
            snarkjs_command=self.circuit.snarkjs_command,
        )

    def evm_target(self) -> "EVMTarget":
        """Build the configured EVM chain target."""
        from zkbridge.contracts.targets import EVMTarget

        return EVMTarget(
            network=self.evm.network,
            contract_address=self.evm.contract_address or None,
            rpc_url=self.evm.rpc_url or None,
        )

    def default_target(self) -> "EVMTarget | LedgerTarget":
        """Build the chain target named by ``default_chain``."""
        if self.default_chain == "ledger":
            return self.ledger_target()
        return self.evm_target()

    def ledger_target(self) -> "LedgerTarget":
        """Build the configured ledger chain target."""
        from zkbridge.contracts.targets import LedgerTarget

        return LedgerTarget(
            network=self.ledger.network,
            contract_id=self.ledger.contract_id or None,
            rpc_url=self.ledger.rpc_url or None,
        )


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings: Application settings singleton.
    """
    return Settings()
