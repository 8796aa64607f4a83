"""Runtime configuration — env-driven.

Centralized config using pydantic-settings for environment variable
support. Reads from .env file and MARKETFACTORY_* environment variables.
"""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class MarketConfig(BaseSettings):
    """Runtime configuration with environment variable overrides.

    All settings can be overridden via MARKETFACTORY_* environment variables
    or a .env file in the project root.

    Examples
    --------
    Override via environment::

        export MARKETFACTORY_LOG_LEVEL=DEBUG
        export MARKETFACTORY_STATE_PATH=/data/chain.db
        export MARKETFACTORY_GAS_CREATE=40000
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="MARKETFACTORY_",
        env_file_encoding="utf-8",
    )

    # Runtime environment
    environment: str = "development"
    log_level: str = "INFO"
    debug: bool = False

    # Transaction ledger backing the CLI
    state_path: Path = Path(".marketfactory/chain.db")

    # Deterministic signer accounts
    signer_seed: str = "marketfactory"
    signer_count: int = 10

    # Gas schedule
    gas_tx_base: int = 21000
    gas_calldata_byte: int = 16
    gas_storage_write: int = 20000
    gas_create: int = 32000

    @property
    def is_production(self) -> bool:
        """Whether running in production mode."""
        return self.environment == "production"


# Module-level singleton: import as `from marketfactory.config import config`
config = MarketConfig()
