"""Runtime configuration — env-driven via pydantic-settings.

Reads from a .env file and COLDCHAIN_* environment variables.
"""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class LedgerSettings(BaseSettings):
    """Ledger configuration with environment variable overrides.

    Examples
    --------
    Override via environment::

        export COLDCHAIN_ENVIRONMENT=staging
        export COLDCHAIN_LOG_LEVEL=DEBUG
        export COLDCHAIN_STORE_PATH=/data/coldchain.db
        export COLDCHAIN_ORACLE_API_KEY=...

    Or via .env file::

        COLDCHAIN_ENVIRONMENT=production
        COLDCHAIN_ADD_EVENT_SECRET=...
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="COLDCHAIN_",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Runtime environment
    environment: str = "development"
    log_level: str = "INFO"
    debug: bool = False

    # Storage; None keeps the ledger in memory only
    store_path: Path | None = Path(".coldchain/ledger.db")

    # Temperature oracle (OpenWeather current weather)
    oracle_base_url: str = "https://api.openweathermap.org/data/2.5/weather"
    oracle_api_key: str = ""
    oracle_country_code: str = "IN"
    oracle_timeout_seconds: float = 5.0

    # Shared secrets for gated actions; all empty means no gate
    register_product_secret: str = ""
    fund_escrow_secret: str = ""
    add_event_secret: str = ""

    @property
    def is_production(self) -> bool:
        """Whether running in production mode."""
        return self.environment == "production"

    @property
    def action_secrets(self) -> dict[str, str]:
        return {
            "register_product": self.register_product_secret,
            "fund_escrow": self.fund_escrow_secret,
            "add_event": self.add_event_secret,
        }


# Module-level singleton, import as `from coldchain.config import settings`
settings = LedgerSettings()
