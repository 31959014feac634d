"""Application configuration using Pydantic Settings."""

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# ===========================================
# Product Branding
# ===========================================
PRODUCT_NAME = "folio"
PRODUCT_TAGLINE = "Portfolio manager for the terminal."
PRODUCT_VERSION = "1.0.0"

# Smallest refresh delay accepted by the watch loop (seconds)
MIN_REFRESH_DELAY = 1


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="FOLIO_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Holdings file
    portfolio_file: str = "~/portfolio.yaml"
    default_currency: str = "USD"

    # Market Data
    quote_provider: str = "yahoo"
    provider_timeout_seconds: int = Field(30, gt=0)

    # Watch mode
    refresh_delay_seconds: int = Field(60, ge=MIN_REFRESH_DELAY)
    tolerate_fetch_errors: bool = True

    # Display
    thousands_separator: str = ","

    # Logging
    log_level: str = "WARNING"

    @property
    def portfolio_path(self) -> Path:
        """Holdings file path with ``~`` expanded."""
        return Path(self.portfolio_file).expanduser()


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
