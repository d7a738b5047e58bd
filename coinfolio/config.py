# coinfolio/config.py
"""
Engine configuration using Pydantic Settings.

Loads configuration from environment variables with validation:
- LOG_LEVEL / LOG_FORMAT: Logging setup used by setup_logging()
- REFERENCE_CURRENCY: Fiat currency prices and totals are recorded in
- HISTORY_WINDOW_DAYS: Default length of the reconstructed value curve
- PRICE_FILL_POLICY: How days without a price are filled in history

Configuration is validated on first import. Invalid configuration
will raise a ValueError with a descriptive message.

Usage:
    from coinfolio.config import settings

    window = settings.history_window_days
"""
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from coinfolio.models import FillPolicy


# Optional .env in the project root (parent of the package directory)
_PACKAGE_DIR = Path(__file__).resolve().parent
_PROJECT_ROOT = _PACKAGE_DIR.parent
_ENV_FILE = _PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    """
    Engine settings loaded from environment variables.

    Environment variables:
        - LOG_LEVEL: Logging level (default: "INFO")
        - LOG_FORMAT: "text" or "json" (default: "text")
        - REFERENCE_CURRENCY: ISO code of the reference currency (default: "EUR")
        - HISTORY_WINDOW_DAYS: Days in the value curve (default: 365)
        - PRICE_FILL_POLICY: "forward_fill" or "interpolate" (default: "forward_fill")
    """

    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    log_format: Literal["text", "json"] = Field(
        default="text",
        description="Log output format"
    )

    # =========================================================================
    # VALUATION
    # =========================================================================
    reference_currency: str = Field(
        default="EUR",
        min_length=3,
        max_length=3,
        description="Fiat currency that price_per_unit and totals are recorded in"
    )
    history_window_days: int = Field(
        default=365,
        ge=1,
        le=3650,
        description="Default number of days in the reconstructed value curve"
    )
    price_fill_policy: FillPolicy = Field(
        default=FillPolicy.FORWARD_FILL,
        description="Strategy for days with no price data in history reconstruction"
    )

    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE) if _ENV_FILE.exists() else None,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("reference_currency", mode="before")
    @classmethod
    def normalize_reference_currency(cls, v: object) -> object:
        """Trim and uppercase before the length check runs."""
        return v.strip().upper() if isinstance(v, str) else v


# Create single instance
settings = Settings()
