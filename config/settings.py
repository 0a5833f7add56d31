"""
Application settings loaded from environment variables.

Uses pydantic-settings for validation and type safety.
Secrets (PAT, update password) only ever come from the environment.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from functools import lru_cache
from typing import Optional


class Settings(BaseSettings):
    """
    Application settings.

    All values loaded from .env file or environment variables.
    Validation happens automatically on startup.
    """

    model_config = SettingsConfigDict(
        env_file=(".env", "../.env"),  # Check current dir, then parent
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"  # Ignore extra env vars
    )

    # ===================
    # AIRTABLE
    # ===================
    airtable_pat: Optional[str] = Field(
        None,
        description="Airtable personal access token"
    )
    airtable_base_id: Optional[str] = Field(
        None,
        description="Airtable base ID (app...)"
    )
    airtable_api_url: str = Field(
        default="https://api.airtable.com/v0",
        description="Airtable REST API root"
    )
    airtable_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        le=300,
        description="Timeout for a single Airtable request"
    )

    # ===================
    # API SECURITY
    # ===================
    update_password: Optional[str] = Field(
        None,
        description="Shared secret required to trigger an update run"
    )

    # ===================
    # TABLES
    # ===================
    spt_table_name: str = Field(
        default="SPT - Sellable Product Table",
        description="Sellable product table (per-variant records)"
    )
    mtb_table_name: str = Field(
        default="MTB - Prices, purchase and sell",
        description="Master pricing table (one row per base product)"
    )
    batch_view_name: str = Field(
        default="Batch Update",
        description="SPT view holding records flagged for processing"
    )

    # ===================
    # BATCH WRITES
    # ===================
    batch_size: int = Field(
        default=10,
        ge=1,
        le=10,
        description="Records per PATCH call (Airtable maximum is 10)"
    )
    batch_throttle: str = Field(
        default="fixed",
        pattern="^(fixed|token_bucket|none)$",
        description="Throttling policy between write batches"
    )
    batch_delay_seconds: float = Field(
        default=0.25,
        ge=0,
        le=10,
        description="Delay between batches for the fixed policy"
    )
    batch_requests_per_second: float = Field(
        default=5.0,
        gt=0,
        le=50,
        description="Refill rate for the token bucket policy"
    )

    # ===================
    # RECONCILIATION
    # ===================
    unmatched_select_policy: str = Field(
        default="lenient",
        pattern="^(lenient|strict)$",
        description="lenient: write raw text for unmatched select values; strict: omit the field"
    )

    # ===================
    # APP SETTINGS
    # ===================
    environment: str = Field(
        default="development",
        pattern="^(development|staging|production)$",
        description="Application environment"
    )
    debug: bool = Field(
        default=True,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Logging level"
    )
    api_host: str = Field(
        default="0.0.0.0",
        description="API host"
    )
    api_port: int = Field(
        default=8000,
        ge=1000,
        le=65535,
        description="API port"
    )

    # ===================
    # COMPUTED PROPERTIES
    # ===================
    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment == "production"

    @property
    def airtable_configured(self) -> bool:
        """Check if Airtable credentials are present."""
        return bool(self.airtable_pat and self.airtable_base_id)


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload.

    Returns:
        Settings: Application settings

    Raises:
        ValidationError: If env vars are invalid
    """
    return Settings()


# For convenient imports: from config.settings import settings
settings = get_settings()
