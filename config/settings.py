"""
Application settings loaded from environment variables.

Uses pydantic-settings for validation and type safety.
Webhook URLs are optional so read-only deployments can start without them.
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
    # SUPABASE
    # ===================
    supabase_url: str = Field(
        ...,
        description="Supabase project URL"
    )
    supabase_key: str = Field(
        ...,
        description="Supabase anon/public key"
    )

    # ===================
    # WEBHOOKS (n8n / Railway)
    # ===================
    inventory_webhook_url: Optional[str] = Field(
        None,
        description="Webhook that creates, edits and deletes inventory products"
    )
    dictionary_webhook_url: Optional[str] = Field(
        None,
        description="Webhook that adds a product alias to the dictionary"
    )
    dictionary_combos_webhook_url: Optional[str] = Field(
        None,
        description="Webhook that adds a combo to the dictionary"
    )
    webhook_timeout_seconds: float = Field(
        default=30,
        ge=1,
        le=120,
        description="Seconds to wait for a webhook before giving up"
    )

    # ===================
    # RECONCILIATION STORE
    # ===================
    mapping_store_dir: str = Field(
        default="data",
        description="Directory holding product_mappings.json and product_combos.json"
    )

    # ===================
    # INVENTORY QUERIES
    # ===================
    inventory_page_size: int = Field(
        default=1000,
        ge=1,
        le=10000,
        description="Rows per page when fetching without a limit"
    )
    movements_direct_limit_max: int = Field(
        default=10000,
        ge=1,
        description="Largest limit served by a single movements query"
    )

    # ===================
    # STOCK THRESHOLDS
    # ===================
    default_minimum_stock: int = Field(
        default=5,
        ge=0,
        description="Quantity at or below which a product is low on stock"
    )
    default_maximum_stock: int = Field(
        default=100,
        ge=1,
        description="Quantity above which a product is over-stocked"
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
    def inventory_webhook_configured(self) -> bool:
        """Check if the inventory mutation webhook is set."""
        return bool(self.inventory_webhook_url)


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload.

    Returns:
        Settings: Application settings

    Raises:
        ValidationError: If required env vars are missing or invalid
    """
    return Settings()


# For convenient imports: from config.settings import settings
settings = get_settings()
