# backend/app/core/settings.py
"""
PickupDesk - Configuration Management with pydantic-settings

- Loads from environment and root .env
- Validates and normalizes values
- Cached singleton via get_settings()
"""
import hashlib
from functools import lru_cache
from pathlib import Path
from typing import Annotated, Optional, List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

# Calculate path to .env in project root (4 levels up from this file)
# backend/app/core/settings.py -> <repo>/.env
_ENV_FILE = Path(__file__).resolve().parent.parent.parent.parent / ".env"


def _split_csv(v):
    if isinstance(v, str):
        return [item.strip() for item in v.split(",") if item.strip()]
    return v


class Settings(BaseSettings):
    """
    Application settings with validation.

    Environment variables take precedence over .env file values.
    """

    model_config = SettingsConfigDict(
        env_file=_ENV_FILE,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ===================
    # Application Settings
    # ===================
    PROJECT_NAME: str = "PickupDesk"
    VERSION: str = "1.0.0"
    API_V1_STR: str = "/api/v1"
    DEBUG: bool = Field(default=False, description="Enable debug mode")
    ENVIRONMENT: str = Field(default="development", description="Deployment environment")
    PUBLIC_BASE_URL: str = Field(
        default="http://localhost:3000",
        description="Public URL the shopper-facing pickup links point at",
    )

    # ===================
    # Shopify Admin API
    # ===================
    SHOP_NAME: Optional[str] = Field(
        default=None, description="Shop domain, e.g. my-shop.myshopify.com"
    )
    SHOPIFY_ADMIN_TOKEN: Optional[str] = Field(default=None, description="Admin API access token")
    SHOPIFY_API_VERSION: str = "2025-07"
    SHOPIFY_TIMEOUT_SECONDS: float = Field(
        default=10.0, gt=0, description="Timeout applied to every Shopify call"
    )

    # ===================
    # Pickup Links
    # ===================
    PICKUP_TOKEN_ALGORITHM: str = Field(
        default="sha1", description="hashlib algorithm used to derive pickup tokens"
    )

    @field_validator("PICKUP_TOKEN_ALGORITHM")
    @classmethod
    def validate_token_algorithm(cls, v: str) -> str:
        v = v.lower()
        if v not in hashlib.algorithms_guaranteed or v.startswith("shake_"):
            raise ValueError(f"Unsupported PICKUP_TOKEN_ALGORITHM: {v}")
        return v

    PICKUP_LOCK_TIMEOUT_SECONDS: float = Field(
        default=30.0, ge=0, description="How long a second confirmation waits for the first"
    )
    PICKUP_FULFILLMENT_MESSAGE: str = "Pickup confirmed by customer"
    PICKUP_LOCALE: str = Field(default="he", description="Language of shopper messages (he, en)")

    # ===================
    # Pickup Locations
    # ===================
    PICKUP_STORE_LOCATION_ID: Optional[int] = Field(default=None, description="Store location")
    PICKUP_WAREHOUSE_LOCATION_ID: Optional[int] = Field(
        default=None, description="Warehouse location"
    )
    PICKUP_DEFAULT_LOCATION_ID: Optional[int] = Field(
        default=None, description="Fallback location (defaults to the store)"
    )
    # Comma-separated in the environment
    PICKUP_WAREHOUSE_KEYWORDS: Annotated[List[str], NoDecode] = Field(default=["מחסן"])
    PICKUP_STORE_KEYWORDS: Annotated[List[str], NoDecode] = Field(default=["חנות"])

    @field_validator("PICKUP_WAREHOUSE_KEYWORDS", "PICKUP_STORE_KEYWORDS", mode="before")
    @classmethod
    def parse_keywords(cls, v):
        return _split_csv(v)

    # ===================
    # Security Settings
    # ===================
    API_KEY: Optional[str] = Field(default=None, description="API key for operator routes")
    RATE_LIMIT_PICKUP: str = Field(default="20/minute", description="SlowAPI limit for pickup routes")

    # ===================
    # CORS Settings
    # ===================
    ALLOWED_ORIGINS: Annotated[List[str], NoDecode] = Field(
        default=["http://localhost:3000", "http://127.0.0.1:3000"],
        description="Allowed CORS origins",
    )

    @field_validator("ALLOWED_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        return _split_csv(v)

    # ===================
    # Error Tracking
    # ===================
    SENTRY_DSN: Optional[str] = None

    # ===================
    # Logging
    # ===================
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "json"  # json or text
    LOG_FILE: Optional[str] = None

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"

    @property
    def default_location_id(self) -> Optional[int]:
        return self.PICKUP_DEFAULT_LOCATION_ID or self.PICKUP_STORE_LOCATION_ID


@lru_cache
def get_settings() -> Settings:
    """Singleton settings loader (cached)."""
    return Settings()


settings = get_settings()
