"""Storefront Configuration"""

from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache

DEFAULT_PRINTFUL_STORE_ID = "16815860"


class Settings(BaseSettings):
    """Application settings loaded from environment"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Storefront"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 4321

    # Cart persistence
    cart_storage_key: str = "sfh-cart"
    destination_storage_key: str = "sfh-ship-dest"
    cart_storage_path: Optional[str] = None

    # Money
    currency: str = "USD"
    default_locale: str = "en"
    fallback_shipping_minor_units: int = 0
    free_shipping_threshold_minor_units: int = 5000

    # Storefront backend (shipping estimate + checkout handoff)
    storefront_base_url: str = "http://localhost:4321"
    http_timeout_seconds: float = 30.0

    # Printful
    printful_api_url: str = "https://api.printful.com"
    printful_api_key: Optional[str] = None
    printful_store_id: Optional[str] = None

    @property
    def resolved_printful_store_id(self) -> str:
        """Printful store ID, falling back to the default when not numeric"""
        if self.printful_store_id and self.printful_store_id.isdigit():
            return self.printful_store_id
        return DEFAULT_PRINTFUL_STORE_ID

    @property
    def printful_configured(self) -> bool:
        """Check if a usable Printful API key is configured"""
        return bool(self.printful_api_key) and self.printful_api_key != "your-printful-api-key"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


settings = get_settings()
