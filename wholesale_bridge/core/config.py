"""Application configuration using Pydantic settings."""

from functools import lru_cache
from typing import Literal

from pydantic import RedisDsn, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = True

    # API
    api_prefix: str = "/api"
    project_name: str = "Azan Wholesale Shopify App API"
    version: str = "1.0.0"
    app_url: str = "http://localhost:8000"  # Public URL Shopify redirects back to

    # Shopify
    shopify_api_key: str = ""
    shopify_api_secret: str = ""
    shopify_webhook_secret: str = ""  # Falls back to shopify_api_secret
    shopify_scopes: str = "read_products,write_products,read_orders,read_inventory,write_inventory"
    shopify_api_version: str = "2024-01"
    shopify_online_tokens: bool = False
    embedded_redirect: bool = False
    register_webhooks: bool = True
    shop_domain_suffixes: list[str] = [".myshopify.com", ".shopify.com"]

    # OAuth state
    nonce_ttl_seconds: int = 600  # 10 minutes

    # Outbound HTTP
    http_timeout_seconds: float = 10.0

    # Wholesale catalog (Azan Wholesale)
    catalog_base_url: str = "https://beta.azanwholesale.com"
    catalog_app_id: str = ""
    catalog_secret_key: str = ""

    # Storage
    storage_backend: Literal["memory", "redis"] = "memory"
    redis_url: RedisDsn = RedisDsn("redis://localhost:6379/0")
    encryption_key: str = "CHANGE-ME-IN-PRODUCTION-use-openssl-rand-hex-32"

    # Rate limiting
    rate_limit_auth: str = "30/minute"

    # CORS
    cors_origins: list[str] = [
        "http://localhost:3000",  # Next.js embedded frontend
        "https://admin.shopify.com",
    ]

    @computed_field  # type: ignore[prop-decorator]
    @property
    def webhook_secret(self) -> str:
        """Secret used to sign webhook bodies."""
        return self.shopify_webhook_secret or self.shopify_api_secret

    @computed_field  # type: ignore[prop-decorator]
    @property
    def oauth_redirect_uri(self) -> str:
        """Callback URL registered with the Shopify app."""
        return f"{self.app_url.rstrip('/')}{self.api_prefix}/auth/callback"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
