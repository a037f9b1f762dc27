"""Application configuration using Pydantic Settings."""

from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Orderhook API"
    app_env: str = "development"
    debug: bool = False
    api_v1_prefix: str = "/api/v1"

    # Database (PostgreSQL)
    database_url: str = "postgresql+asyncpg://localhost:5432/orderhook"
    database_pool_size: int = 10

    # Payment provider (Cryptomus-style signed callbacks)
    payment_webhook_secret: str = ""
    test_payment_webhook_secret: str = ""
    test_mode: bool = False
    payment_signature_header: str = "sign"
    payment_provider_name: str = "Cryptomus"

    # Telegram (operator alerts)
    telegram_bot_token: str = ""
    telegram_alerts_chat_id: str = ""

    # API Authentication (operator endpoints)
    api_key_header: str = "x-api-key"
    api_keys: str = ""  # Comma-separated list

    # Administrator roster
    admin_roles: str = "admin"  # Comma-separated list, case-insensitive

    # Notification repair
    notification_repair_window_hours: int = 24

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.app_env.lower() == "production"

    @property
    def valid_api_keys(self) -> List[str]:
        """Get list of valid API keys."""
        if not self.api_keys:
            return []
        return [key.strip() for key in self.api_keys.split(",") if key.strip()]

    @property
    def active_payment_webhook_secret(self) -> str:
        """Get the active webhook signing secret based on test mode."""
        if self.test_mode and self.test_payment_webhook_secret:
            return self.test_payment_webhook_secret
        return self.payment_webhook_secret

    @property
    def admin_role_names(self) -> List[str]:
        """Get lower-cased administrator role names."""
        return [role.strip().lower() for role in self.admin_roles.split(",") if role.strip()]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
