"""
Centralized configuration for the Localite auth client.

All settings are loaded from environment variables with sensible defaults.
Supabase settings are namespaced with SUPABASE_*.
"""

from functools import lru_cache
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
    app_name: str = "Localite"
    app_version: str = "0.1.0"
    debug: bool = False

    # Supabase (hosted identity provider + profile store)
    supabase_url: str = ""
    supabase_anon_key: str = ""
    profiles_table: str = "users"

    # Email verification
    verification_redirect_url: str = "localite://auth/verify"
    default_language: str = "zh-TW"
    resend_cooldown_ms: int = 60_000
    resend_verification_on_sign_in: bool = True

    # Credentials checked locally before any network call
    min_password_length: int = 6

    # Upper bound for every gateway call
    gateway_timeout_seconds: float = 15.0


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()
