"""Configuration and environment loading for WebAffe Console."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Supabase (identity provider + document store)
    supabase_url: str
    supabase_key: str
    store_timeout: float = 10.0  # Seconds per document-store request

    # Account auto-approved and promoted on first sign-in
    bootstrap_admin_email: str | None = None

    # Sign-in flows
    site_url: str = "http://localhost:5173"
    oauth_provider: str = "google"
    email_link_store_path: str = ".webaffe/sign_in.json"
    min_password_length: int = 6

    # Session state
    session_queue_size: int = 100

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
