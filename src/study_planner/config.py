"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    api_base_url: str
    identity_base_url: str
    public_base_url: str = "http://localhost:8000"
    federated_provider: str = "azure-ad"
    dev_login_enabled: bool = True
    demo_email: str = "demo@example.com"
    session_cookie_name: str = "study_planner_session"
    session_secret_key: str
    session_ttl_seconds: int = 60 * 60 * 8
    http_timeout_seconds: float = 15
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def callback_url(settings: Settings, provider: str) -> str:
    """Return the absolute URL the identity provider redirects back to."""
    base = settings.public_base_url.rstrip("/")
    return f"{base}/auth/callback/{provider}"
