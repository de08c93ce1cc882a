"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")

MISSING_SUPABASE_ERROR = (
    "Missing environment variables. "
    "Please set SUPABASE_URL and SUPABASE_ANON_KEY in the deployment settings."
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str = ""
    supabase_anon_key: str = ""
    n8n_webhook_url: str = ""
    public_base_url: str = "http://localhost:8000"
    config_url: str | None = None
    dev_config_path: str = ".fleetfox/dev_config.json"
    session_storage_dir: str = ".fleetfox/sessions"
    storage_bucket: str = "vehicle-qa-images"
    notification_webhook_secret: str | None = None
    submission_timeout_seconds: float = 30.0
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def public_config(settings: Settings) -> dict[str, str]:
    """Return the configuration that is safe to expose to browsers."""
    payload = {
        "SUPABASE_URL": settings.supabase_url,
        "SUPABASE_ANON_KEY": settings.supabase_anon_key,
        "N8N_WEBHOOK_URL": settings.n8n_webhook_url,
    }
    if not settings.supabase_url or not settings.supabase_anon_key:
        payload["error"] = MISSING_SUPABASE_ERROR
    return payload
