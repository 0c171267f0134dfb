"""Typed settings configuration - single source of truth."""

from functools import lru_cache

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database
    database_url: str = "sqlite+aiosqlite:///./pdfqa.db"

    # UI
    ui_origin: str = "http://localhost:5173"

    # Session credential
    # Required; there is no usable default signing key
    jwt_secret: SecretStr
    session_ttl_days: int = 7
    session_cookie_name: str = "token"
    session_cookie_secure: bool = False

    # OTP challenges
    otp_length: int = 6
    otp_ttl_minutes: int = 10
    # 0 disables the background reaper; expiry is always checked on read
    challenge_reaper_interval_seconds: int = 0

    # SMTP notifier (logging notifier is used when smtp_host is unset)
    smtp_host: str | None = None
    smtp_port: int = 587
    smtp_user: str | None = None
    smtp_password: SecretStr | None = None
    smtp_sender: str | None = None

    # Inference (local extractive stub is used when hf_api_key is unset)
    hf_api_key: SecretStr | None = None
    hf_model_url: str = (
        "https://api-inference.huggingface.co/models/deepset/roberta-base-squad2"
    )
    inference_timeout_seconds: float = 30.0

    # Documents
    max_upload_bytes: int = 25 * 1024 * 1024
    context_char_limit: int = 30000


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
