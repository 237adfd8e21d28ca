# app/config.py — Pydantic settings (env vars)

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Okta
    okta_domain: str
    okta_api_token: str
    okta_client_id: str
    okta_client_secret: str | None = None
    okta_timeout_seconds: float = 10.0

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )

    @field_validator("okta_domain")
    @classmethod
    def _normalize_okta_domain(cls, value: str) -> str:
        cleaned = value.strip().rstrip("/")
        if not cleaned:
            raise ValueError("OKTA_DOMAIN must be set and non-empty")
        if not cleaned.startswith("http://") and not cleaned.startswith("https://"):
            cleaned = f"https://{cleaned}"
        return cleaned

    @field_validator("okta_api_token")
    @classmethod
    def _validate_okta_api_token(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("OKTA_API_TOKEN must be set and non-empty")
        return cleaned

    @field_validator("okta_timeout_seconds")
    @classmethod
    def _validate_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("OKTA_TIMEOUT_SECONDS must be positive")
        return value


@lru_cache
def get_settings() -> Settings:
    return Settings()
