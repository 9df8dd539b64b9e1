from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "Bad Bank API"
    database_url: str = "sqlite:///badbank.db"
    log_level: str = "INFO"

    jwt_secret: str = "change-me-in-production"
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60
    password_hash_iterations: int = 260_000

    cors_origins: list[str] = ["http://localhost:3000"]

    # Bounds for the balance mutation retry loop
    max_retries: int = 5
    retry_backoff_seconds: float = 0.05
    lock_timeout_seconds: float = 5.0
    db_busy_timeout_seconds: float = 5.0

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="BANK_",
        extra="ignore",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
