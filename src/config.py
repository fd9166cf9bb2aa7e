"""Pydantic Settings — loads configuration from environment variables."""

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {"env_file": ".env", "extra": "ignore"}

    public_base_url: str = "http://localhost:8000"
    redis_url: str = "redis://localhost:6379"
    asset_dir: str = "data/assets"

    default_ttl_seconds: int = 600
    max_ttl_seconds: int = 7 * 24 * 3600
    expired_retention_seconds: int = 24 * 3600

    max_upload_bytes: int = 10 * 1024 * 1024
    proxy_timeout_seconds: float = 15.0
    log_level: str = "INFO"


class ClientSettings(BaseSettings):
    """Settings for the paste pipeline running next to the editor."""

    model_config = {"env_file": ".env", "env_prefix": "PASTE_", "extra": "ignore"}

    backend_url: str = "http://localhost:8000"
    request_timeout_seconds: float = 30.0


@lru_cache
def get_settings() -> Settings:
    return Settings()


@lru_cache
def get_client_settings() -> ClientSettings:
    return ClientSettings()
