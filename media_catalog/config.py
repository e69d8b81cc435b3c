from typing import Dict, Literal
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    REDIS_URL: str = "redis://localhost:6379/0"
    REDIS_PREFIX: str = "catalog"
    STORE_BACKEND: Literal['redis', 'memory'] = 'redis'
    AUTH_BACKEND: Literal['redis', 'static'] = 'redis'
    AUTH_TOKENS: Dict[str, str] = {}

    UPLOAD_DIR: str = "uploads"
    UPLOAD_URL_PREFIX: str = "/uploads"
    MAX_UPLOAD_BYTES: int = 5 * 1024 * 1024

    DEFAULT_PAGE_LIMIT: int = 10
    MAX_PAGE_LIMIT: int = 100
    DEFAULT_SORT: str = "-createdAt"

    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore"
    )


settings = Settings()


def get_settings() -> Settings:
    return settings
