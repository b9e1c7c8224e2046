from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    APP_NAME: str = "filehost"
    VERSION: str = "0.1.0"

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./filehost.db"
    DB_ECHO: bool = False
    # False keeps keys and records in process memory; nothing survives a restart.
    USE_DATABASE: bool = True
    # Seeded into the in-memory key store at startup when USE_DATABASE is off.
    DEV_API_KEY: Optional[str] = None

    # Blob storage
    UPLOAD_PATH: str = "upload"
    PUBLIC_BASE_URL: str = "http://127.0.0.1:8000"

    # Ingestion limits
    MAX_UPLOAD_BYTES: int = 1024 * 1024 * 1024  # 1 GiB
    PEEK_BYTES: int = 262
    CHUNK_SIZE_BYTES: int = 64 * 1024

    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True


@lru_cache()
def get_settings() -> Settings:
    return Settings()
