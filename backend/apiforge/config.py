"""
APIForge - Configuration
"""
from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import List


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    # Application
    APP_NAME: str = "APIForge"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False

    # Metadata store (profiles, tables, columns, endpoints)
    DATABASE_URL: str = "sqlite:///./data/apiforge.db"

    # Credential vault - 32 byte key (raw text or 64 hex chars)
    ENCRYPTION_KEY: str = "change-me-to-a-32-byte-secret!!!"

    # Identity tokens
    SECRET_KEY: str = "your-super-secret-key-change-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # Remote databases: single attempt, bounded by this timeout
    CONNECT_TIMEOUT_SECONDS: int = 10

    # Logging
    LOG_JSON: bool = True

    # CORS
    CORS_ORIGINS: List[str] = ["http://localhost:5173", "http://localhost:3000"]

    class Config:
        env_file = ".env"
        case_sensitive = True


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
