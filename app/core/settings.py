from functools import lru_cache
from pathlib import Path

from pydantic import PostgresDsn, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Database - allow both PostgreSQL and SQLite for development
    database_url: PostgresDsn | str = "sqlite:///./knowledge_share.db"
    database_pool_size: int = 20
    database_max_overflow: int = 40

    # Application
    app_name: str = "Knowledge Share API"
    debug: bool = False
    log_level: str = "INFO"
    logs_dir: Path = Path("logs")
    port: int = 8000
    cors_origins: list[str] = ["*"]

    # Authentication
    jwt_secret_key: str = "change-me-in-production"
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 7 * 24 * 60
    refresh_token_expire_days: int = 90
    password_hash_iterations: int = 260_000

    # Text processing
    text_processor: str = "mock"
    summary_max_length: int = 200
    improved_marker: str = "[AI Improved] "

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"  # Ignore extra fields from existing .env

    @field_validator("database_url")
    @classmethod
    def validate_database_url(cls, v):
        if not v:
            raise ValueError("DATABASE_URL must be set")
        return v

    @field_validator("summary_max_length")
    @classmethod
    def validate_summary_max_length(cls, v):
        # Room for at least one character before the ellipsis
        if v < 4:
            raise ValueError("SUMMARY_MAX_LENGTH must be at least 4")
        return v

    @property
    def is_sqlite(self) -> bool:
        return str(self.database_url).startswith("sqlite")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
