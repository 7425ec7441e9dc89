"""
Application configuration using Pydantic Settings
"""

from pydantic_settings import BaseSettings
from typing import Optional

from core.exceptions import ConfigurationError


class Settings(BaseSettings):
    """Application settings with environment variable support"""

    # Databases
    SOURCE_DATABASE_URL: Optional[str] = None  # legacy MySQL, e.g. mysql+aiomysql://...
    TARGET_DATABASE_URL: Optional[str] = None  # new PostgreSQL, e.g. postgresql+asyncpg://...

    # API
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000

    # Environment
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # Migration
    MIGRATION_MODE: str = "full"
    MIGRATION_TABLE: Optional[str] = None
    BATCH_SIZE: int = 1000
    SCHEDULE_MINUTES: Optional[int] = None

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"

    def require_databases(self, *names: str) -> None:
        """Fail fast when a store location is missing (both by default)."""
        names = names or ("SOURCE_DATABASE_URL", "TARGET_DATABASE_URL")
        missing = [
            name for name in names
            if not getattr(self, name)
        ]
        if missing:
            raise ConfigurationError(
                f"Missing {' or '.join(missing)}",
                context={"missing": missing}
            )


settings = Settings()
