"""
Application configuration settings.
"""
import os
from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import Optional


class Settings(BaseSettings):
    # Application
    APP_ENV: str = "development"
    DEBUG: bool = True
    APP_NAME: str = "Scorecard API"
    LOG_LEVEL: str = "INFO"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 3001

    # Database (embedded SQLite file under DATA_DIR unless DATABASE_URL is set)
    DATA_DIR: str = "./data"
    DATABASE_NAME: str = "scorecard.db"
    DATABASE_URL: Optional[str] = None

    # CORS
    CORS_ORIGINS: list[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]

    # Week boundaries are computed in this timezone
    SCORECARD_TIMEZONE: str = "UTC"

    # Background jobs
    WEEK_CHECK_INTERVAL_SECONDS: int = 60 * 60  # hourly
    BACKUP_CHECK_INTERVAL_SECONDS: int = 24 * 60 * 60  # daily
    MIN_BACKUP_AGE_DAYS: int = 7

    class Config:
        env_file = ".env"
        case_sensitive = True

    @property
    def database_path(self) -> str:
        return os.path.join(self.DATA_DIR, self.DATABASE_NAME)

    @property
    def database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return f"sqlite+aiosqlite:///{self.database_path}"

    @property
    def status_file_path(self) -> str:
        return os.path.join(self.DATA_DIR, "status.json")


@lru_cache()
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
