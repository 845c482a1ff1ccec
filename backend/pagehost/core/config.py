from typing import Literal

from pydantic import HttpUrl
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings, read from the environment and `.env`."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
    )

    PROJECT_NAME: str = "pagehost"
    ENVIRONMENT: Literal["local", "staging", "production"] = "local"
    LOG_LEVEL: str = "INFO"

    SQLALCHEMY_DATABASE_URI: str = "sqlite:///./pagehost.db"
    # 秒：SQLite 写锁等待时间
    SQLITE_BUSY_TIMEOUT: float = 30.0

    SENTRY_DSN: HttpUrl | None = None


settings = Settings()  # type: ignore
