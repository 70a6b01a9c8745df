"""Environment-driven settings for the Expense Tracker API."""
from functools import lru_cache
from typing import List, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings.

    Each field maps to the environment variable of the same name, upper-cased
    (PORT, MONGODB_URI, DB_NAME, ...); values in `.env` are read too. Blank
    variables fall back to the defaults.
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
    )

    port: int = 5000
    mongodb_uri: Optional[str] = None
    db_name: str = "expense_tracker"
    collection_name: str = "expenses"
    cors_origins: str = "*"  # comma-separated
    max_body_size: int = 100 * 1024  # 100 KB
    rate_limit: str = "15/minute"
    rate_limit_enabled: bool = False
    log_level: str = "INFO"

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return value.upper()

    @property
    def cors_origin_list(self) -> List[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    return Settings()
