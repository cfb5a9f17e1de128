from __future__ import annotations

from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator


_ASYNC_DRIVERS = ("+psycopg", "+aiosqlite")


class Settings(BaseSettings):
    DATABASE_URL: str

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    APP_NAME: str = "DentalCare API"
    ENV: str = "development"
    DEBUG: bool = False
    SQL_ECHO: bool = False

    # typeahead search is unpaginated; cap it
    SEARCH_RESULT_LIMIT: int = 200
    DASHBOARD_TOP_N: int = 5

    @field_validator("DATABASE_URL")
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        if not any(driver in v for driver in _ASYNC_DRIVERS):
            raise ValueError(
                "Async engine requires 'postgresql+psycopg://' "
                "or 'sqlite+aiosqlite://' URL."
            )

        return v


@lru_cache
def get_settings() -> Settings:
    return Settings()
