# count_comparisons/core/config.py
from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "count-comparisons"
    env: Literal["dev", "prod", "test"] = "dev"

    database_url: str = Field(
        default="sqlite://",
        description="SQLAlchemy URL used by the CLI when --database-url is not given",
    )
    echo_sql: bool = Field(
        default=False, description="Echo SQL emitted by engines created here"
    )

    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="COUNT_COMPARISONS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
