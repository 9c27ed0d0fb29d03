"""
Configuration settings for the world layoffs cleaning pipeline.

Uses Pydantic Settings to load environment variables for database connections,
table names, CSV conventions, analytics defaults, and logging.
"""
from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Database
    db_host: str = Field("localhost", alias="DB_HOST")
    db_port: int = Field(5432, alias="DB_PORT")
    db_user: str = Field("postgres", alias="DB_USER")
    db_password: str = Field("postgres", alias="DB_PASSWORD")
    db_name: str = Field("world_layoffs", alias="DB_NAME")
    db_statement_timeout_ms: int = Field(60_000, alias="DB_STATEMENT_TIMEOUT_MS")

    # Tables
    raw_table: str = Field("layoffs", alias="RAW_TABLE")
    clean_table: str = Field("layoffs_clean", alias="CLEAN_TABLE")

    # Files
    csv_null_token: str = Field("NULL", alias="CSV_NULL_TOKEN")
    results_dir: str = Field("results", alias="RESULTS_DIR")

    # Analytics
    top_n_per_year: int = Field(5, alias="TOP_N_PER_YEAR", ge=1)

    # Application
    app_env: str = Field("development", alias="APP_ENV")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(False, alias="LOG_JSON")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    @property
    def dsn(self) -> str:
        return (
            f"postgresql://{self.db_user}:{self.db_password}"
            f"@{self.db_host}:{self.db_port}/{self.db_name}"
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Retrieve a cached instance of Settings to avoid repeated env parsing.
    """
    return Settings()


__all__ = ["Settings", "get_settings"]
