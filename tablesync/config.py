"""
Configuration settings for tablesync.

Uses Pydantic Settings to load environment variables for database connections,
logging, and synchronization defaults. The schema core never reads these;
they only seed defaults at the infrastructure edge.
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
    db_name: str = Field("tablesync", alias="DB_NAME")
    db_schema: str = Field("public", alias="DB_SCHEMA")
    db_pool_min_size: int = Field(1, alias="DB_POOL_MIN_SIZE")
    db_pool_max_size: int = Field(10, alias="DB_POOL_MAX_SIZE")
    db_connect_retries: int = Field(3, alias="DB_CONNECT_RETRIES")
    db_create_database: bool = Field(True, alias="DB_CREATE_DATABASE")

    # Logging
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(False, alias="LOG_JSON")

    # Synchronization
    auto_drop_columns: bool = Field(False, alias="AUTO_DROP_COLUMNS")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    @property
    def dsn(self) -> str:
        """Compose a postgresql:// DSN from the connection fields."""
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
