"""Lightweight configuration for the setup tools."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings, read from ``TABLESETUP_*`` variables or ``.env``."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", env_prefix="TABLESETUP_"
    )

    database_url: str = Field(
        default="sqlite:///tablesetup.db", description="SQLAlchemy URL of the catalog database"
    )
    database_echo: bool = Field(default=False, description="Log every SQL statement")
    database_pool_size: int = Field(default=5, ge=1)
    database_max_overflow: int = Field(default=10, ge=0)
    data_dir: Path = Field(
        default=Path("catalogs"), description="Where JSON catalog snapshots live"
    )
    default_game_id: str = Field(
        default="cascadia",
        min_length=1,
        description="Game shown when no (or an unknown) game id is requested",
    )
    debug: bool = Field(
        default=False, description="Show raw storage error messages instead of sanitised ones"
    )
    auto_create_tables: bool = Field(
        default=True, description="Create missing tables when the API starts"
    )
    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:5173", "http://127.0.0.1:5173"],
        description="Origins allowed to call the HTTP API",
    )


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance."""

    return Settings()
