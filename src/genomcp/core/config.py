# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Application configuration via environment variables and .env files."""

from pathlib import Path
from typing import Annotated

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="GENOMCP_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
    )

    # API server
    api_host: str = "127.0.0.1"
    api_port: int = 8000
    api_workers: int = 1
    cors_origins: Annotated[list[str], NoDecode] = ["*"]

    @field_validator("cors_origins", mode="before")
    @classmethod
    def _parse_cors_origins(cls, v: object) -> list[str]:
        if isinstance(v, str):
            return [o.strip() for o in v.split(",") if o.strip()]
        return v if isinstance(v, list) else []

    # Ephemeral cache
    cache_backend: str = "memory"  # "memory" or "redis"
    cache_max_size: int = 4096
    redis_url: str = "redis://localhost:6379/0"

    # Durable variant registry
    registry_backend: str = "sqlite"  # "sqlite" or "memory"
    registry_db_path: Path = Path("genomcp.db")
    registry_default_shard: str = "global-stats"

    # Upstream data sources
    myvariant_url: str = "https://myvariant.info/v1"
    mygene_url: str = "https://mygene.info/v3"
    mydisease_url: str = "https://mydisease.info/v1"
    upstream_timeout: float = 15.0

    # Fetch orchestration
    fetch_concurrency: int = 5
    fetch_deadline: float | None = 30.0  # seconds per batch; None disables

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"


def get_settings() -> Settings:
    return Settings()
