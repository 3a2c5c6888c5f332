"""Application configuration from environment variables."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"


class Settings(BaseSettings):
    server_addr: str = "127.0.0.1"
    server_port: int = 8080
    log_level: str = "info"

    # CORS. Comma separated in the environment, e.g. "https://a.com,https://b.com"
    cors_origins: Annotated[list[str], NoDecode] = []

    # Directory holding overlay assets such as profile_overlay_300x300.png
    overlay_dir: Path = Path("assets")

    model_config = SettingsConfigDict(
        env_prefix="MANDELATAR_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("cors_origins", mode="before")
    @classmethod
    def _split_origins(cls, value):
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
    )


settings = Settings()
