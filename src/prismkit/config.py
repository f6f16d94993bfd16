from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppConfig(BaseModel):
    """Application-specific configuration values."""

    name: str = "prismkit"
    env: str = "development"
    debug: bool = False
    log_level: str = "INFO"
    # Transport settings for FastMCP: "stdio" (default), "http", or "sse"
    transport: Literal["stdio", "http", "sse"] = "stdio"
    host: str = "127.0.0.1"
    port: int = 8000


class PrismicConfig(BaseModel):
    """Content repository connection values."""

    endpoint: Optional[str] = None  # e.g. https://lesbonneschoses.prismic.io/api
    access_token: Optional[str] = None  # only needed for private repositories
    timeout: float = 30.0
    verify_ssl: bool = True
    default_page_size: int = 20


class Settings(BaseSettings):
    """Top-level settings loaded from environment variables and .env only."""

    model_config = SettingsConfigDict(
        env_prefix="PRISMKIT_",
        env_nested_delimiter="__",
        env_file=".env",
        extra="ignore",
    )

    app: AppConfig = AppConfig()
    prismic: PrismicConfig = PrismicConfig()


def load_settings() -> Settings:
    """Load settings from environment variables and .env only."""
    return Settings()  # type: ignore[call-arg]
