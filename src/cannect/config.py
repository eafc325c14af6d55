"""
Configuration — typed, validated settings loaded from environment/.env.

Uses pydantic-settings to:
  - Load from CANNECT_* environment variables
  - Fall back to a .env file
  - Validate types and constraints at startup

The job itself is described by JSON documents: either one combined file
(CANNECT_CATALOG_ORDER) or a catalog file plus an order file
(CANNECT_CATALOG + CANNECT_ORDER). Exactly one of the two forms must be set.

The GitHub token is deliberately not a setting: the GitHub source reads
GITHUB_TOKEN from the process environment at fetch time.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_ENV_OUT = Path("./cannect.env")


class AppSettings(BaseSettings):
    """
    Root application settings.

    Load order (highest priority first):
      1. Environment variables (CANNECT_ prefix)
      2. .env file in the working directory
      3. Default values
    """

    model_config = SettingsConfigDict(
        env_prefix="CANNECT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    catalog: Path | None = Field(default=None, description="JSON file holding catalogs")
    order: Path | None = Field(default=None, description="JSON file holding orders")
    catalog_order: Path | None = Field(
        default=None, description="JSON file holding both catalogs and orders"
    )

    env_out: Path = Field(default=DEFAULT_ENV_OUT, description="env scheme output file")
    con_limit: int = Field(default=5, ge=1, description="Concurrent destination limit")
    timeout_seconds: float = Field(default=30, gt=0, description="Overall job deadline")

    github_api_url: str = Field(default="https://api.github.com")
    http_timeout_seconds: int = Field(default=60, ge=1)
    log_level: str = Field(default="INFO")

    @model_validator(mode="after")
    def check_job_sources(self) -> AppSettings:
        """Require either catalog + order, or catalog_order alone."""
        split = self.catalog is not None or self.order is not None
        if self.catalog_order is not None and split:
            raise ValueError("CATALOG_ORDER is exclusive to CATALOG and ORDER")
        if self.catalog_order is None and (self.catalog is None or self.order is None):
            raise ValueError("Set CATALOG and ORDER together, or CATALOG_ORDER alone")
        return self
