"""
Centralized configuration for the transactions backend.

This module provides a single source of truth for all configuration values.
Configuration is loaded from environment variables with sensible defaults.

Usage:
    from core.config import config

    db_path = config.store.path
    source_url = config.seed.source_url
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

BASE_DIR = Path(__file__).resolve().parent.parent
MEMORY_DB = ":memory:"


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class StoreConfig:
    """DuckDB record store configuration."""

    path: str = field(
        default_factory=lambda: os.getenv(
            "TRANSACTIONS_DB_PATH", str(BASE_DIR / "data" / "transactions.duckdb")
        )
    )
    query_timeout: float = 30.0
    write_timeout: float = 120.0  # reseed inserts the whole dataset

    @property
    def in_memory(self) -> bool:
        return self.path == MEMORY_DB


@dataclass(frozen=True)
class SeedConfig:
    """Remote dataset used to (re)initialize the store."""

    source_url: str = field(
        default_factory=lambda: os.getenv(
            "SEED_SOURCE_URL",
            "https://s3.amazonaws.com/roxiler.com/product_transaction.json",
        )
    )
    request_timeout: float = 30.0
    seed_on_startup: bool = field(default_factory=lambda: _env_bool("SEED_ON_STARTUP"))


@dataclass(frozen=True)
class WebConfig:
    """HTTP server configuration."""

    host: str = field(default_factory=lambda: os.getenv("WEB_HOST", "0.0.0.0"))
    port: int = field(default_factory=lambda: int(os.getenv("PORT", "5000")))

    # Comma-separated; "*" allows any origin
    cors_origins_raw: str = field(default_factory=lambda: os.getenv("CORS_ORIGINS", "*"))

    # Rate limiting
    rate_limit_per_minute: int = 120
    rate_limit_enabled: bool = field(
        default_factory=lambda: _env_bool("RATE_LIMIT_ENABLED", default=True)
    )

    request_timeout: float = 30.0
    slow_request_timeout: float = 300.0  # /initialize downloads and inserts

    @property
    def cors_origins(self) -> List[str]:
        return [origin.strip() for origin in self.cors_origins_raw.split(",") if origin.strip()]

    @property
    def rate_limit(self) -> str:
        return f"{self.rate_limit_per_minute}/minute"


@dataclass(frozen=True)
class PaginationConfig:
    """Defaults for the transaction listing."""

    default_page: int = 1
    default_limit: int = 10


@dataclass(frozen=True)
class AppConfig:
    """Main application configuration."""

    version: str = "1.0.0"
    store: StoreConfig = field(default_factory=StoreConfig)
    seed: SeedConfig = field(default_factory=SeedConfig)
    web: WebConfig = field(default_factory=WebConfig)
    pagination: PaginationConfig = field(default_factory=PaginationConfig)


# Global config instance
config = AppConfig()

VERSION = config.version


class ConfigurationError(Exception):
    """Raised when required configuration is missing or invalid."""
    pass


def validate_config(cfg: AppConfig = None) -> None:
    """
    Validate that all required configuration is present.

    Call this on application startup to fail fast with clear error messages
    instead of cryptic runtime failures.

    Raises:
        ConfigurationError: If configuration is missing or invalid
    """
    cfg = cfg or config
    errors = []

    if not cfg.store.path:
        errors.append("TRANSACTIONS_DB_PATH must not be empty")

    if not cfg.seed.source_url.startswith(("http://", "https://")):
        errors.append(
            f"SEED_SOURCE_URL must be an http(s) URL (got {cfg.seed.source_url!r})"
        )

    if not 0 < cfg.web.port < 65536:
        errors.append(f"PORT must be between 1 and 65535 (got {cfg.web.port})")

    if not cfg.web.cors_origins:
        errors.append("CORS_ORIGINS must list at least one origin (use '*' for any)")

    if cfg.pagination.default_limit < 1:
        errors.append("Default page size must be positive")

    if errors:
        error_msg = "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
        raise ConfigurationError(error_msg)
