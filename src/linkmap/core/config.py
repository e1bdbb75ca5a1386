"""
Linkmap Configuration

Crawl limits, fetch behaviour and store location, read from the environment
once at import time.
"""

import os
from enum import Enum
from pathlib import Path


class Environment(str, Enum):
    """Application environment"""

    PRODUCTION = "production"
    DEVELOPMENT = "development"
    TEST = "test"


def _get_environment() -> Environment:
    """Get and validate ENVIRONMENT variable."""
    env_value = os.getenv("ENVIRONMENT", Environment.DEVELOPMENT.value)
    try:
        return Environment(env_value.lower())
    except ValueError:
        raise RuntimeError(
            f"Invalid ENVIRONMENT value: '{env_value}'. "
            "Must be 'production', 'development', or 'test'."
        )


def _get_optional_float(name: str) -> float | None:
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return float(value)


def _get_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class LinkmapSettings:
    """Linkmap configuration"""

    # Application
    APP_NAME: str = "linkmap"
    APP_VERSION: str = "0.1.0"

    # Environment
    ENVIRONMENT: Environment = _get_environment()

    # Project Paths
    DATA_DIR: Path = Path(os.getenv("LINKMAP_DATA_DIR", str(Path.cwd() / "data")))

    # Link graph store
    DB_PATH: str = os.getenv("LINKMAP_DB_PATH", str(DATA_DIR / "linkmap.db"))

    # Host suffix used to decide which discovered sites are tracked.
    # Should start with a dot, e.g. ".neocities.org"
    DOMAIN_SUFFIX: str = os.getenv("LINKMAP_DOMAIN_SUFFIX", "")

    # Crawler Behavior
    CRAWL_USER_AGENT: str = os.getenv(
        "CRAWL_USER_AGENT",
        f"{APP_NAME}/{APP_VERSION} (+https://example.local/; site mapper)",
    )
    # None means requests may block indefinitely
    CRAWL_TIMEOUT_SEC: float | None = _get_optional_float("CRAWL_TIMEOUT_SEC")
    CRAWL_MAX_PAGES: int = int(os.getenv("CRAWL_MAX_PAGES", "500"))
    CRAWL_MAX_FRONTIER: int = int(os.getenv("CRAWL_MAX_FRONTIER", "10000"))
    CRAWL_ABORT_ON_FETCH_ERROR: bool = _get_bool("CRAWL_ABORT_ON_FETCH_ERROR")

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")


settings = LinkmapSettings()
