"""
pjtboard configuration.

Usage:
    config = get_config()            # picks APP_ENV (default: development)
    engine = create_engine(config.DATABASE_URL)
"""

import os

# In-memory by default: the dashboard keeps no state across restarts.
_SQLITE_MEMORY = "sqlite://"


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Config:
    """Base configuration shared across all environments."""

    APP_TITLE = "pjtboard API"
    DEBUG = False
    TESTING = False

    DATABASE_URL = os.getenv("DATABASE_URL", _SQLITE_MEMORY)
    LOG_LEVEL = os.getenv("LOG_LEVEL", "")
    SEED_SAMPLE_DATA = _env_flag("SEED_SAMPLE_DATA", "true")
    CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]


class DevelopmentConfig(Config):
    DEBUG = True


class TestingConfig(Config):
    TESTING = True
    DATABASE_URL = os.getenv("TEST_DATABASE_URL", _SQLITE_MEMORY)
    SEED_SAMPLE_DATA = False


class ProductionConfig(Config):
    DEBUG = False


config = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
    "default": DevelopmentConfig,
}


def get_config(name: str | None = None):
    name = name or os.getenv("APP_ENV", "development")
    return config.get(name, config["default"])
