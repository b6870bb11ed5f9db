"""Application configuration objects."""

from __future__ import annotations

import os
from functools import lru_cache
from typing import Any, Type

from sqlalchemy.pool import NullPool, StaticPool


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes"}


class BaseConfig:
    """Shared defaults across all environments."""

    APP_NAME = "Monthly Planner"
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_DATABASE_URI = os.getenv(
        "DATABASE_URL",
        "sqlite+pysqlite:///planner_dev.db",
    )
    OPENROUTER_API_KEY = os.getenv("OPENROUTER_API_KEY") or os.getenv("AI_API_KEY", "")
    AI_API_KEY = OPENROUTER_API_KEY  # alias used by the generator client
    AI_API_BASE = os.getenv("AI_API_BASE", "https://openrouter.ai/api/v1")
    AI_MODEL_NAME = os.getenv("AI_MODEL_NAME") or os.getenv("OPENROUTER_MODEL", "openai/gpt-4o-mini")
    AI_TEMPERATURE = float(os.getenv("AI_TEMPERATURE") or os.getenv("OPENROUTER_TEMPERATURE", "0.7"))
    AI_MAX_TOKENS = int(os.getenv("AI_MAX_TOKENS") or os.getenv("OPENROUTER_MAX_TOKENS", "4000"))
    AI_CONNECT_TIMEOUT_SEC = int(os.getenv("AI_CONNECT_TIMEOUT_SEC", "15"))
    AI_READ_TIMEOUT_SEC = int(os.getenv("AI_READ_TIMEOUT_SEC") or os.getenv("AI_TIMEOUT_SECONDS", "120"))
    DRAFT_TTL_HOURS = int(os.getenv("DRAFT_TTL_HOURS", "24"))
    DRAFT_SWEEP_ENABLE = _flag("DRAFT_SWEEP_ENABLE", "true")
    DRAFT_SWEEP_INTERVAL_SEC = int(os.getenv("DRAFT_SWEEP_INTERVAL_SEC", "3600"))
    QUOTA_DEFAULT_MONTHLY = int(os.getenv("QUOTA_DEFAULT_MONTHLY", "20"))
    QUOTA_REQUEST_MAX = int(os.getenv("QUOTA_REQUEST_MAX", "100"))
    QUOTA_HISTORY_MAX_MONTHS = int(os.getenv("QUOTA_HISTORY_MAX_MONTHS", "12"))
    EXTRACTION_DEFAULT_TASK_HOURS = float(os.getenv("EXTRACTION_DEFAULT_TASK_HOURS", "2"))
    EXTRACTION_SIMPLE_MAX_HOURS = float(os.getenv("EXTRACTION_SIMPLE_MAX_HOURS", "1"))
    EXTRACTION_MODERATE_MAX_HOURS = float(os.getenv("EXTRACTION_MODERATE_MAX_HOURS", "3"))
    EXTRACTION_DEFAULT_START_HOUR = int(os.getenv("EXTRACTION_DEFAULT_START_HOUR", "9"))
    PLAN_GENERATE_RATE_LIMIT = os.getenv("PLAN_GENERATE_RATE_LIMIT", "10 per minute")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    RATE_LIMIT_DEFAULTS = [limit.strip() for limit in os.getenv("RATE_LIMIT_DEFAULTS", "200 per minute;1000 per day").split(";") if limit.strip()]
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")
    JSON_SORT_KEYS = False
    SQLITE_TIMEOUT_SEC = int(os.getenv("SQLITE_TIMEOUT_SEC", "15"))
    SQLITE_BUSY_TIMEOUT_MS = int(os.getenv("SQLITE_BUSY_TIMEOUT_MS", "15000"))
    if SQLALCHEMY_DATABASE_URI.startswith("sqlite"):
        SQLALCHEMY_ENGINE_OPTIONS = {
            "poolclass": NullPool,
            "connect_args": {"timeout": SQLITE_TIMEOUT_SEC, "check_same_thread": False},
        }
    else:
        SQLALCHEMY_ENGINE_OPTIONS = {
            "pool_pre_ping": True,
            "pool_size": int(os.getenv("DB_POOL_SIZE", "5")),
            "max_overflow": int(os.getenv("DB_MAX_OVERFLOW", "10")),
            "pool_timeout": int(os.getenv("DB_POOL_TIMEOUT", "30")),
        }


class DevConfig(BaseConfig):
    DEBUG = True


class ProdConfig(BaseConfig):
    DEBUG = False


class TestConfig(BaseConfig):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite+pysqlite:///:memory:"
    # One shared connection so the in-memory schema survives across sessions.
    SQLALCHEMY_ENGINE_OPTIONS = {
        "poolclass": StaticPool,
        "connect_args": {"check_same_thread": False},
    }
    OPENROUTER_API_KEY = "test-key"
    AI_API_KEY = OPENROUTER_API_KEY
    DRAFT_SWEEP_ENABLE = False
    RATELIMIT_ENABLED = False


CONFIG_ALIASES: dict[str, Type[BaseConfig]] = {
    "dev": DevConfig,
    "development": DevConfig,
    "prod": ProdConfig,
    "production": ProdConfig,
    "test": TestConfig,
    "testing": TestConfig,
}


@lru_cache
def resolve_config(name_or_class: Any) -> Any:
    """Resolve config argument to the object expected by `app.config.from_object`."""

    if name_or_class is None:
        return DevConfig
    if isinstance(name_or_class, str):
        return CONFIG_ALIASES.get(name_or_class, name_or_class)
    return name_or_class
