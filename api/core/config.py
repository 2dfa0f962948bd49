"""
Environment-based configuration.

Every setting is read lazily from `os.environ` so tests can override values
with `monkeypatch.setenv` without reloading modules.
"""

from __future__ import annotations

import os

DEFAULT_SESSION_SECRET = "dev-change-this-secret"
DEFAULT_CORS_ORIGINS = "http://localhost:3000,http://127.0.0.1:3000"


def env_str(name: str, default: str = "") -> str:
    return os.environ.get(name, default).strip() or default


def env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def env_bool(name: str, default: bool = False) -> bool:
    raw = os.environ.get(name, "").strip().lower()
    if not raw:
        return default
    return raw in {"1", "true", "yes", "on"}


def is_production() -> bool:
    return env_str("APP_ENV", "development").lower() == "production"


def cors_origins() -> list[str]:
    raw = env_str("CORS_ORIGINS", DEFAULT_CORS_ORIGINS)
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


def session_secret() -> str:
    # Local default keeps development simple.
    # In production, set SESSION_SECRET in environment.
    return env_str("SESSION_SECRET", DEFAULT_SESSION_SECRET)


def session_max_age_days() -> int:
    return env_int("SESSION_MAX_AGE_DAYS", 7)
