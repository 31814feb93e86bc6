"""Environment-backed authentication settings with strict validation."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping

from accountauth.auth.policy import AuthPolicy

logger = logging.getLogger(__name__)

REQUIRED_ENV_VARS = ("DATABASE_URL",)

DEFAULT_MAX_FAILED_ATTEMPTS = 5
DEFAULT_LOCKOUT_DURATION_MS = 30 * 60 * 1000

_TRUE_VALUES = ("1", "true", "yes", "on")


def _read_env_var(name: str, env: Mapping[str, str | None]) -> str:
    value = env.get(name)
    if value is None or str(value).strip() == "":
        raise RuntimeError(f"Missing required environment variable: {name}")
    return str(value)


def _read_int(name: str, env: Mapping[str, str | None], default: int) -> int:
    raw = str(env.get(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise RuntimeError(f"Environment variable {name} must be an integer, got {raw!r}") from exc


def _read_bool(name: str, env: Mapping[str, str | None], default: bool) -> bool:
    raw = str(env.get(name) or "").strip().lower()
    if not raw:
        return default
    return raw in _TRUE_VALUES


@dataclass(frozen=True)
class Settings:
    database_url: str
    max_failed_attempts: int
    lockout_duration_ms: int
    require_verified_email: bool
    app_env: str

    def policy(self) -> AuthPolicy:
        return AuthPolicy(
            max_failed_attempts=self.max_failed_attempts,
            lockout_duration_ms=self.lockout_duration_ms,
            require_verified_email=self.require_verified_email,
        )


def load_settings(env: Mapping[str, str | None] | None = None) -> Settings:
    """Load and validate environment variables into a Settings object."""
    source_env = os.environ if env is None else env

    missing = [key for key in REQUIRED_ENV_VARS if not str(source_env.get(key) or "").strip()]
    if missing:
        raise RuntimeError(f"Missing required environment variables: {', '.join(missing)}")

    app_env = str(source_env.get("APP_ENV", "development")).strip() or "development"

    settings = Settings(
        database_url=_read_env_var("DATABASE_URL", source_env),
        max_failed_attempts=_read_int("MAX_FAILED_ATTEMPTS", source_env, DEFAULT_MAX_FAILED_ATTEMPTS),
        lockout_duration_ms=_read_int("LOCKOUT_DURATION_MS", source_env, DEFAULT_LOCKOUT_DURATION_MS),
        require_verified_email=_read_bool("REQUIRE_VERIFIED_EMAIL", source_env, False),
        app_env=app_env,
    )
    try:
        settings.policy()
    except ValueError as exc:
        raise RuntimeError(f"Invalid authentication policy: {exc}") from exc

    logger.info(
        "Loaded authentication settings for env=%s (max_failed_attempts=%s, lockout_duration_ms=%s)",
        settings.app_env,
        settings.max_failed_attempts,
        settings.lockout_duration_ms,
    )
    return settings
