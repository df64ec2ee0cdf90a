"""
Process settings read from the environment.

Settings are loaded once at startup (see `api/main.py`) and passed to the
components that need them. Nothing else reads `os.environ`.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Mapping

DEFAULT_JWT_SECRET = "dev-secret-change-me"

_APP_ENVS = ("dev", "staging", "prod")
_LOG_LEVELS = ("debug", "info", "warn", "error")
_LOG_FORMATS = ("json", "console")


class ConfigError(RuntimeError):
    pass


def _env_str(env: Mapping[str, str], name: str, default: str = "") -> str:
    return (env.get(name) or "").strip() or default


def _env_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = (env.get(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_list(env: Mapping[str, str], name: str, default: str) -> list[str]:
    raw = _env_str(env, name, default)
    return [item.strip() for item in raw.split(",") if item.strip()]


@dataclass(frozen=True)
class Settings:
    app_name: str = "suassu-api"
    app_env: str = "dev"
    http_port: int = 8080

    db_dsn: str = ""
    db_max_open_conns: int = 20
    db_max_idle_conns: int = 10
    db_conn_max_idle_ms: int = 60_000
    db_conn_max_life_ms: int = 300_000
    db_ping_timeout_s: float = 5.0

    log_level: str = "info"
    log_format: str = "console"

    jwt_secret: str = DEFAULT_JWT_SECRET
    jwt_issuer: str = "suassu-api"
    jwt_audience: str = "suassu-clients"
    jwt_access_ttl_min: int = 15
    bcrypt_cost: int = 12

    request_timeout_s: float = 30.0
    cors_allowed_origins: list[str] = field(default_factory=lambda: ["http://localhost:3000"])

    @property
    def is_prod(self) -> bool:
        return self.app_env == "prod"


def load_settings(env: Mapping[str, str] | None = None) -> Settings:
    """
    Build `Settings` from environment variables.

    Raises ConfigError when a value is out of range or a production
    requirement is missing.
    """
    env = os.environ if env is None else env

    app_env = _env_str(env, "APP_ENV", "dev").lower()
    if app_env not in _APP_ENVS:
        raise ConfigError(f"APP_ENV must be one of {', '.join(_APP_ENVS)}, got {app_env!r}.")

    log_level = _env_str(env, "LOG_LEVEL", "info").lower()
    if log_level not in _LOG_LEVELS:
        raise ConfigError(f"LOG_LEVEL must be one of {', '.join(_LOG_LEVELS)}, got {log_level!r}.")

    log_format = _env_str(env, "LOG_FORMAT", "json" if app_env == "prod" else "console").lower()
    if log_format not in _LOG_FORMATS:
        raise ConfigError(f"LOG_FORMAT must be one of {', '.join(_LOG_FORMATS)}, got {log_format!r}.")

    db_dsn = _env_str(env, "DB_DSN") or _env_str(env, "DATABASE_URL")
    jwt_secret = _env_str(env, "JWT_SECRET", DEFAULT_JWT_SECRET)

    if app_env == "prod":
        if not db_dsn:
            raise ConfigError("DB_DSN (or DATABASE_URL) is required when APP_ENV=prod.")
        if jwt_secret == DEFAULT_JWT_SECRET:
            raise ConfigError("JWT_SECRET must be set to a non-default value when APP_ENV=prod.")
        for name in ("JWT_ISSUER", "JWT_AUDIENCE", "JWT_ACCESS_TTL_MIN"):
            if not _env_str(env, name):
                raise ConfigError(f"{name} is required when APP_ENV=prod.")

    max_open = max(1, _env_int(env, "DB_MAX_OPEN_CONNS", 20))
    max_idle = max(0, _env_int(env, "DB_MAX_IDLE_CONNS", 10))

    ttl_min = _env_int(env, "JWT_ACCESS_TTL_MIN", 15)
    if ttl_min <= 0:
        raise ConfigError("JWT_ACCESS_TTL_MIN must be positive.")

    return Settings(
        app_name=_env_str(env, "APP_NAME", "suassu-api"),
        app_env=app_env,
        http_port=_env_int(env, "HTTP_PORT", 8080),
        db_dsn=db_dsn,
        db_max_open_conns=max_open,
        db_max_idle_conns=max_idle,
        db_conn_max_idle_ms=_env_int(env, "DB_CONN_MAX_IDLE_MS", 60_000),
        db_conn_max_life_ms=_env_int(env, "DB_CONN_MAX_LIFE_MS", 300_000),
        log_level=log_level,
        log_format=log_format,
        jwt_secret=jwt_secret,
        jwt_issuer=_env_str(env, "JWT_ISSUER", "suassu-api"),
        jwt_audience=_env_str(env, "JWT_AUDIENCE", "suassu-clients"),
        jwt_access_ttl_min=ttl_min,
        bcrypt_cost=_env_int(env, "BCRYPT_COST", 12),
        request_timeout_s=float(_env_int(env, "REQUEST_TIMEOUT_S", 30)),
        cors_allowed_origins=_env_list(env, "CORS_ALLOWED_ORIGINS", "http://localhost:3000"),
    )
