"""
Runtime settings read from environment variables.

Every option has a default suited to local development. `Settings.from_env()` is
called once by `main.create_app()`; nothing else reads the environment.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_HCAPTCHA_VERIFY_URL = "https://hcaptcha.com/siteverify"
DEV_CORS_ORIGIN = "http://localhost:3000"


def _env_str(name: str, default: str) -> str:
    return os.environ.get(name, default).strip() or default


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name, "").strip().lower()
    if not raw:
        return default
    return raw in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    environment: str = "development"
    port: int = 5000

    database_url: str = ""
    db_host: str = "localhost"
    db_port: int = 5432
    db_name: str = "portfolio_db"
    db_user: str = "postgres"
    db_password: str = "postgres"
    db_pool_min_size: int = 1
    db_pool_max_size: int = 5
    db_command_timeout: float = 30.0
    db_auto_create_schema: bool = True

    cors_origin: str = "*"

    hcaptcha_secret_key: str = ""
    hcaptcha_verify_url: str = DEFAULT_HCAPTCHA_VERIFY_URL
    hcaptcha_timeout: float = 10.0

    log_level: str = "INFO"
    version: str = "1.0.0"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def allowed_origins(self) -> list[str]:
        if self.is_production:
            return [self.cors_origin]
        return [DEV_CORS_ORIGIN]

    @classmethod
    def from_env(cls) -> "Settings":
        environment = (
            os.environ.get("NODE_ENV", "").strip()
            or os.environ.get("APP_ENV", "").strip()
            or "development"
        ).lower()
        production = environment == "production"

        return cls(
            environment=environment,
            port=_env_int("PORT", 5000),
            database_url=os.environ.get("DATABASE_URL", "").strip(),
            db_host=_env_str("DB_HOST", "localhost"),
            db_port=_env_int("DB_PORT", 5432),
            db_name=_env_str("DB_NAME", "portfolio_db"),
            db_user=_env_str("DB_USER", "postgres"),
            db_password=os.environ.get("DB_PASSWORD", "postgres"),
            db_pool_min_size=_env_int("DB_POOL_MIN_SIZE", 1),
            db_pool_max_size=_env_int("DB_POOL_MAX_SIZE", 5),
            db_command_timeout=_env_float("DB_COMMAND_TIMEOUT", 30.0),
            db_auto_create_schema=_env_bool("DB_AUTO_CREATE_SCHEMA", not production),
            cors_origin=_env_str("CORS_ORIGIN", "*"),
            hcaptcha_secret_key=os.environ.get("HCAPTCHA_SECRET_KEY", "").strip(),
            hcaptcha_verify_url=_env_str("HCAPTCHA_VERIFY_URL", DEFAULT_HCAPTCHA_VERIFY_URL),
            hcaptcha_timeout=_env_float("HCAPTCHA_TIMEOUT", 10.0),
            log_level=_env_str("LOG_LEVEL", "INFO"),
        )
