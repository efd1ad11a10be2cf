"""
Settings loading and store connection arguments.
"""

from __future__ import annotations

import ssl

import pytest

from core.config import DEV_CORS_ORIGIN, Settings
from core.db import _sanitize_database_url, connect_kwargs

ENV_VARS = [
    "NODE_ENV",
    "APP_ENV",
    "PORT",
    "DATABASE_URL",
    "DB_HOST",
    "DB_PORT",
    "DB_NAME",
    "DB_USER",
    "DB_PASSWORD",
    "DB_AUTO_CREATE_SCHEMA",
    "CORS_ORIGIN",
    "HCAPTCHA_SECRET_KEY",
    "HCAPTCHA_TIMEOUT",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults_suit_local_development():
    settings = Settings.from_env()

    assert settings.environment == "development"
    assert settings.is_production is False
    assert settings.port == 5000
    assert settings.db_host == "localhost"
    assert settings.db_port == 5432
    assert settings.db_name == "portfolio_db"
    assert settings.db_auto_create_schema is True
    assert settings.allowed_origins == [DEV_CORS_ORIGIN]


def test_production_from_env(monkeypatch):
    monkeypatch.setenv("NODE_ENV", "production")
    monkeypatch.setenv("PORT", "8080")
    monkeypatch.setenv("CORS_ORIGIN", "https://portfolio.example")
    monkeypatch.setenv("HCAPTCHA_SECRET_KEY", "  0xSECRET  ")

    settings = Settings.from_env()

    assert settings.is_production is True
    assert settings.port == 8080
    assert settings.db_auto_create_schema is False
    assert settings.allowed_origins == ["https://portfolio.example"]
    assert settings.hcaptcha_secret_key == "0xSECRET"


def test_bad_numbers_fall_back_to_defaults(monkeypatch):
    monkeypatch.setenv("PORT", "not-a-port")
    monkeypatch.setenv("HCAPTCHA_TIMEOUT", "soon")

    settings = Settings.from_env()

    assert settings.port == 5000
    assert settings.hcaptcha_timeout == 10.0


def test_connect_kwargs_from_parts():
    kwargs = connect_kwargs(Settings(db_host="db", db_name="x", db_user="u", db_password="p"))

    assert kwargs == {"ssl": False, "host": "db", "port": 5432, "database": "x", "user": "u", "password": "p"}


def test_connect_kwargs_production_uses_tls_and_url():
    kwargs = connect_kwargs(
        Settings(environment="production", database_url="postgresql://u:p@host/db?sslmode=require&app=x")
    )

    assert kwargs["dsn"] == "postgresql://u:p@host/db?app=x"
    assert isinstance(kwargs["ssl"], ssl.SSLContext)
    assert kwargs["ssl"].verify_mode == ssl.CERT_NONE
    assert "host" not in kwargs


def test_sanitize_leaves_plain_url_untouched():
    assert _sanitize_database_url("postgresql://u@h/db") == "postgresql://u@h/db"
