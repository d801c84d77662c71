# backend/tcoffice/config.py
from __future__ import annotations
import os


def _env_flag(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _database_url() -> str:
    """
    Resolve the database URL.

    DATABASE_URL wins. Otherwise the MySQL deployment variables
    (DB_HOST, DB_USER, DB_PASS, DB_NAME, DB_PORT) are used when DB_HOST is set,
    and local SQLite is the fallback for development.
    """
    url = os.environ.get("DATABASE_URL")
    if url:
        return url

    host = os.environ.get("DB_HOST")
    if host:
        user = os.environ.get("DB_USER", "root")
        password = os.environ.get("DB_PASS", "")
        name = os.environ.get("DB_NAME", "tcoffice")
        port = os.environ.get("DB_PORT", "3306")
        return f"mysql+pymysql://{user}:{password}@{host}:{port}/{name}"

    return "sqlite:///tcoffice.sqlite3"


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    SQLALCHEMY_DATABASE_URI = _database_url()
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Session cookie issued by POST /login
    SESSION_COOKIE_NAME = os.environ.get("SESSION_COOKIE_NAME", "tc_session")
    SESSION_COOKIE_SECURE = _env_flag("SESSION_COOKIE_SECURE", False)

    # Overwriting an already recorded day requires an explicit edit flag
    ATTENDANCE_REQUIRE_EDIT_MODE = _env_flag("ATTENDANCE_REQUIRE_EDIT_MODE", True)

    CORS_ALLOWED_ORIGINS = [
        origin.strip()
        for origin in os.environ.get(
            "CORS_ALLOWED_ORIGINS",
            "http://localhost:3000,http://127.0.0.1:3000,http://localhost:5173,http://127.0.0.1:5173",
        ).split(",")
        if origin.strip()
    ]

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # Check the database once at startup; failures are logged, not fatal
    DB_STARTUP_CHECK = _env_flag("DB_STARTUP_CHECK", True)

    APP_VERSION = os.environ.get("APP_VERSION", "1.0.0")
