"""
Architectural Showcase Portal
Configuration classes for the Flask App Factory.

Usage:
    config_name = os.getenv("APP_ENV", "development")
    app.config.from_object(config[config_name]())
"""

import os
import secrets

basedir = os.path.abspath(os.path.dirname(os.path.dirname(__file__)))

_SQLITE_DEV = f"sqlite:///{os.path.join(basedir, 'instance', 'showcase_dev.db')}"
_SQLITE_TEST = "sqlite:///:memory:"


def _database_url(fallback=None):
    """DATABASE_URL with Heroku-style ``postgres://`` normalized for SQLAlchemy 2."""
    raw = os.getenv("DATABASE_URL", "")
    if not raw:
        return fallback
    return raw.replace("postgres://", "postgresql://", 1)


def _int_env(name, default):
    return int(os.getenv(name, str(default)))


class Config:
    """Settings shared by every environment."""

    # Random per process unless SECRET_KEY is set; tokens die with the process.
    SECRET_KEY = os.getenv("SECRET_KEY", secrets.token_hex(32))
    DEBUG = False
    TESTING = False

    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {"pool_pre_ping": True, "pool_recycle": 300}

    # Bearer credentials
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY")
    JWT_ACCESS_EXPIRES = _int_env("JWT_ACCESS_EXPIRES", 86400)
    BCRYPT_ROUNDS = _int_env("BCRYPT_ROUNDS", 12)

    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")

    # Draft editing and admin dashboard
    AUTOSAVE_DEBOUNCE_MS = _int_env("AUTOSAVE_DEBOUNCE_MS", 1000)
    REPORT_TOP_SUPPLIERS = _int_env("REPORT_TOP_SUPPLIERS", 10)
    ADMIN_POLL_INTERVAL_SECONDS = _int_env("ADMIN_POLL_INTERVAL_SECONDS", 30)

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


class DevelopmentConfig(Config):
    DEBUG = True
    LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")
    SQLALCHEMY_DATABASE_URI = _database_url(_SQLITE_DEV)


class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", _SQLITE_TEST)
    SQLALCHEMY_ENGINE_OPTIONS = {}
    SECRET_KEY = "test-secret-key"
    JWT_SECRET_KEY = "test-jwt-secret-key-with-enough-length"
    RATELIMIT_ENABLED = False
    BCRYPT_ROUNDS = 4


class ProductionConfig(Config):
    SQLALCHEMY_DATABASE_URI = _database_url()
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "")

    # PostgreSQL pool sizing; statements are cut off after 30 s.
    SQLALCHEMY_ENGINE_OPTIONS = {
        "pool_pre_ping": True,
        "pool_size": 5,
        "max_overflow": 10,
        "pool_recycle": 300,
        "pool_timeout": 20,
        "connect_args": {"options": "-c statement_timeout=30000"},
    }

    def __init__(self):
        if not self.SQLALCHEMY_DATABASE_URI:
            raise RuntimeError("DATABASE_URL environment variable is required in production")
        if not os.getenv("SECRET_KEY"):
            raise RuntimeError("SECRET_KEY environment variable must be set in production")


config = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
    "default": DevelopmentConfig,
}
