"""
Environment-aware configuration.
Values come from the environment (and a .env file if present); the
application factory picks a class via get_config().
"""
import os
from dotenv import load_dotenv
from datetime import timedelta

load_dotenv()  # Read .env if present

DEV_ACCESS_SECRET = "dev-access-secret-change-me"
DEV_REFRESH_SECRET = "dev-refresh-secret-change-me"


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "y", "on")


class BaseConfig:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")  # Set a strong key in production
    DEBUG = False
    TESTING = False
    APP_ENV = os.getenv("APP_ENV", "dev")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    # CORS: the SPA sends cookies, so origins must be explicit (no '*')
    CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "http://localhost:5173").split(",") if o.strip()]

    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///auth.db")
    SQL_ECHO = _env_bool("SQL_ECHO", False)

    # Two classes of token, two secrets
    ACCESS_TOKEN_SECRET_KEY = os.getenv("ACCESS_TOKEN_SECRET_KEY", DEV_ACCESS_SECRET)
    REFRESH_TOKEN_SECRET_KEY = os.getenv("REFRESH_TOKEN_SECRET_KEY", DEV_REFRESH_SECRET)
    JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
    # Cookie max-age is derived from these, so cookie and token lifetimes match
    ACCESS_TOKEN_EXPIRES = timedelta(seconds=int(os.getenv("ACCESS_TOKEN_EXPIRES_SECONDS", "3600")))
    REFRESH_TOKEN_EXPIRES = timedelta(seconds=int(os.getenv("REFRESH_TOKEN_EXPIRES_SECONDS", "86400")))

    COOKIE_SECURE = _env_bool("COOKIE_SECURE", False)
    COOKIE_SAMESITE = os.getenv("COOKIE_SAMESITE", "Lax")

    LOGIN_MAX_ATTEMPTS = int(os.getenv("LOGIN_MAX_ATTEMPTS", "3"))
    LOCKOUT_MINUTES = int(os.getenv("LOCKOUT_MINUTES", "15"))

    ALLOWED_ROLES = [r.strip() for r in os.getenv("ALLOWED_ROLES", "admin,user").split(",") if r.strip()]


class DevelopmentConfig(BaseConfig):
    DEBUG = True


class TestingConfig(BaseConfig):
    TESTING = True
    DATABASE_URL = "sqlite://"
    SQL_ECHO = False
    ACCESS_TOKEN_SECRET_KEY = "test-access-secret"
    REFRESH_TOKEN_SECRET_KEY = "test-refresh-secret"
    ACCESS_TOKEN_EXPIRES = timedelta(hours=1)
    REFRESH_TOKEN_EXPIRES = timedelta(days=1)
    LOGIN_MAX_ATTEMPTS = 3
    LOCKOUT_MINUTES = 15
    COOKIE_SECURE = False
    COOKIE_SAMESITE = "Lax"


class ProductionConfig(BaseConfig):
    DEBUG = False


def get_config(name: str | None):
    """
    Select config class.
    - If name is provided, choose by name.
    - Else choose based on APP_ENV (dev/test/prod).
    """
    env = (name or os.getenv("APP_ENV", "dev")).lower()
    if env in ["prod", "production"]:
        return ProductionConfig
    if env in ["test", "testing"]:
        return TestingConfig
    return DevelopmentConfig


def validate_config(config) -> None:
    """Refuse to run production with the development token secrets."""
    if config.get("DEBUG") or config.get("TESTING"):
        return
    if config.get("ACCESS_TOKEN_SECRET_KEY") == DEV_ACCESS_SECRET or \
            config.get("REFRESH_TOKEN_SECRET_KEY") == DEV_REFRESH_SECRET:
        raise RuntimeError(
            "ACCESS_TOKEN_SECRET_KEY and REFRESH_TOKEN_SECRET_KEY must be set in production"
        )
