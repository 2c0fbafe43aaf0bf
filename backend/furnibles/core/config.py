"""Application settings with environment-based simple classes."""

from __future__ import annotations

import os
from collections.abc import Mapping
from datetime import timedelta
from typing import Final

from dotenv import load_dotenv

# Public selector env var
ENV_VAR: Final[str] = "APP_ENV"  # 'development' | 'testing' | 'production'


# Load .env during development (no-op when the file is missing)
load_dotenv()


def env_bool(name: str, default: bool = False) -> bool:
    """Parse a boolean flag from an environment variable.

    Parameters
    ----------
    name: str
        Environment variable to inspect.
    default: bool, optional
        Value returned when the variable is unset. Defaults to ``False``.

    Returns
    -------
    bool
        ``True`` if the value resembles ``{"1", "true", "yes", "y", "on"}``
        ignoring case; otherwise ``False`` or ``default`` when missing.
    """
    val = os.getenv(name)
    if val is None:
        return default
    return str(val).strip().lower() in {"1", "true", "yes", "y", "on"}


def env_float(name: str, default: float | None) -> float | None:
    """Parse an optional float; blank values map to ``None``."""
    val = os.getenv(name)
    if val is None:
        return default
    val = val.strip()
    return float(val) if val else None


def env_list(name: str, default: str) -> tuple[str, ...]:
    """Split a comma-separated variable into a tuple of lowercase tokens."""
    raw = os.getenv(name, default)
    return tuple(part.strip().lower() for part in raw.split(",") if part.strip())


class BaseConfig:
    """Base configuration shared across environments.

    Attributes
    ----------
    API_BASE_PREFIX: str
        Root path for registering API blueprints.
    SECRET_KEY: str
        Flask secret used for session signing. Defaults to a development-safe
        placeholder and should be overridden in production.
    JWT_SECRET_KEY: str
        Key used by ``flask-jwt-extended`` for signing access tokens.
    JWT_ACCESS_TOKEN_EXPIRES: timedelta
        Lifetime of issued session tokens.
    SQLALCHEMY_DATABASE_URI: str
        Database connection string consumed by SQLAlchemy.
    LOG_LEVEL: str
        Root logging verbosity (``INFO`` by default).
    CORS_ORIGINS: str
        Comma-separated list of allowed origins for CORS.
    BCRYPT_ROUNDS: int
        bcrypt cost factor for password hashes.
    PASSWORD_RESET_TTL: timedelta
        Validity window of password reset tokens.
    PLATFORM_FEE_RATE: str
        Marketplace cut applied to every order subtotal (decimal string).
    CART_MAX_ITEMS: int
        Maximum number of distinct products in a cart.
    DOWNLOAD_LIMIT: int
        Downloads allowed per issued download token.
    DOWNLOAD_EXPIRY_DAYS: int
        Lifetime in days of issued download tokens.
    PENDING_ORDER_TTL: timedelta
        Age after which unpaid orders are cancelled by maintenance.
    REVIEW_BANNED_TERMS: tuple[str, ...]
        Terms that send a review to manual moderation.
    REVIEW_REPORT_THRESHOLD: int
        Reports needed to flag a published review.
    TOKEN_BLACKLIST_BACKEND: str
        ``"database"`` (default) or ``"redis"``.
    REVOCATION_CHECK_TIMEOUT: float | None
        Seconds allowed for a revocation lookup before failing open. ``None``
        runs the lookup inline without a timeout.
    PAYMENT_WEBHOOK_SECRET: str
        Shared secret for webhook signatures. Empty disables verification.

    Notes
    -----
    Values are primarily sourced from environment variables, enabling
    configuration without code changes.
    """

    API_BASE_PREFIX = "/api"

    # Secrets / security
    SECRET_KEY = os.getenv("SECRET_KEY", "CHANGE_ME")
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "CHANGE_ME_JWT")
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(hours=int(os.getenv("JWT_EXPIRES_HOURS", "24")))
    BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "12"))
    PASSWORD_RESET_TTL = timedelta(hours=1)

    # DB
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///./dev.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)

    # Flask & JSON
    JSON_SORT_KEYS = False
    PROPAGATE_EXCEPTIONS = False

    # Logging & CORS
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:3000")
    USE_PROXYFIX = env_bool("USE_PROXYFIX", True)
    PROXY_HOPS = int(os.getenv("PROXY_HOPS", "1"))

    # Marketplace rules
    PLATFORM_FEE_RATE = os.getenv("PLATFORM_FEE_RATE", "0.10")
    CURRENCY = os.getenv("CURRENCY", "USD")
    CART_MAX_ITEMS = 10
    DOWNLOAD_LIMIT = int(os.getenv("DOWNLOAD_LIMIT", "5"))
    DOWNLOAD_EXPIRY_DAYS = int(os.getenv("DOWNLOAD_EXPIRY_DAYS", "30"))
    PENDING_ORDER_TTL = timedelta(hours=1)
    REVIEW_BANNED_TERMS = env_list("REVIEW_BANNED_TERMS", "spam,fake,scam")
    REVIEW_REPORT_THRESHOLD = 3

    # Token revocation
    TOKEN_BLACKLIST_BACKEND = os.getenv("TOKEN_BLACKLIST_BACKEND", "database")
    REDIS_URL = os.getenv("REDIS_URL", "")
    REVOCATION_CHECK_TIMEOUT = env_float("REVOCATION_CHECK_TIMEOUT", 2.0)

    # Payments
    PAYMENT_WEBHOOK_SECRET = os.getenv("PAYMENT_WEBHOOK_SECRET", "")

    # Flask built-ins
    DEBUG = False
    TESTING = False


class DevelopmentConfig(BaseConfig):
    """Configuration tailored for local development.

    Notes
    -----
    Enables debug mode by default and honors ``SQLALCHEMY_ECHO`` for verbose
    SQL logging when requested.
    """

    DEBUG = env_bool("FLASK_DEBUG", True)
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)
    CORS_MAX_AGE = 600  # 10 minutes


class TestingConfig(BaseConfig):
    """Configuration for automated test runs.

    Notes
    -----
    - Forces ``TESTING`` mode and disables debug logs.
    - Uses an in-memory SQLite database unless ``TEST_DATABASE_URL`` is set.
    - Uses the cheapest bcrypt cost and runs revocation checks inline so the
      transactional test session sees every row.
    """

    TESTING = True
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)
    PROPAGATE_EXCEPTIONS = True
    BCRYPT_ROUNDS = 4
    REVOCATION_CHECK_TIMEOUT = None
    TOKEN_BLACKLIST_BACKEND = "database"
    USE_PROXYFIX = False


class ProductionConfig(BaseConfig):
    """Configuration defaults for production deployments.

    Notes
    -----
    Keeps debug and SQL echoing disabled while relying on WSGI-level log
    configuration for noise control.
    """

    DEBUG = False
    SQLALCHEMY_ECHO = False
    PROPAGATE_EXCEPTIONS = False


CONFIG_MAP: Mapping[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}


def get_config() -> type[BaseConfig]:
    """Return the configuration class inferred from ``APP_ENV``.

    Returns
    -------
    type[BaseConfig]
        Class to pass to :meth:`flask.Config.from_object`.

    Notes
    -----
    Falls back to :class:`DevelopmentConfig` when ``APP_ENV`` is unset or
    unknown.
    """
    name = os.getenv(ENV_VAR, "development").strip().lower()
    return CONFIG_MAP.get(name, DevelopmentConfig)
