# backend/shopdesk/config.py
from __future__ import annotations
import os


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


class Config:
    # Optional "SECRET_KEY", with default dev key (also signs auth tokens)
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")
    AUTH_TOKEN_SALT = os.environ.get("AUTH_TOKEN_SALT", "shopdesk-auth")

    # SQLite DB stored in backend/instance/shopdesk.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///shopdesk.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # Tax rate (percent) used when an invoice draft does not carry one
    DEFAULT_TAX_RATE = os.environ.get("DEFAULT_TAX_RATE", "8.5")

    # Populate demo data the first time a user's collections are read
    AUTO_SEED = _env_bool("AUTO_SEED", True)

    # What to do with unreadable stored collections: "empty" or "raise"
    CORRUPT_DATA_POLICY = os.environ.get("CORRUPT_DATA_POLICY", "empty")

    # False: any invoice status can follow any other
    STRICT_INVOICE_TRANSITIONS = _env_bool("STRICT_INVOICE_TRANSITIONS", False)


class TestingConfig(Config):
    TESTING = True
    SECRET_KEY = "test-secret-key"
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    AUTO_SEED = False
