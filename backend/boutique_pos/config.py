# backend/boutique_pos/config.py
from __future__ import annotations
import os


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/boutique_pos.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///boutique_pos.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # Invoice numbers look like INV-000042
    INVOICE_PREFIX = os.environ.get("INVOICE_PREFIX", "INV")
    INVOICE_NUMBER_PAD = int(os.environ.get("INVOICE_NUMBER_PAD", "6"))

    # Generated EAN-13 barcodes: 3-digit prefix + 9 random digits + check digit
    BARCODE_PREFIX = os.environ.get("BARCODE_PREFIX", "200")

    # Checkout defaults (GST). Percentages, not basis points.
    DEFAULT_TAX_RATE = os.environ.get("DEFAULT_TAX_RATE", "18")
    DEFAULT_TAX_ENABLED = _env_bool("DEFAULT_TAX_ENABLED", True)

    DEFAULT_MIN_STOCK = int(os.environ.get("DEFAULT_MIN_STOCK", "5"))

    # Flask-Caching: barcode scans and the dashboard. "NullCache" disables it.
    CACHE_TYPE = os.environ.get("CACHE_TYPE", "SimpleCache")
    CACHE_DEFAULT_TIMEOUT = int(os.environ.get("CACHE_DEFAULT_TIMEOUT", "300"))
    CACHE_THRESHOLD = int(os.environ.get("CACHE_THRESHOLD", "2000"))

    CORS_ALLOWED_ORIGINS = [
        o.strip()
        for o in os.environ.get(
            "CORS_ALLOWED_ORIGINS",
            "http://localhost:3000,http://127.0.0.1:3000",
        ).split(",")
        if o.strip()
    ]
