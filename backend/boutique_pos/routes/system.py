# backend/boutique_pos/routes/system.py
"""
System health endpoint.

Checks database connectivity and reports the invoice counter so a deployment
can be sanity-checked without touching the UI.
"""

import time
from flask import Blueprint, current_app
from ..extensions import db
from ..models import Item, Sale, StockMovement
from ..services.document_service import peek_invoice_counter

system_bp = Blueprint("system", __name__)


def check_database_health() -> dict:
    """
    Check database connectivity and basic operations.

    Returns dict with status and details.
    """
    start_time = time.time()
    try:
        item_count = db.session.query(Item).count()
        sale_count = db.session.query(Sale).count()
        movement_count = db.session.query(StockMovement).count()
        invoice_counter = peek_invoice_counter()

        elapsed_ms = (time.time() - start_time) * 1000

        return {
            "status": "healthy",
            "latency_ms": round(elapsed_ms, 2),
            "details": {
                "items": item_count,
                "sales": sale_count,
                "stock_movements": movement_count,
                "invoice_counter": invoice_counter,
            }
        }
    except Exception:
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Database health check failed")
        return {
            "status": "unhealthy",
            "latency_ms": round(elapsed_ms, 2),
            "error": "Database error"
        }


@system_bp.get("/health")
def health():
    database = check_database_health()
    status_code = 200 if database["status"] == "healthy" else 503
    return {
        "status": database["status"],
        "checks": {
            "database": database,
            "cache": {
                "type": current_app.config.get("CACHE_TYPE"),
                "default_timeout": current_app.config.get("CACHE_DEFAULT_TIMEOUT"),
            },
        },
    }, status_code
