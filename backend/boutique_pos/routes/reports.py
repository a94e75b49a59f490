# backend/boutique_pos/routes/reports.py
"""Dashboard route."""

from flask import Blueprint, jsonify, current_app

from ..services import reporting_service

reports_bp = Blueprint("reports", __name__, url_prefix="/api/reports")


@reports_bp.get("/dashboard")
def dashboard_route():
    try:
        return jsonify(reporting_service.dashboard_stats()), 200
    except Exception:
        current_app.logger.exception("Failed to build dashboard")
        return jsonify({"error": "Internal server error"}), 500
