# Overview: Flask API routes for barcode/SKU generation; parses input and returns JSON responses.

# backend/boutique_pos/routes/identifiers.py
"""
Identifier API routes (item form "generate" buttons, barcode label screen).
"""

from flask import Blueprint, request, jsonify, current_app

from ..services import identifier_service
from ..services.identifier_service import IdentifierError


identifiers_bp = Blueprint("identifiers", __name__, url_prefix="/api/identifiers")


@identifiers_bp.post("/barcode")
def generate_barcode_route():
    """Generate an EAN-13 barcode not yet assigned to any item."""
    try:
        data = request.get_json(silent=True) or {}
        if not isinstance(data, dict):
            return jsonify({"error": "Invalid JSON payload"}), 400
        prefix = data.get("prefix")
        barcode = identifier_service.generate_unique_barcode(
            prefix=str(prefix) if prefix is not None else None
        )
        return jsonify({"barcode": barcode}), 201

    except IdentifierError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to generate barcode")
        return jsonify({"error": "Internal server error"}), 500


@identifiers_bp.post("/sku")
def generate_sku_route():
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        return jsonify({"error": "Invalid JSON payload"}), 400
    try:
        sku = identifier_service.generate_sku(data.get("category") or "", data.get("name") or "")
    except IdentifierError:
        return jsonify({"error": "Please enter category and name first"}), 400
    return jsonify({"sku": sku}), 201


@identifiers_bp.get("/barcode/<code>/validate")
def validate_barcode_route(code: str):
    normalized = identifier_service.normalize_barcode(code)
    return jsonify({
        "barcode": normalized,
        "valid_ean13": identifier_service.is_valid_ean13(normalized),
        "in_use": identifier_service.barcode_exists(normalized),
    }), 200
