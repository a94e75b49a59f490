# backend/boutique_pos/routes/inventory.py
"""
Stock routes (stock screen).

POST /adjust body:
    item_id    int, required
    type       "in" | "out" | "adjustment"
    quantity   int; for "adjustment" this is the new total stock
    reason     str, required
    reference  str, optional
"""
from flask import Blueprint, request, jsonify, current_app

from ..services import inventory_service
from ..services.inventory_service import InventoryError
from ..validation import ValidationError, coerce_int


inventory_bp = Blueprint("inventory", __name__, url_prefix="/api/inventory")


@inventory_bp.post("/adjust")
def adjust_stock_route():
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        return jsonify({"error": "Invalid JSON payload"}), 400

    missing = [f for f in ("item_id", "type", "quantity", "reason") if data.get(f) in (None, "")]
    if missing:
        return jsonify({"error": "Please fill in all required fields", "missing": missing}), 400

    try:
        result = inventory_service.adjust_stock(
            item_id=coerce_int(data["item_id"], "item_id"),
            movement_type=str(data["type"]).strip().lower(),
            quantity=data["quantity"],
            reason=data["reason"],
            reference=data.get("reference"),
        )
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except InventoryError as e:
        return jsonify({"error": str(e), "details": e.details}), 400
    except Exception:
        current_app.logger.exception("Failed to adjust stock")
        return jsonify({"error": "Internal server error"}), 500

    if result is None:
        return jsonify({"error": "Item not found"}), 404

    item, movement = result
    return jsonify({"item": item.to_dict(), "movement": movement.to_dict()}), 201


@inventory_bp.get("/movements")
def list_movements_route():
    """
    Stock movement log, newest first.

    Query params: item_id, type, reference, limit (default 200, max 1000)
    """
    try:
        movements = inventory_service.list_movements(
            item_id=request.args.get("item_id", type=int),
            movement_type=request.args.get("type"),
            reference=request.args.get("reference"),
            limit=request.args.get("limit", default=200, type=int),
        )
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    return jsonify({"movements": [m.to_dict() for m in movements], "count": len(movements)}), 200
