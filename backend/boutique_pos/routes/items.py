# Overview: Flask API routes for catalog items; parses input and returns JSON responses.

# backend/boutique_pos/routes/items.py
"""
Item management routes (items screen + scan lookup on the new-sale screen).

Prices are integer cents. stock may be given on create only; later changes
go through /api/inventory/adjust so they are logged.
"""
from flask import Blueprint, request, jsonify, current_app

from ..services import items_service
from ..services.identifier_service import IdentifierError
from ..models import Item
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    enforce_rules_item,
    ValidationError,
    ConflictError,
)

ITEM_CREATE_POLICY = ModelValidationPolicy(
    writable_fields=set(items_service.ITEM_CREATE_FIELDS),
    required_on_create={"name", "category", "selling_price_cents"},
)

ITEM_UPDATE_POLICY = ModelValidationPolicy(
    writable_fields=set(items_service.ITEM_MUTABLE_FIELDS),
)

items_bp = Blueprint("items", __name__, url_prefix="/api/items")


@items_bp.get("")
def list_items():
    """
    List items.

    Query params:
    - q: str (optional) - search name / SKU / barcode
    - category: str (optional)
    - low_stock: bool (optional) - only items at or below min_stock
    - page, per_page: int (optional) - pagination (per_page max 100)
    """
    return items_service.list_items(
        request.args.get("q"),
        category=request.args.get("category"),
        low_stock_only=request.args.get("low_stock", "").lower() in {"1", "true", "yes"},
        page=request.args.get("page", type=int),
        per_page=request.args.get("per_page", type=int),
    )


@items_bp.get("/low-stock")
def low_stock_route():
    items = items_service.list_low_stock()
    return {"items": items, "count": len(items)}


@items_bp.get("/categories")
def categories_route():
    return {"categories": items_service.list_categories()}


@items_bp.get("/barcode/<barcode>")
def lookup_barcode_route(barcode: str):
    """Scan lookup used by the new-sale screen."""
    try:
        item = items_service.lookup_by_barcode(barcode)
    except Exception:
        current_app.logger.exception("Failed to lookup barcode")
        return jsonify({"error": "Internal server error"}), 500

    if item is None:
        return jsonify({"error": f"Item with barcode {barcode} not found"}), 404
    return jsonify({"item": item}), 200


@items_bp.get("/<int:item_id>")
def get_item_route(item_id: int):
    item = items_service.get_item(item_id)
    if item is None:
        return {"error": "Item not found"}, 404
    return {"item": item.to_dict()}, 200


@items_bp.post("")
def create_item_route():
    """Create an item. SKU and barcode are generated when omitted."""
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=Item, payload=payload, policy=ITEM_CREATE_POLICY, partial=False)
        enforce_rules_item(patch)
    except ValidationError as e:
        return {"error": str(e)}, 400

    try:
        created = items_service.create_item(patch=patch)
    except ConflictError as e:
        return {"error": str(e)}, 409
    except (IdentifierError, ValueError) as e:
        return {"error": str(e)}, 400
    except Exception:
        current_app.logger.exception("Failed to create item")
        return {"error": "Failed to save item"}, 500

    return {"item": created}, 201


@items_bp.put("/<int:item_id>")
def update_item_route(item_id: int):
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=Item, payload=payload, policy=ITEM_UPDATE_POLICY, partial=True)
        enforce_rules_item(patch)
    except ValidationError as e:
        return {"error": str(e)}, 400

    try:
        updated = items_service.update_item(item_id=item_id, patch=patch)
    except ConflictError as e:
        return {"error": str(e)}, 409
    except ValueError as e:
        return {"error": str(e)}, 400
    except Exception:
        current_app.logger.exception("Failed to update item")
        return {"error": "Failed to save item"}, 500

    if updated is None:
        return {"error": "Item not found"}, 404
    return {"item": updated}, 200


@items_bp.delete("/<int:item_id>")
def delete_item_route(item_id: int):
    try:
        deleted = items_service.delete_item(item_id=item_id)
    except Exception:
        current_app.logger.exception("Failed to delete item")
        return {"error": "Failed to delete item"}, 500

    if not deleted:
        return {"error": "Item not found"}, 404
    return {"ok": True}, 200
