# Overview: Flask API routes for sales operations; parses input and returns JSON responses.

# backend/boutique_pos/routes/sales.py
"""
Sales API routes (new-sale and invoices screens).

Checkout body:
    items            [{"item_id": 1, "quantity": 2, "discount_cents": 0}, ...]
    discount_percent number, default 0
    tax_enabled      bool, default config DEFAULT_TAX_ENABLED
    tax_rate         number, default config DEFAULT_TAX_RATE
    payment_method   cash | card | upi | credit
    customer_name, customer_phone  optional
"""

from flask import Blueprint, request, jsonify, current_app

from ..services import sales_service
from ..services.sales_service import SaleError
from ..services.totals_service import parse_percent
from ..validation import ValidationError


sales_bp = Blueprint("sales", __name__, url_prefix="/api/sales")


def _checkout_settings(data: dict) -> dict:
    tax_enabled = data.get("tax_enabled")
    if tax_enabled is None:
        tax_enabled = current_app.config.get("DEFAULT_TAX_ENABLED", True)
    elif not isinstance(tax_enabled, bool):
        raise ValidationError("tax_enabled must be a boolean")

    tax_rate = data.get("tax_rate")
    if tax_rate is None:
        tax_rate = current_app.config.get("DEFAULT_TAX_RATE", "18")

    return {
        "discount_percent": parse_percent(data.get("discount_percent", 0), "discount_percent"),
        "tax_rate": parse_percent(tax_rate, "tax_rate"),
        "tax_enabled": tax_enabled,
    }


@sales_bp.post("/quote")
def quote_sale_route():
    """Cart preview: line snapshots + running totals. Nothing is persisted."""
    try:
        data = request.get_json(silent=True) or {}
        if not isinstance(data, dict):
            return jsonify({"error": "Invalid JSON payload"}), 400
        lines = sales_service.parse_cart_lines(data.get("items"))
        quote = sales_service.quote_sale(lines=lines, **_checkout_settings(data))
        return jsonify(quote), 200

    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except SaleError as e:
        return jsonify({"error": str(e), "details": e.details}), 400
    except Exception:
        current_app.logger.exception("Failed to quote sale")
        return jsonify({"error": "Internal server error"}), 500


@sales_bp.post("")
def complete_sale_route():
    """Complete a sale: persists it, decrements stock, logs movements."""
    try:
        data = request.get_json(silent=True) or {}
        if not isinstance(data, dict):
            return jsonify({"error": "Invalid JSON payload"}), 400
        lines = sales_service.parse_cart_lines(data.get("items"))
        sale = sales_service.record_sale(
            lines=lines,
            payment_method=str(data.get("payment_method") or "cash").strip().lower(),
            customer_name=data.get("customer_name"),
            customer_phone=data.get("customer_phone"),
            **_checkout_settings(data),
        )
        return jsonify({"sale": sale.to_dict()}), 201

    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except SaleError as e:
        return jsonify({"error": str(e), "details": e.details}), 400
    except Exception:
        current_app.logger.exception("Failed to complete sale")
        return jsonify({"error": "Failed to complete sale"}), 500


@sales_bp.get("")
def list_sales_route():
    """
    Invoice history, newest first.

    Query params: q (invoice number / customer name / phone), page, per_page
    """
    result = sales_service.list_sales(
        request.args.get("q"),
        page=request.args.get("page", type=int),
        per_page=request.args.get("per_page", type=int),
    )
    return jsonify(result), 200


@sales_bp.get("/<int:sale_id>")
def get_sale_route(sale_id: int):
    sale = sales_service.get_sale(sale_id)
    if not sale:
        return jsonify({"error": "Sale not found"}), 404
    return jsonify({"sale": sale.to_dict()}), 200


@sales_bp.get("/invoice/<invoice_number>")
def get_sale_by_invoice_route(invoice_number: str):
    sale = sales_service.get_sale_by_invoice_number(invoice_number)
    if not sale:
        return jsonify({"error": "Sale not found"}), 404
    return jsonify({"sale": sale.to_dict()}), 200


@sales_bp.get("/<int:sale_id>/receipt")
def receipt_route(sale_id: int):
    """Printable receipt data; totals are the persisted figures."""
    sale = sales_service.get_sale(sale_id)
    if not sale:
        return jsonify({"error": "Sale not found"}), 404
    return jsonify({"receipt": sales_service.build_receipt(sale)}), 200


@sales_bp.delete("/<int:sale_id>")
def delete_sale_route(sale_id: int):
    """Delete an invoice and restore the stock of all its lines."""
    try:
        deleted = sales_service.delete_sale(sale_id)
    except Exception:
        current_app.logger.exception("Failed to delete sale")
        return jsonify({"error": "Failed to delete invoice"}), 500

    if deleted is None:
        return jsonify({"error": "Sale not found"}), 404
    return jsonify({"ok": True, "sale": deleted}), 200
