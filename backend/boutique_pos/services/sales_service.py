"""
Sales Service - checkout, invoice history, and invoice deletion

A sale is recorded as ONE transaction:
    1. allocate the invoice number (atomic counter bump)
    2. insert the Sale and its SaleLines (snapshots of name/barcode/price/cost)
    3. decrement each item's stock with a guarded UPDATE (stock >= qty)
    4. append one 'out' StockMovement per line (reason "Sale", reference = invoice)
Any failure rolls back all four steps, so there is never a sale without its
stock effect and never a consumed invoice number without a sale.

Deleting a sale is the inverse, also one transaction: restock every line,
append an 'in' movement per restocked line, delete the sale. A second delete
finds nothing, so stock is never restored twice.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from flask import current_app
from sqlalchemy import func, or_, select

from ..extensions import db
from ..models import Item, Sale, SaleLine, PAYMENT_METHODS
from ..money import format_cents, percent_to_bps, bps_to_percent, round_half_up_cents
from ..validation import ValidationError, coerce_int, enforce_rules_quantity
from boutique_pos.time_utils import utcnow, to_utc_z
from .cache_service import invalidate_catalog
from .concurrency import lock_for_update, run_with_retry
from .document_service import next_invoice_number
from .inventory_service import append_movement, decrement_stock, restock
from .totals_service import SaleTotals, calculate_totals, line_total_cents

SALE_MOVEMENT_REASON = "Sale"
DELETE_MOVEMENT_REASON = "Invoice deleted"


class SaleError(Exception):
    """Raised for sale operation errors."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


@dataclass(frozen=True)
class CartRequestLine:
    item_id: int
    quantity: int
    discount_cents: int = 0


@dataclass
class PricedCartLine:
    item: Item
    quantity: int
    discount_cents: int

    @property
    def unit_price_cents(self) -> int:
        return self.item.selling_price_cents

    @property
    def line_total_cents(self) -> int:
        return line_total_cents(self.unit_price_cents, self.quantity, self.discount_cents)

    def to_dict(self) -> dict:
        return {
            "item_id": self.item.id,
            "name": self.item.name,
            "barcode": self.item.barcode,
            "quantity": self.quantity,
            "unit_price_cents": self.unit_price_cents,
            "discount_cents": self.discount_cents,
            "line_total_cents": self.line_total_cents,
            "stock": self.item.stock,
        }


def parse_cart_lines(raw_lines) -> list[CartRequestLine]:
    """Validate the JSON cart. An empty cart is a SaleError, not a ValidationError."""
    if raw_lines is None or (isinstance(raw_lines, list) and not raw_lines):
        raise SaleError("Cart is empty")
    if not isinstance(raw_lines, list):
        raise ValidationError("items must be a list")

    lines = []
    for idx, raw in enumerate(raw_lines):
        if not isinstance(raw, dict):
            raise ValidationError(f"items[{idx}] must be an object")
        if raw.get("item_id") is None:
            raise ValidationError(f"items[{idx}].item_id is required")
        discount = coerce_int(raw.get("discount_cents") or 0, f"items[{idx}].discount_cents")
        if discount < 0:
            raise ValidationError(f"items[{idx}].discount_cents must be >= 0")
        lines.append(CartRequestLine(
            item_id=coerce_int(raw["item_id"], f"items[{idx}].item_id"),
            quantity=enforce_rules_quantity(raw.get("quantity"), f"items[{idx}].quantity"),
            discount_cents=discount,
        ))
    return lines


def _price_cart(lines: list[CartRequestLine], *, lock: bool = False) -> list[PricedCartLine]:
    if not lines:
        raise SaleError("Cart is empty")

    priced = []
    requested: dict[int, int] = {}
    for line in lines:
        q = db.session.query(Item).filter_by(id=line.item_id)
        if lock:
            q = lock_for_update(q)
        item = q.first()
        if item is None:
            raise SaleError("Item not found", details={"item_id": line.item_id})
        if line.discount_cents > item.selling_price_cents * line.quantity:
            raise ValidationError("line discount cannot exceed the line amount")
        priced.append(PricedCartLine(item=item, quantity=line.quantity, discount_cents=line.discount_cents))
        requested[item.id] = requested.get(item.id, 0) + line.quantity

    insufficient = []
    for p in priced:
        qty = requested.pop(p.item.id, None)
        if qty is not None and p.item.stock < qty:
            insufficient.append({
                "item_id": p.item.id,
                "name": p.item.name,
                "requested_quantity": qty,
                "on_hand": p.item.stock,
            })
    if insufficient:
        raise SaleError("Insufficient stock", details={"items": insufficient})

    return priced


def quote_sale(
    *,
    lines: list[CartRequestLine],
    discount_percent: Decimal,
    tax_rate: Decimal,
    tax_enabled: bool,
) -> dict:
    """Running totals for a cart without persisting anything."""
    priced = _price_cart(lines)
    totals = calculate_totals(priced, discount_percent, tax_rate, tax_enabled)
    return {
        "items": [p.to_dict() for p in priced],
        "totals": totals.to_dict(),
        "discount_percent": str(discount_percent),
        "tax_rate": str(tax_rate),
        "tax_enabled": tax_enabled,
    }


def _build_sale(
    invoice_number: str,
    priced: list[PricedCartLine],
    totals: SaleTotals,
    *,
    discount_percent: Decimal,
    tax_rate: Decimal,
    tax_enabled: bool,
    payment_method: str,
    customer_name: str | None,
    customer_phone: str | None,
) -> Sale:
    sale = Sale(
        invoice_number=invoice_number,
        subtotal_cents=totals.subtotal_cents,
        discount_cents=totals.discount_cents,
        tax_cents=totals.tax_cents,
        total_cents=totals.total_cents,
        discount_percent_bps=percent_to_bps(discount_percent),
        tax_rate_bps=percent_to_bps(tax_rate) if tax_enabled else 0,
        tax_enabled=tax_enabled,
        payment_method=payment_method,
        customer_name=customer_name,
        customer_phone=customer_phone,
        created_at=utcnow(),
    )
    for position, p in enumerate(priced):
        sale.lines.append(SaleLine(
            position=position,
            item_id=p.item.id,
            name=p.item.name,
            barcode=p.item.barcode,
            quantity=p.quantity,
            unit_price_cents=p.unit_price_cents,
            unit_cost_cents=p.item.purchase_price_cents or 0,
            discount_cents=p.discount_cents,
            line_total_cents=p.line_total_cents,
        ))
    return sale


def record_sale(
    *,
    lines: list[CartRequestLine],
    discount_percent: Decimal,
    tax_rate: Decimal,
    tax_enabled: bool,
    payment_method: str = "cash",
    customer_name: str | None = None,
    customer_phone: str | None = None,
) -> Sale:
    """
    Complete a checkout. See module docstring for the transaction shape.

    Raises:
        SaleError: empty cart, unknown item, insufficient stock
        ValidationError: bad payment method or line discount
    """
    if not lines:
        raise SaleError("Cart is empty")
    if payment_method not in PAYMENT_METHODS:
        raise ValidationError(f"payment_method must be one of: {', '.join(PAYMENT_METHODS)}")
    customer_name = (customer_name or "").strip() or None
    customer_phone = (customer_phone or "").strip() or None

    def _op():
        # Counter first: its first-use path may roll back the transaction.
        invoice_number = next_invoice_number(commit=False)

        priced = _price_cart(lines, lock=True)
        totals = calculate_totals(priced, discount_percent, tax_rate, tax_enabled)

        sale = _build_sale(
            invoice_number,
            priced,
            totals,
            discount_percent=discount_percent,
            tax_rate=tax_rate,
            tax_enabled=tax_enabled,
            payment_method=payment_method,
            customer_name=customer_name,
            customer_phone=customer_phone,
        )
        db.session.add(sale)
        db.session.flush()

        for p in priced:
            if not decrement_stock(p.item.id, p.quantity):
                # Another checkout took the stock between the check and here.
                raise SaleError(
                    "Insufficient stock",
                    details={"items": [{"item_id": p.item.id, "name": p.item.name,
                                        "requested_quantity": p.quantity}]},
                )
            append_movement(
                item_id=p.item.id,
                item_name=p.item.name,
                movement_type="out",
                quantity=p.quantity,
                reason=SALE_MOVEMENT_REASON,
                reference=invoice_number,
            )

        db.session.commit()
        return sale

    sale = run_with_retry(_op)
    invalidate_catalog()
    current_app.logger.info(
        "Recorded sale %s lines=%s total_cents=%s", sale.invoice_number, len(sale.lines), sale.total_cents
    )
    return sale


def delete_sale(sale_id: int) -> dict | None:
    """
    Delete a sale and put its quantities back on the shelf.

    Returns the deleted sale as a dict or None if it does not
    exist. Lines whose item has since been deleted are skipped.
    """
    def _op():
        sale = lock_for_update(db.session.query(Sale).filter_by(id=sale_id)).first()
        if sale is None:
            return None

        lines = list(sale.lines)
        for line in lines:
            if not restock(line.item_id, line.quantity):
                current_app.logger.warning(
                    "Restock skipped for %s: item_id=%s no longer exists",
                    sale.invoice_number, line.item_id,
                )
                continue
            append_movement(
                item_id=line.item_id,
                item_name=line.name,
                movement_type="in",
                quantity=line.quantity,
                reason=DELETE_MOVEMENT_REASON,
                reference=sale.invoice_number,
            )

        snapshot = sale.to_dict()
        db.session.delete(sale)
        db.session.commit()
        return snapshot

    snapshot = run_with_retry(_op)
    if snapshot is None:
        return None
    invalidate_catalog()
    current_app.logger.info("Deleted sale %s and restocked its lines", snapshot["invoice_number"])
    return snapshot


def get_sale(sale_id: int) -> Sale | None:
    return db.session.get(Sale, sale_id)


def get_sale_by_invoice_number(invoice_number: str) -> Sale | None:
    return db.session.query(Sale).filter_by(invoice_number=invoice_number.strip()).first()


def list_sales(search: str | None = None, page: int | None = None, per_page: int | None = None) -> dict:
    """
    Invoice history, newest first. search matches invoice number, customer name, or phone.

    total, total_cents, average_cents and units_sold summarize the whole
    filtered set, not just the returned page.
    """
    query = db.session.query(Sale)
    if search:
        like = f"%{search.strip().lower()}%"
        query = query.filter(
            or_(
                func.lower(Sale.invoice_number).like(like),
                func.lower(Sale.customer_name).like(like),
                Sale.customer_phone.like(f"%{search.strip()}%"),
            )
        )
    total = query.count()
    total_cents = int(query.with_entities(func.coalesce(func.sum(Sale.total_cents), 0)).scalar() or 0)
    sale_ids = select(query.with_entities(Sale.id).subquery().c.id)
    units_sold = (
        db.session.query(func.coalesce(func.sum(SaleLine.quantity), 0))
        .filter(SaleLine.sale_id.in_(sale_ids))
        .scalar()
    )

    query = query.order_by(Sale.created_at.desc(), Sale.id.desc())

    if page is not None:
        per_page = max(1, min(per_page or 20, 100))
        page = max(page, 1)
        query = query.offset((page - 1) * per_page).limit(per_page)

    sales = query.all()
    return {
        "sales": [s.to_dict() for s in sales],
        "count": len(sales),
        "total": total,
        "total_cents": total_cents,
        "average_cents": round_half_up_cents(Decimal(total_cents) / total) if total else 0,
        "units_sold": int(units_sold or 0),
    }


def build_receipt(sale: Sale) -> dict:
    """
    Printable receipt data. Amounts are the persisted fields formatted to two
    decimals, so the printed totals always match the stored sale.
    """
    discount_percent = bps_to_percent(sale.discount_percent_bps)
    tax_rate = bps_to_percent(sale.tax_rate_bps)
    return {
        "invoice_number": sale.invoice_number,
        "date": to_utc_z(sale.created_at),
        "customer_name": sale.customer_name,
        "customer_phone": sale.customer_phone,
        "payment_method": sale.payment_method,
        "lines": [
            {
                "name": line.name,
                "barcode": line.barcode,
                "quantity": line.quantity,
                "unit_price": format_cents(line.unit_price_cents),
                "discount": format_cents(line.discount_cents),
                "amount": format_cents(line.line_total_cents),
            }
            for line in sale.lines
        ],
        "subtotal": format_cents(sale.subtotal_cents),
        "discount": format_cents(sale.discount_cents),
        "discount_label": f"Discount ({discount_percent.normalize():f}%)" if sale.discount_cents else None,
        "tax": format_cents(sale.tax_cents),
        "tax_label": f"GST ({tax_rate.normalize():f}%)" if sale.tax_cents else None,
        "total": format_cents(sale.total_cents),
    }
