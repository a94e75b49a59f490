# backend/boutique_pos/services/items_service.py
"""
Items Service - catalog reads and writes

BARCODE RULE: barcode is unique among items, checked here before every
insert/update (no database constraint backs it).

STOCK RULE: stock is set once on create; afterwards it only changes through
inventory_service.adjust_stock and sales_service, which log a StockMovement
for every change.
"""
from __future__ import annotations

from flask import current_app
from sqlalchemy import func, or_

from ..extensions import db
from ..models import Item
from ..validation import ConflictError, ValidationError
from .cache_service import PREFIX_ITEMS, get_or_load, invalidate_catalog
from .identifier_service import (
    barcode_exists,
    generate_sku,
    generate_unique_barcode,
    normalize_barcode,
)
from .concurrency import run_with_retry
from boutique_pos.time_utils import utcnow

ITEM_CREATE_FIELDS = {
    "name", "sku", "barcode", "category", "purchase_price_cents",
    "selling_price_cents", "stock", "min_stock", "unit", "description",
}
ITEM_MUTABLE_FIELDS = ITEM_CREATE_FIELDS - {"stock"}


def apply_item_patch(item: Item, patch: dict, allowed: set[str]) -> None:
    for k, v in patch.items():
        if k not in allowed:
            continue
        setattr(item, k, v)


def list_items(
    search: str | None = None,
    *,
    category: str | None = None,
    low_stock_only: bool = False,
    page: int | None = None,
    per_page: int | None = None,
) -> dict:
    """
    Catalog listing with optional search and pagination.

    search matches name and SKU case-insensitively and barcode as a substring.
    """
    query = db.session.query(Item)

    if search:
        term = search.strip()
        like = f"%{term.lower()}%"
        query = query.filter(
            or_(
                func.lower(Item.name).like(like),
                func.lower(Item.sku).like(like),
                Item.barcode.like(f"%{normalize_barcode(term)}%"),
            )
        )
    if category:
        query = query.filter(Item.category == category)
    if low_stock_only:
        query = query.filter(Item.stock <= Item.min_stock)

    query = query.order_by(Item.name.asc(), Item.id.asc())

    if page is None:
        items = query.all()
        return {"items": [i.to_dict() for i in items], "count": len(items)}

    per_page = max(1, min(per_page or 20, 100))
    page = max(page, 1)

    total = query.count()
    total_pages = (total + per_page - 1) // per_page if total > 0 else 1
    items = query.offset((page - 1) * per_page).limit(per_page).all()

    return {
        "items": [i.to_dict() for i in items],
        "count": len(items),
        "pagination": {
            "page": page,
            "per_page": per_page,
            "total": total,
            "total_pages": total_pages,
            "has_next": page < total_pages,
            "has_prev": page > 1,
        },
    }


def list_low_stock() -> list[dict]:
    items = (
        db.session.query(Item)
        .filter(Item.stock <= Item.min_stock)
        .order_by(Item.stock.asc(), Item.name.asc())
        .all()
    )
    return [i.to_dict() for i in items]


def list_categories() -> list[str]:
    rows = db.session.query(Item.category).distinct().order_by(Item.category.asc()).all()
    return [r[0] for r in rows]


def get_item(item_id: int) -> Item | None:
    return db.session.get(Item, item_id)


def lookup_by_barcode(barcode: str) -> dict | None:
    """Scan path. Read-through cached; None when no item carries the barcode."""
    normalized = normalize_barcode(barcode)
    if not normalized:
        return None

    def _load():
        item = db.session.query(Item).filter(Item.barcode == normalized).first()
        return item.to_dict() if item else None

    return get_or_load(PREFIX_ITEMS, ("barcode", normalized), _load)


def create_item(*, patch: dict) -> dict:
    """
    Create an item from a validated patch.

    Missing SKU is generated from category + name; missing barcode is
    generated and checked against existing items.

    Raises:
        ConflictError: barcode already assigned to another item
    """
    def _op():
        data = dict(patch)

        if data.get("barcode"):
            data["barcode"] = normalize_barcode(data["barcode"])
            if barcode_exists(data["barcode"]):
                raise ConflictError("Barcode already exists for another item")
        else:
            data["barcode"] = generate_unique_barcode()

        if not data.get("sku"):
            data["sku"] = generate_sku(data["category"], data["name"])

        if data.get("min_stock") is None:
            data["min_stock"] = current_app.config.get("DEFAULT_MIN_STOCK", 5)
        if data.get("stock") is None:
            data["stock"] = 0
        if data.get("purchase_price_cents") is None:
            data["purchase_price_cents"] = 0
        if not data.get("unit"):
            data["unit"] = "pcs"

        item = Item()
        apply_item_patch(item, data, ITEM_CREATE_FIELDS)
        db.session.add(item)
        db.session.commit()
        return item

    item = run_with_retry(_op)
    invalidate_catalog()
    current_app.logger.info("Created item id=%s barcode=%s sku=%s", item.id, item.barcode, item.sku)
    return item.to_dict()


def update_item(*, item_id: int, patch: dict) -> dict | None:
    """
    Edit an item. Returns None if it does not exist.

    Raises:
        ConflictError: new barcode already assigned to another item
    """
    def _op():
        item = db.session.get(Item, item_id)
        if item is None:
            return None

        data = dict(patch)
        if "barcode" in data:
            data["barcode"] = normalize_barcode(data["barcode"] or "")
            if not data["barcode"]:
                raise ValidationError("barcode cannot be blank")
            if barcode_exists(data["barcode"], exclude_item_id=item.id):
                raise ConflictError("Barcode already exists for another item")

        apply_item_patch(item, data, ITEM_MUTABLE_FIELDS)
        item.updated_at = utcnow()
        db.session.commit()
        return item

    item = run_with_retry(_op)
    if item is None:
        return None
    invalidate_catalog()
    return item.to_dict()


def delete_item(*, item_id: int) -> bool:
    """
    Hard delete. Historical sale lines and stock movements keep their
    snapshots; nothing cascades.
    """
    def _op():
        item = db.session.get(Item, item_id)
        if item is None:
            return False
        db.session.delete(item)
        db.session.commit()
        return True

    deleted = run_with_retry(_op)
    if deleted:
        invalidate_catalog()
        current_app.logger.info("Deleted item id=%s", item_id)
    return deleted
