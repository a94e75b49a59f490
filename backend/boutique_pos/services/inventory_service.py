# Overview: Service-layer operations for stock adjustments and the stock movement log.

# backend/boutique_pos/services/inventory_service.py

from __future__ import annotations

from flask import current_app
from sqlalchemy import update

from ..extensions import db
from ..models import Item, StockMovement, MOVEMENT_TYPES
from ..validation import ValidationError, enforce_rules_quantity
from boutique_pos.time_utils import utcnow
from .cache_service import invalidate_catalog
from .concurrency import lock_for_update, run_with_retry, execute_conditional
"""
Stock invariants (authoritative)

- Item.stock is the on-hand quantity; StockMovement is its append-only log.
- Every stock change appends exactly one movement in the same transaction:
    in          stock += quantity
    out         stock -= quantity   (rejected if stock < quantity)
    adjustment  stock  = quantity   (absolute recount; quantity >= 0)
- Stock never goes negative. The guard is part of the UPDATE's WHERE clause,
  so two concurrent 'out' writers cannot both pass a stale check.
"""


class InventoryError(Exception):
    """Raised for stock operation errors (e.g. insufficient stock)."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


def _increment_stock(item_id: int, quantity: int) -> int:
    stmt = (
        update(Item)
        .where(Item.id == item_id)
        .values(stock=Item.stock + quantity, updated_at=utcnow())
        .execution_options(synchronize_session=False)
    )
    return execute_conditional(stmt)


def decrement_stock(item_id: int, quantity: int) -> bool:
    """
    Atomically subtract quantity if, and only if, enough stock is on hand.
    Joins the caller's transaction; returns False when the guard fails.
    """
    stmt = (
        update(Item)
        .where(Item.id == item_id, Item.stock >= quantity)
        .values(stock=Item.stock - quantity, updated_at=utcnow())
        .execution_options(synchronize_session=False)
    )
    return execute_conditional(stmt) == 1


def restock(item_id: int, quantity: int) -> bool:
    """Atomically add quantity back. Returns False if the item no longer exists."""
    return _increment_stock(item_id, quantity) == 1


def _set_stock(item_id: int, quantity: int) -> int:
    stmt = (
        update(Item)
        .where(Item.id == item_id)
        .values(stock=quantity, updated_at=utcnow())
        .execution_options(synchronize_session=False)
    )
    return execute_conditional(stmt)


def append_movement(
    *,
    item_id: int,
    item_name: str,
    movement_type: str,
    quantity: int,
    reason: str,
    reference: str | None = None,
) -> StockMovement:
    """Add a movement row to the current transaction (no commit)."""
    movement = StockMovement(
        item_id=item_id,
        item_name=item_name,
        type=movement_type,
        quantity=quantity,
        reason=reason,
        reference=reference,
        created_at=utcnow(),
    )
    db.session.add(movement)
    return movement


def adjust_stock(
    *,
    item_id: int,
    movement_type: str,
    quantity,
    reason: str,
    reference: str | None = None,
) -> tuple[Item, StockMovement] | None:
    """
    Apply a manual stock change and log it.

    Returns (item, movement), or None if the item does not exist.

    Raises:
        ValidationError: bad type, quantity, or missing reason
        InventoryError: 'out' larger than the stock on hand
    """
    if movement_type not in MOVEMENT_TYPES:
        raise ValidationError(f"type must be one of: {', '.join(MOVEMENT_TYPES)}")
    qty = enforce_rules_quantity(quantity, allow_zero=(movement_type == "adjustment"))
    reason = (reason or "").strip()
    if not reason:
        raise ValidationError("reason is required")
    reference = (reference or "").strip() or None

    def _op():
        item = lock_for_update(db.session.query(Item).filter_by(id=item_id)).first()
        if item is None:
            return None

        if movement_type == "in":
            _increment_stock(item.id, qty)
        elif movement_type == "out":
            if not decrement_stock(item.id, qty):
                raise InventoryError(
                    "Insufficient stock",
                    details={"item_id": item.id, "requested_quantity": qty, "on_hand": item.stock},
                )
        else:
            _set_stock(item.id, qty)

        movement = append_movement(
            item_id=item.id,
            item_name=item.name,
            movement_type=movement_type,
            quantity=qty,
            reason=reason,
            reference=reference,
        )
        db.session.commit()
        return item, movement

    result = run_with_retry(_op)
    if result is not None:
        invalidate_catalog()
        item, movement = result
        current_app.logger.info(
            "Stock %s item_id=%s qty=%s -> stock=%s", movement_type, item.id, qty, item.stock
        )
    return result


def list_movements(
    *,
    item_id: int | None = None,
    movement_type: str | None = None,
    reference: str | None = None,
    limit: int = 200,
) -> list[StockMovement]:
    """Newest first."""
    q = db.session.query(StockMovement)
    if item_id is not None:
        q = q.filter(StockMovement.item_id == item_id)
    if movement_type:
        if movement_type not in MOVEMENT_TYPES:
            raise ValidationError(f"type must be one of: {', '.join(MOVEMENT_TYPES)}")
        q = q.filter(StockMovement.type == movement_type)
    if reference:
        q = q.filter(StockMovement.reference == reference)
    limit = max(1, min(limit, 1000))
    return q.order_by(StockMovement.created_at.desc(), StockMovement.id.desc()).limit(limit).all()
