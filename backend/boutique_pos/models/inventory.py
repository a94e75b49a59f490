from __future__ import annotations

from ..extensions import db
from boutique_pos.time_utils import to_utc_z, utcnow

MOVEMENT_TYPES = ("in", "out", "adjustment")


class Item(db.Model):
    """
    Catalog item with its on-hand stock.

    BARCODE: intended unique among items, enforced by an existence check in
    items_service before insert/update (indexed, no unique constraint).

    STOCK: mutated only through conditional UPDATE statements in
    inventory_service and sales_service so concurrent writers cannot
    overdraw it.
    """
    __tablename__ = "items"
    __table_args__ = (
        db.Index("ix_items_barcode", "barcode"),
        db.Index("ix_items_name", "name"),
        db.Index("ix_items_category", "category"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    name = db.Column(db.String(255), nullable=False)
    sku = db.Column(db.String(64), nullable=False)
    barcode = db.Column(db.String(64), nullable=False)
    category = db.Column(db.String(120), nullable=False)

    # Authoritative storage in cents (frontend may only format for display)
    purchase_price_cents = db.Column(db.Integer, nullable=False, default=0)
    selling_price_cents = db.Column(db.Integer, nullable=False)

    stock = db.Column(db.Integer, nullable=False, default=0)
    min_stock = db.Column(db.Integer, nullable=False, default=5)

    unit = db.Column(db.String(32), nullable=False, default="pcs")
    description = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    @property
    def is_low_stock(self) -> bool:
        return (self.stock or 0) <= (self.min_stock or 0)

    def __repr__(self) -> str:
        return f"<Item id={self.id} sku={self.sku!r} barcode={self.barcode!r} stock={self.stock}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "sku": self.sku,
            "barcode": self.barcode,
            "category": self.category,
            "purchase_price_cents": self.purchase_price_cents,
            "selling_price_cents": self.selling_price_cents,
            "stock": self.stock,
            "min_stock": self.min_stock,
            "is_low_stock": self.is_low_stock,
            "unit": self.unit,
            "description": self.description,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class StockMovement(db.Model):
    """
    Append-only stock log. Rows are created, never updated.

    item_id is not a foreign key. History of a deleted item stays readable
    through the item_name snapshot.
    """
    __tablename__ = "stock_movements"
    __table_args__ = (
        db.Index("ix_stock_movements_item_created", "item_id", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    item_id = db.Column(db.Integer, nullable=False, index=True)
    item_name = db.Column(db.String(255), nullable=False)

    # in | out | adjustment
    type = db.Column(db.String(16), nullable=False, index=True)
    quantity = db.Column(db.Integer, nullable=False)
    reason = db.Column(db.String(255), nullable=False)

    # e.g. the invoice number of the sale that produced this movement
    reference = db.Column(db.String(64), nullable=True, index=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, index=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "item_id": self.item_id,
            "item_name": self.item_name,
            "type": self.type,
            "quantity": self.quantity,
            "reason": self.reason,
            "reference": self.reference,
            "created_at": to_utc_z(self.created_at),
        }
