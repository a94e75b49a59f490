from __future__ import annotations

from ..extensions import db
from boutique_pos.money import bps_to_percent
from boutique_pos.time_utils import to_utc_z, utcnow

PAYMENT_METHODS = ("cash", "card", "upi", "credit")


class Sale(db.Model):
    """
    Completed sale (invoice).

    Totals are computed once by totals_service when the sale is recorded and
    never recomputed: total_cents == subtotal_cents - discount_cents + tax_cents.
    Immutable after creation except for deletion (which restocks).
    """
    __tablename__ = "sales"
    __table_args__ = (
        db.UniqueConstraint("invoice_number", name="uq_sales_invoice_number"),
        db.Index("ix_sales_created_at", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    # Human-readable invoice number (e.g., "INV-000123")
    invoice_number = db.Column(db.String(32), nullable=False)

    subtotal_cents = db.Column(db.Integer, nullable=False)
    discount_cents = db.Column(db.Integer, nullable=False, default=0)
    tax_cents = db.Column(db.Integer, nullable=False, default=0)
    total_cents = db.Column(db.Integer, nullable=False)

    # Checkout inputs, kept so receipts can print "Discount (10%)" / "GST (18%)"
    discount_percent_bps = db.Column(db.Integer, nullable=False, default=0)
    tax_rate_bps = db.Column(db.Integer, nullable=False, default=0)
    tax_enabled = db.Column(db.Boolean, nullable=False, default=True)

    payment_method = db.Column(db.String(16), nullable=False, default="cash")
    customer_name = db.Column(db.String(255), nullable=True)
    customer_phone = db.Column(db.String(32), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    lines = db.relationship(
        "SaleLine",
        backref="sale",
        lazy=True,
        order_by="SaleLine.position",
        cascade="all, delete-orphan",
    )

    def to_dict(self, include_lines: bool = True) -> dict:
        data = {
            "id": self.id,
            "invoice_number": self.invoice_number,
            "subtotal_cents": self.subtotal_cents,
            "discount_cents": self.discount_cents,
            "tax_cents": self.tax_cents,
            "total_cents": self.total_cents,
            "discount_percent": str(bps_to_percent(self.discount_percent_bps)),
            "tax_rate": str(bps_to_percent(self.tax_rate_bps)),
            "tax_enabled": self.tax_enabled,
            "payment_method": self.payment_method,
            "customer_name": self.customer_name,
            "customer_phone": self.customer_phone,
            "created_at": to_utc_z(self.created_at),
        }
        if include_lines:
            data["items"] = [line.to_dict() for line in self.lines]
        return data


class SaleLine(db.Model):
    """
    Line on a sale. name/barcode/unit price/unit cost are snapshots taken at
    sale time so the invoice stays stable if the item is edited or deleted.
    """
    __tablename__ = "sale_lines"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    sale_id = db.Column(db.Integer, db.ForeignKey("sales.id"), nullable=False, index=True)
    position = db.Column(db.Integer, nullable=False, default=0)

    # Not a foreign key: the item may be deleted later
    item_id = db.Column(db.Integer, nullable=False, index=True)
    name = db.Column(db.String(255), nullable=False)
    barcode = db.Column(db.String(64), nullable=False)

    quantity = db.Column(db.Integer, nullable=False)
    unit_price_cents = db.Column(db.Integer, nullable=False)
    unit_cost_cents = db.Column(db.Integer, nullable=False, default=0)
    discount_cents = db.Column(db.Integer, nullable=False, default=0)
    line_total_cents = db.Column(db.Integer, nullable=False)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "item_id": self.item_id,
            "name": self.name,
            "barcode": self.barcode,
            "quantity": self.quantity,
            "unit_price_cents": self.unit_price_cents,
            "discount_cents": self.discount_cents,
            "line_total_cents": self.line_total_cents,
        }
