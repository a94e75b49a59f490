from __future__ import annotations

from ..extensions import db
from boutique_pos.time_utils import utcnow

INVOICE_COUNTER_ID = 1


class InvoiceCounter(db.Model):
    """
    Single-row table holding the last issued invoice sequence value.

    WHY: Invoice numbers are allocated with one conditional UPDATE
    (counter = counter + 1) so concurrent checkouts never read the same value.
    """
    __tablename__ = "invoice_counter"

    id = db.Column(db.Integer, primary_key=True)
    counter = db.Column(db.Integer, nullable=False, default=0)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)
