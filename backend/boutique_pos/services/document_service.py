# Overview: Service-layer operations for invoice numbering.

from __future__ import annotations

from flask import current_app
from sqlalchemy import update
from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models import InvoiceCounter, INVOICE_COUNTER_ID
from boutique_pos.time_utils import utcnow
from .concurrency import run_with_retry, execute_conditional


class DocumentSequenceError(Exception):
    """Raised when invoice sequence operations fail."""
    pass


def format_invoice_number(value: int, *, prefix: str | None = None, pad: int | None = None) -> str:
    if value <= 0:
        raise DocumentSequenceError("invoice sequence values start at 1")
    if prefix is None:
        prefix = current_app.config.get("INVOICE_PREFIX", "INV")
    if pad is None:
        pad = int(current_app.config.get("INVOICE_NUMBER_PAD", 6))
    return f"{prefix}-{value:0{pad}d}"


def _current_counter() -> int:
    return (
        db.session.query(InvoiceCounter.counter)
        .filter_by(id=INVOICE_COUNTER_ID)
        .scalar()
    )


def allocate_invoice_sequence() -> int:
    """
    Atomically bump the counter inside the caller's transaction.

    Must run before any other write in the transaction: the first-use insert
    race is resolved with a rollback.
    """
    stmt = (
        update(InvoiceCounter)
        .where(InvoiceCounter.id == INVOICE_COUNTER_ID)
        .values(counter=InvoiceCounter.counter + 1, updated_at=utcnow())
        .execution_options(synchronize_session=False)
    )

    if execute_conditional(stmt):
        db.session.flush()
        return _current_counter()

    db.session.add(InvoiceCounter(id=INVOICE_COUNTER_ID, counter=1))
    try:
        db.session.flush()
        return 1
    except IntegrityError:
        # Another writer created the row first; bump theirs instead.
        db.session.rollback()
        if not execute_conditional(stmt):
            raise DocumentSequenceError("invoice counter row missing")
        db.session.flush()
        return _current_counter()


def next_invoice_number(*, commit: bool = True) -> str:
    """
    Allocate the next invoice number (INV-000001, INV-000002, ...).

    commit=False joins the caller's transaction (used by sales_service so a
    failed checkout does not burn a number).
    """
    if not commit:
        return format_invoice_number(allocate_invoice_sequence())

    def _op() -> str:
        number = format_invoice_number(allocate_invoice_sequence())
        db.session.commit()
        return number

    return run_with_retry(_op)


def peek_invoice_counter() -> int:
    """Last issued sequence value (0 if nothing was issued yet)."""
    return _current_counter() or 0


def ensure_invoice_counter() -> InvoiceCounter:
    counter = db.session.get(InvoiceCounter, INVOICE_COUNTER_ID)
    if counter is None:
        counter = InvoiceCounter(id=INVOICE_COUNTER_ID, counter=0)
        db.session.add(counter)
        db.session.commit()
    return counter
