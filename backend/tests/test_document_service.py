import pytest

from boutique_pos.models import InvoiceCounter, INVOICE_COUNTER_ID
from boutique_pos.services.document_service import (
    DocumentSequenceError,
    ensure_invoice_counter,
    format_invoice_number,
    next_invoice_number,
    peek_invoice_counter,
)


def test_format_invoice_number(app):
    assert format_invoice_number(1) == "INV-000001"
    assert format_invoice_number(42) == "INV-000042"
    assert format_invoice_number(1234567) == "INV-1234567"
    assert format_invoice_number(7, prefix="BILL", pad=4) == "BILL-0007"


def test_format_rejects_non_positive(app):
    with pytest.raises(DocumentSequenceError):
        format_invoice_number(0)


def test_first_number_creates_counter(db_session):
    assert peek_invoice_counter() == 0
    assert next_invoice_number() == "INV-000001"
    assert db_session.get(InvoiceCounter, INVOICE_COUNTER_ID).counter == 1


def test_numbers_are_sequential(db_session):
    ensure_invoice_counter()
    numbers = [next_invoice_number() for _ in range(3)]
    assert numbers == ["INV-000001", "INV-000002", "INV-000003"]
    assert peek_invoice_counter() == 3


def test_uncommitted_allocation_rolls_back(db_session):
    ensure_invoice_counter()
    assert next_invoice_number(commit=False) == "INV-000001"
    db_session.rollback()
    assert peek_invoice_counter() == 0
    assert next_invoice_number() == "INV-000001"


def test_ensure_counter_is_idempotent(db_session):
    ensure_invoice_counter()
    next_invoice_number()
    counter = ensure_invoice_counter()
    assert counter.counter == 1
