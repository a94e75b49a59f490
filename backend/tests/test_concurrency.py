"""
Concurrent invoice allocation and checkout against a file-backed SQLite database.

Each worker thread pushes its own app context, so every thread gets its own
session and connection.
"""

import threading
from decimal import Decimal

import pytest

from boutique_pos import create_app
from boutique_pos.extensions import db
from boutique_pos.models import Item, Sale, StockMovement
from boutique_pos.services import items_service, sales_service
from boutique_pos.services.document_service import ensure_invoice_counter, next_invoice_number
from boutique_pos.services.sales_service import CartRequestLine, SaleError


@pytest.fixture
def file_app(tmp_path):
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': f"sqlite:///{tmp_path / 'pos.sqlite3'}",
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'CACHE_TYPE': 'SimpleCache',
        'LOG_LEVEL': 'WARNING',
    })
    with app.app_context():
        db.create_all()
        ensure_invoice_counter()

    yield app

    with app.app_context():
        db.session.remove()
        db.drop_all()
        db.engine.dispose()


def _run_threads(app, worker, count):
    errors = []
    start = threading.Barrier(count)

    def _target(n):
        with app.app_context():
            start.wait()
            try:
                worker(n)
            except Exception as e:  # collected and asserted by the caller
                errors.append(e)
            finally:
                db.session.remove()

    threads = [threading.Thread(target=_target, args=(n,)) for n in range(count)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=60)
    return errors


def test_parallel_invoice_numbers_are_unique_and_gapless(file_app):
    issued = []
    lock = threading.Lock()

    def worker(_n):
        for _ in range(10):
            number = next_invoice_number()
            with lock:
                issued.append(number)

    errors = _run_threads(file_app, worker, 4)

    assert errors == []
    assert len(issued) == 40
    assert set(issued) == {f"INV-{n:06d}" for n in range(1, 41)}


def test_parallel_checkouts_never_oversell(file_app):
    with file_app.app_context():
        item_id = items_service.create_item(patch={
            "name": "Last Few Kurtas",
            "category": "Apparel",
            "purchase_price_cents": 6000,
            "selling_price_cents": 10000,
            "stock": 10,
        })["id"]

    rejected = []

    def worker(_n):
        try:
            sales_service.record_sale(
                lines=[CartRequestLine(item_id=item_id, quantity=1)],
                discount_percent=Decimal("0"),
                tax_rate=Decimal("18"),
                tax_enabled=True,
            )
        except SaleError:
            rejected.append(1)

    errors = _run_threads(file_app, worker, 20)

    assert errors == []
    assert len(rejected) == 10

    with file_app.app_context():
        assert db.session.get(Item, item_id).stock == 0
        invoices = sorted(s.invoice_number for s in db.session.query(Sale).all())
        assert invoices == [f"INV-{n:06d}" for n in range(1, 11)]
        outs = db.session.query(StockMovement).filter_by(item_id=item_id, type="out").count()
        assert outs == 10
