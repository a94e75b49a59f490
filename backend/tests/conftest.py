"""
Pytest fixtures for the boutique POS backend tests.

Provides an in-memory database, a test client, and an item factory.
"""

import pytest

from boutique_pos import create_app
from boutique_pos.extensions import db, cache
from boutique_pos.services import items_service


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'CACHE_TYPE': 'SimpleCache',
        'LOG_LEVEL': 'WARNING',
    })

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()
        cache.clear()

        yield db.session

        # Cleanup after test
        db.session.rollback()
        db.session.remove()


@pytest.fixture(scope='function')
def make_item(db_session):
    """Factory for catalog items; returns the created item as a dict."""
    counter = {"n": 0}

    def _make(**overrides):
        counter["n"] += 1
        patch = {
            "name": f"Test Item {counter['n']}",
            "category": "Apparel",
            "purchase_price_cents": 6000,
            "selling_price_cents": 10000,
            "stock": 10,
            "min_stock": 2,
        }
        patch.update(overrides)
        return items_service.create_item(patch=patch)

    return _make
