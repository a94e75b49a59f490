from boutique_pos import create_app
from boutique_pos.extensions import cache
from boutique_pos.services import cache_service
from boutique_pos.services.cache_service import (
    PREFIX_DASHBOARD,
    PREFIX_ITEMS,
    get_or_load,
    invalidate,
    invalidate_catalog,
    make_key,
)


def test_make_key():
    assert make_key("items", "barcode", "200123") == "items:barcode:200123"
    assert make_key("dashboard", "stats", day="2026-01-01") == "dashboard:stats:day=2026-01-01"


def test_loader_called_once_until_invalidated(db_session):
    calls = []

    def loader():
        calls.append(1)
        return {"value": len(calls)}

    assert get_or_load(PREFIX_ITEMS, ("a",), loader) == {"value": 1}
    assert get_or_load(PREFIX_ITEMS, ("a",), loader) == {"value": 1}
    assert len(calls) == 1

    invalidate(PREFIX_ITEMS)
    assert get_or_load(PREFIX_ITEMS, ("a",), loader) == {"value": 2}


def test_cached_values_are_copies(db_session):
    value = get_or_load(PREFIX_ITEMS, ("a",), lambda: {"stock": 5})
    value["stock"] = 0
    assert get_or_load(PREFIX_ITEMS, ("a",), lambda: None) == {"stock": 5}


def test_none_not_cached(db_session):
    assert get_or_load(PREFIX_ITEMS, ("missing",), lambda: None) is None
    assert get_or_load(PREFIX_ITEMS, ("missing",), lambda: {"id": 1}) == {"id": 1}


def test_invalidation_during_load_is_not_cached(db_session):
    def stale_loader():
        # A price edit commits and invalidates while this read is in flight.
        invalidate(PREFIX_ITEMS)
        return {"selling_price_cents": 100}

    assert get_or_load(PREFIX_ITEMS, ("barcode", "1"), stale_loader) == {"selling_price_cents": 100}
    fresh = get_or_load(PREFIX_ITEMS, ("barcode", "1"), lambda: {"selling_price_cents": 200})
    assert fresh == {"selling_price_cents": 200}


def test_invalidate_by_prefix(db_session):
    get_or_load(PREFIX_ITEMS, ("barcode", "1"), lambda: 1)
    get_or_load(PREFIX_DASHBOARD, ("stats",), lambda: 2)
    get_or_load("itemsx", ("other",), lambda: 3)

    invalidate(PREFIX_ITEMS)
    assert get_or_load(PREFIX_ITEMS, ("barcode", "1"), lambda: 10) == 10
    assert get_or_load(PREFIX_DASHBOARD, ("stats",), lambda: 20) == 2

    invalidate_catalog()
    assert get_or_load(PREFIX_DASHBOARD, ("stats",), lambda: 20) == 20
    assert get_or_load("itemsx", ("other",), lambda: 30) == 3


def test_evicted_generation_starts_fresh(db_session):
    get_or_load(PREFIX_ITEMS, ("a",), lambda: "old")
    cache.delete(cache_service._generation_key(PREFIX_ITEMS))
    assert get_or_load(PREFIX_ITEMS, ("a",), lambda: "new") == "new"


def test_null_cache_always_loads():
    app = create_app({
        "TESTING": True,
        "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:",
        "CACHE_TYPE": "NullCache",
    })
    calls = []
    with app.app_context():
        get_or_load(PREFIX_ITEMS, ("k",), lambda: calls.append(1) or "x")
        get_or_load(PREFIX_ITEMS, ("k",), lambda: calls.append(1) or "x")
    assert len(calls) == 2
