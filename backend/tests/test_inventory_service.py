import pytest

from boutique_pos.models import Item, StockMovement
from boutique_pos.services import inventory_service
from boutique_pos.services.inventory_service import InventoryError
from boutique_pos.validation import ValidationError


def _adjust(item_id, movement_type, quantity, reason="Recount", **kwargs):
    return inventory_service.adjust_stock(
        item_id=item_id,
        movement_type=movement_type,
        quantity=quantity,
        reason=reason,
        **kwargs,
    )


def test_stock_in_adds(db_session, make_item):
    item = make_item(stock=4)
    updated, movement = _adjust(item["id"], "in", 6, reason="Supplier delivery", reference="PO-17")
    assert updated.stock == 10
    assert movement.type == "in"
    assert movement.quantity == 6
    assert movement.reference == "PO-17"
    assert movement.item_name == item["name"]


def test_stock_out_subtracts(db_session, make_item):
    item = make_item(stock=4)
    updated, _ = _adjust(item["id"], "out", 3, reason="Damaged")
    assert updated.stock == 1


def test_stock_out_beyond_on_hand_rejected(db_session, make_item):
    item = make_item(stock=2)
    with pytest.raises(InventoryError) as exc:
        _adjust(item["id"], "out", 3, reason="Damaged")
    assert exc.value.details["on_hand"] == 2
    assert db_session.get(Item, item["id"]).stock == 2
    assert db_session.query(StockMovement).count() == 0


def test_adjustment_sets_absolute_value(db_session, make_item):
    item = make_item(stock=9)
    updated, movement = _adjust(item["id"], "adjustment", 4)
    assert updated.stock == 4
    assert movement.quantity == 4


def test_adjustment_to_zero_allowed(db_session, make_item):
    item = make_item(stock=9)
    updated, _ = _adjust(item["id"], "adjustment", 0)
    assert updated.stock == 0


@pytest.mark.parametrize("movement_type,quantity,reason", [
    ("in", 0, "Delivery"),
    ("out", -1, "Damaged"),
    ("adjustment", -2, "Recount"),
    ("transfer", 1, "Move"),
    ("in", 1, "   "),
    ("in", "1.5", "Delivery"),
])
def test_invalid_adjustments_rejected(db_session, make_item, movement_type, quantity, reason):
    item = make_item(stock=5)
    with pytest.raises(ValidationError):
        _adjust(item["id"], movement_type, quantity, reason=reason)
    assert db_session.get(Item, item["id"]).stock == 5


def test_unknown_item_returns_none(db_session):
    assert _adjust(12345, "in", 1) is None


def test_every_change_logs_one_movement(db_session, make_item):
    item = make_item(stock=0)
    _adjust(item["id"], "in", 10)
    _adjust(item["id"], "out", 3)
    _adjust(item["id"], "adjustment", 5)

    movements = inventory_service.list_movements(item_id=item["id"])
    assert [m.type for m in movements] == ["adjustment", "out", "in"]


def test_list_movements_filters(db_session, make_item):
    a = make_item(stock=5)
    b = make_item(stock=5)
    _adjust(a["id"], "in", 1, reference="PO-1")
    _adjust(b["id"], "out", 1)

    assert len(inventory_service.list_movements(item_id=a["id"])) == 1
    assert len(inventory_service.list_movements(movement_type="out")) == 1
    assert inventory_service.list_movements(reference="PO-1")[0].item_id == a["id"]
    assert len(inventory_service.list_movements(limit=1)) == 1

    with pytest.raises(ValidationError):
        inventory_service.list_movements(movement_type="bogus")


def test_decrement_guard(db_session, make_item):
    item = make_item(stock=1)
    assert inventory_service.decrement_stock(item["id"], 2) is False
    assert inventory_service.decrement_stock(item["id"], 1) is True
    db_session.commit()
    assert db_session.get(Item, item["id"]).stock == 0
