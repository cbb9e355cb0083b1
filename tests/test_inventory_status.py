from datetime import date, timedelta

import pytest

from inventory_status import (
    EXPIRES_SOON,
    IN_STOCK,
    LOW_STOCK,
    OUT_OF_STOCK,
    build_alerts,
    is_expiring_soon,
    is_low_stock,
    item_status,
    matches_status,
)
from models import InventoryItem

TODAY = date(2026, 3, 10)


def make_item(quantity, threshold=5, expiry=None, item_id=1, name="Canned Beans", unit="cans"):
    return InventoryItem(
        id=item_id,
        name=name,
        category="Canned Goods",
        quantity=quantity,
        unit=unit,
        low_stock_threshold=threshold,
        expiry_date=expiry,
    )


@pytest.mark.parametrize(
    "quantity, threshold, expiry, expected",
    [
        (0, 5, None, OUT_OF_STOCK),
        (0, 5, TODAY + timedelta(days=1), OUT_OF_STOCK),
        (2, 5, None, LOW_STOCK),
        (5, 5, None, LOW_STOCK),
        (3, 5, TODAY + timedelta(days=2), LOW_STOCK),
        (50, 5, TODAY + timedelta(days=3), EXPIRES_SOON),
        (50, 5, TODAY + timedelta(days=7), EXPIRES_SOON),
        (50, 5, TODAY - timedelta(days=1), EXPIRES_SOON),
        (50, 5, TODAY + timedelta(days=8), IN_STOCK),
        (6, 5, None, IN_STOCK),
    ],
)
def test_item_status_first_match_wins(quantity, threshold, expiry, expected):
    assert item_status(make_item(quantity, threshold, expiry), TODAY) == expected


def test_zero_threshold_out_of_stock_not_low_stock():
    assert item_status(make_item(0, threshold=0), TODAY) == OUT_OF_STOCK
    assert item_status(make_item(1, threshold=0), TODAY) == IN_STOCK


def test_low_stock_and_expiring_predicates_are_independent():
    item = make_item(2, expiry=TODAY + timedelta(days=1))
    assert is_low_stock(item)
    assert is_expiring_soon(item, TODAY)
    assert not is_expiring_soon(make_item(2), TODAY)


def test_matches_status_accepts_alias_and_ignores_unknown():
    expiring = make_item(50, expiry=TODAY + timedelta(days=3))
    assert matches_status(expiring, "Expiring Soon", TODAY)
    assert matches_status(expiring, "Expires Soon", TODAY)
    assert not matches_status(expiring, "In Stock", TODAY)
    assert matches_status(expiring, "All Items", TODAY)
    assert matches_status(expiring, "Somewhere Else", TODAY)
    assert matches_status(expiring, None, TODAY)


def test_low_stock_item_alerts_only_as_low_stock():
    item = make_item(2)
    alerts = build_alerts([item], [])
    assert [(a.id, a.type, a.priority) for a in alerts] == [(1, "low_stock", "high")]
    assert alerts[0].title == "Canned Beans"
    assert alerts[0].description == "2 cans remaining"


def test_item_can_alert_in_both_lists():
    item = make_item(1, expiry=date(2026, 3, 12), name="Milk", unit="gallons")
    alerts = build_alerts([item], [item])
    assert [a.type for a in alerts] == ["low_stock", "expiring"]
    assert alerts[1].description == "Expires 2026-03-12"
    assert alerts[1].priority == "medium"
