"""
Stock status and alert rules for inventory items.

Two views are derived from the same rows and deliberately differ:

- ``item_status`` gives every item exactly one display status, first match
  wins (out of stock, low stock, expires soon, in stock).
- ``build_alerts`` produces the dashboard notification list, where an item
  that is both low on stock and close to expiry shows up twice.
"""
from datetime import date, timedelta
from typing import Iterable, List, Optional

from models import InventoryItem, utcnow
from schemas import Alert

EXPIRY_WINDOW_DAYS = 7

OUT_OF_STOCK = "Out of Stock"
LOW_STOCK = "Low Stock"
EXPIRES_SOON = "Expires Soon"
IN_STOCK = "In Stock"

STATUSES = (OUT_OF_STOCK, LOW_STOCK, EXPIRES_SOON, IN_STOCK)

# Filter values the inventory list accepts in addition to STATUSES
STATUS_ALIASES = {"Expiring Soon": EXPIRES_SOON}


def today_utc() -> date:
    return utcnow().date()


def expiry_cutoff(today: Optional[date] = None, days: int = EXPIRY_WINDOW_DAYS) -> date:
    """Last expiry date that still counts as expiring soon."""
    return (today or today_utc()) + timedelta(days=days)


def is_low_stock(item: InventoryItem) -> bool:
    return item.quantity <= item.low_stock_threshold


def is_expiring_soon(
    item: InventoryItem,
    today: Optional[date] = None,
    days: int = EXPIRY_WINDOW_DAYS,
) -> bool:
    if item.expiry_date is None:
        return False
    return item.expiry_date <= expiry_cutoff(today, days)


def item_status(item: InventoryItem, today: Optional[date] = None) -> str:
    """
    Classify an item for table display.
    Quantity 0 is always out of stock, whatever the expiry date.
    """
    if item.quantity == 0:
        return OUT_OF_STOCK
    if is_low_stock(item):
        return LOW_STOCK
    if is_expiring_soon(item, today):
        return EXPIRES_SOON
    return IN_STOCK


def normalize_status_filter(status: Optional[str]) -> Optional[str]:
    """
    Map a status filter value onto a display status.
    Returns None for empty, "All Items" or unrecognized values (no filtering).
    """
    if not status:
        return None
    status = STATUS_ALIASES.get(status, status)
    if status not in STATUSES:
        return None
    return status


def matches_status(item: InventoryItem, status: Optional[str], today: Optional[date] = None) -> bool:
    """
    Filter on the display status, so an item matches one status only.
    A low-stock item that also expires soon is listed under "Low Stock",
    not "Expires Soon", and "In Stock" leaves out items expiring soon.
    """
    wanted = normalize_status_filter(status)
    if wanted is None:
        return True
    return item_status(item, today) == wanted


def build_alerts(
    low_stock_items: Iterable[InventoryItem],
    expiring_items: Iterable[InventoryItem],
) -> List[Alert]:
    alerts = [
        Alert(
            id=item.id,
            type="low_stock",
            title=item.name,
            description=f"{item.quantity} {item.unit} remaining",
            priority="high",
        )
        for item in low_stock_items
    ]
    alerts.extend(
        Alert(
            id=item.id,
            type="expiring",
            title=item.name,
            description=f"Expires {item.expiry_date.isoformat()}",
            priority="medium",
        )
        for item in expiring_items
    )
    return alerts
