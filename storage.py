"""
Record repository: one set of functions per entity.

Every mutation on a primary entity (inventory item, donation, distribution
event) commits the row change together with exactly one ActivityLog row.
The acting user's id is always passed in explicitly.
"""
import logging
from datetime import date, datetime
from typing import List, Optional

from sqlalchemy import and_, or_
from sqlmodel import Session, col, select

from inventory_status import EXPIRY_WINDOW_DAYS, expiry_cutoff, matches_status, normalize_status_filter, today_utc
from models import (
    ActivityLog,
    DistributionEvent,
    DistributionItem,
    Donation,
    DonationItem,
    InventoryItem,
    User,
    utcnow,
)
from schemas import (
    DistributionEventCreate,
    DistributionEventUpdate,
    DistributionItemCreate,
    DonationCreate,
    DonationItemCreate,
    DonationUpdate,
    IdentityClaims,
    InventoryItemCreate,
    InventoryItemUpdate,
)

logger = logging.getLogger(__name__)

INVENTORY_ITEM = "inventory_item"
DONATION = "donation"
DISTRIBUTION_EVENT = "distribution_event"

INVENTORY_SORT_COLUMNS = {
    "name": InventoryItem.name,
    "quantity": InventoryItem.quantity,
    "expiry_date": InventoryItem.expiry_date,
}


def low_stock_clause():
    return col(InventoryItem.quantity) <= col(InventoryItem.low_stock_threshold)


def expiring_clause(cutoff: date):
    return and_(
        col(InventoryItem.expiry_date).is_not(None),
        col(InventoryItem.expiry_date) <= cutoff,
    )


def get_user(session: Session, user_id: str) -> Optional[User]:
    return session.get(User, user_id)


def upsert_user(session: Session, claims: IdentityClaims) -> User:
    """Insert the user on first login, refresh profile fields afterwards."""
    fields = {
        "email": claims.email,
        "first_name": claims.first_name,
        "last_name": claims.last_name,
        "profile_image_url": claims.profile_image_url,
    }
    user = session.get(User, claims.sub)
    if user is None:
        user = User(id=claims.sub, **fields)
    else:
        user.sqlmodel_update(fields)
        user.updated_at = utcnow()

    session.add(user)
    session.commit()
    session.refresh(user)
    return user


def _add_activity(
    session: Session,
    action: str,
    entity_type: str,
    entity_id: int,
    description: str,
    user_id: Optional[str],
) -> ActivityLog:
    entry = ActivityLog(
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        description=description,
        created_by=user_id,
    )
    session.add(entry)
    return entry


def create_activity_log(
    session: Session,
    action: str,
    entity_type: str,
    entity_id: int,
    description: str,
    user_id: Optional[str],
) -> ActivityLog:
    entry = _add_activity(session, action, entity_type, entity_id, description, user_id)
    session.commit()
    session.refresh(entry)
    return entry


def get_recent_activity(session: Session, limit: int = 10) -> List[ActivityLog]:
    query = (
        select(ActivityLog)
        .order_by(col(ActivityLog.created_at).desc(), col(ActivityLog.id).desc())
        .limit(limit)
    )
    return list(session.exec(query).all())


def _inventory_conditions(category: Optional[str], search: Optional[str]) -> list:
    conditions = []

    if category and category != "All Categories":
        conditions.append(InventoryItem.category == category)

    if search:
        # Literal substring match; % and _ in the term are not wildcards
        conditions.append(
            or_(
                col(InventoryItem.name).icontains(search, autoescape=True),
                col(InventoryItem.category).icontains(search, autoescape=True),
            )
        )

    return conditions


def list_inventory_items(
    session: Session,
    category: Optional[str] = None,
    search: Optional[str] = None,
    status: Optional[str] = None,
    sort_by: Optional[str] = None,
    sort_order: Optional[str] = None,
    today: Optional[date] = None,
) -> List[InventoryItem]:
    """
    List inventory items.

    Category and search are pushed to the store; the status filter depends
    on today's date and is applied to the fetched rows afterwards.
    """
    query = select(InventoryItem)

    conditions = _inventory_conditions(category, search)
    if conditions:
        query = query.where(and_(*conditions))

    sort_column = col(INVENTORY_SORT_COLUMNS.get(sort_by or "name", InventoryItem.name))
    if sort_order == "desc":
        query = query.order_by(sort_column.desc(), col(InventoryItem.id).desc())
    else:
        query = query.order_by(sort_column.asc(), col(InventoryItem.id).asc())

    items = list(session.exec(query).all())

    if normalize_status_filter(status) is None:
        return items

    today = today or today_utc()
    return [item for item in items if matches_status(item, status, today)]


def get_inventory_item(session: Session, item_id: int) -> Optional[InventoryItem]:
    return session.get(InventoryItem, item_id)


def create_inventory_item(session: Session, item_in: InventoryItemCreate, user_id: str) -> InventoryItem:
    item = InventoryItem(**item_in.model_dump(exclude_none=True), created_by=user_id)
    session.add(item)
    session.flush()

    _add_activity(
        session,
        "create",
        INVENTORY_ITEM,
        item.id,
        f"Added new inventory item: {item.name} ({item.quantity} {item.unit})",
        user_id,
    )
    session.commit()
    session.refresh(item)
    logger.info("Created inventory item %s", item.id)
    return item


def update_inventory_item(
    session: Session,
    item_id: int,
    item_in: InventoryItemUpdate,
    user_id: str,
) -> Optional[InventoryItem]:
    item = session.get(InventoryItem, item_id)
    if item is None:
        return None

    item.sqlmodel_update(item_in.model_dump(exclude_unset=True))
    item.updated_at = utcnow()
    session.add(item)

    _add_activity(session, "update", INVENTORY_ITEM, item_id, f"Updated inventory item: {item.name}", user_id)
    session.commit()
    session.refresh(item)
    logger.info("Updated inventory item %s", item_id)
    return item


def delete_inventory_item(session: Session, item_id: int, user_id: str) -> None:
    # Deleting a missing item is a no-op: no error and no log entry
    item = session.get(InventoryItem, item_id)
    if item is None:
        logger.debug("Inventory item %s not found, nothing to delete", item_id)
        return

    session.delete(item)
    _add_activity(session, "delete", INVENTORY_ITEM, item_id, f"Deleted inventory item: {item.name}", user_id)
    session.commit()
    logger.info("Deleted inventory item %s", item_id)


def get_low_stock_items(session: Session) -> List[InventoryItem]:
    query = select(InventoryItem).where(low_stock_clause()).order_by(InventoryItem.name)
    return list(session.exec(query).all())


def get_expiring_items(
    session: Session,
    days: int = EXPIRY_WINDOW_DAYS,
    today: Optional[date] = None,
) -> List[InventoryItem]:
    query = (
        select(InventoryItem)
        .where(expiring_clause(expiry_cutoff(today, days)))
        .order_by(InventoryItem.expiry_date, InventoryItem.name)
    )
    return list(session.exec(query).all())


def list_donations(
    session: Session,
    donation_type: Optional[str] = None,
    date_from: Optional[datetime] = None,
    date_to: Optional[datetime] = None,
) -> List[Donation]:
    conditions = []
    if donation_type:
        conditions.append(Donation.donation_type == donation_type)
    if date_from is not None:
        conditions.append(col(Donation.donation_date) >= date_from)
    if date_to is not None:
        conditions.append(col(Donation.donation_date) <= date_to)

    query = select(Donation)
    if conditions:
        query = query.where(and_(*conditions))
    query = query.order_by(col(Donation.donation_date).desc(), col(Donation.id).desc())
    return list(session.exec(query).all())


def get_donation(session: Session, donation_id: int) -> Optional[Donation]:
    return session.get(Donation, donation_id)


def create_donation(session: Session, donation_in: DonationCreate, user_id: str) -> Donation:
    # donation_date falls back to the column default (now) when omitted
    donation = Donation(**donation_in.model_dump(exclude_none=True), created_by=user_id)
    session.add(donation)
    session.flush()

    _add_activity(
        session,
        "create",
        DONATION,
        donation.id,
        f"Recorded new donation from {donation.donor_name}",
        user_id,
    )
    session.commit()
    session.refresh(donation)
    logger.info("Created donation %s", donation.id)
    return donation


def update_donation(
    session: Session,
    donation_id: int,
    donation_in: DonationUpdate,
    user_id: str,
) -> Optional[Donation]:
    donation = session.get(Donation, donation_id)
    if donation is None:
        return None

    donation.sqlmodel_update(donation_in.model_dump(exclude_unset=True))
    session.add(donation)

    _add_activity(session, "update", DONATION, donation_id, f"Updated donation from {donation.donor_name}", user_id)
    session.commit()
    session.refresh(donation)
    logger.info("Updated donation %s", donation_id)
    return donation


def delete_donation(session: Session, donation_id: int, user_id: str) -> None:
    donation = session.get(Donation, donation_id)
    if donation is None:
        logger.debug("Donation %s not found, nothing to delete", donation_id)
        return

    # Line items go with their donation
    for line in list_donation_items(session, donation_id):
        session.delete(line)
    session.flush()

    session.delete(donation)
    _add_activity(session, "delete", DONATION, donation_id, f"Deleted donation from {donation.donor_name}", user_id)
    session.commit()
    logger.info("Deleted donation %s", donation_id)


def list_donation_items(session: Session, donation_id: int) -> List[DonationItem]:
    query = select(DonationItem).where(DonationItem.donation_id == donation_id).order_by(DonationItem.id)
    return list(session.exec(query).all())


def create_donation_item(session: Session, donation_id: int, item_in: DonationItemCreate) -> DonationItem:
    line = DonationItem(donation_id=donation_id, **item_in.model_dump())
    session.add(line)
    session.commit()
    session.refresh(line)
    return line


def list_distribution_events(
    session: Session,
    status: Optional[str] = None,
    date_from: Optional[datetime] = None,
    date_to: Optional[datetime] = None,
) -> List[DistributionEvent]:
    conditions = []
    if status and status != "all":
        conditions.append(DistributionEvent.status == status)
    if date_from is not None:
        conditions.append(col(DistributionEvent.event_date) >= date_from)
    if date_to is not None:
        conditions.append(col(DistributionEvent.event_date) <= date_to)

    query = select(DistributionEvent)
    if conditions:
        query = query.where(and_(*conditions))
    query = query.order_by(col(DistributionEvent.event_date).desc(), col(DistributionEvent.id).desc())
    return list(session.exec(query).all())


def get_distribution_event(session: Session, event_id: int) -> Optional[DistributionEvent]:
    return session.get(DistributionEvent, event_id)


def create_distribution_event(
    session: Session,
    event_in: DistributionEventCreate,
    user_id: str,
) -> DistributionEvent:
    event = DistributionEvent(**event_in.model_dump(exclude_none=True), created_by=user_id)
    session.add(event)
    session.flush()

    _add_activity(
        session,
        "create",
        DISTRIBUTION_EVENT,
        event.id,
        f"Scheduled distribution event: {event.name}",
        user_id,
    )
    session.commit()
    session.refresh(event)
    logger.info("Created distribution event %s", event.id)
    return event


def update_distribution_event(
    session: Session,
    event_id: int,
    event_in: DistributionEventUpdate,
    user_id: str,
) -> Optional[DistributionEvent]:
    event = session.get(DistributionEvent, event_id)
    if event is None:
        return None

    event.sqlmodel_update(event_in.model_dump(exclude_unset=True))
    session.add(event)

    _add_activity(session, "update", DISTRIBUTION_EVENT, event_id, f"Updated distribution event: {event.name}", user_id)
    session.commit()
    session.refresh(event)
    logger.info("Updated distribution event %s", event_id)
    return event


def delete_distribution_event(session: Session, event_id: int, user_id: str) -> None:
    event = session.get(DistributionEvent, event_id)
    if event is None:
        logger.debug("Distribution event %s not found, nothing to delete", event_id)
        return

    for line in list_distribution_items(session, event_id):
        session.delete(line)
    session.flush()

    session.delete(event)
    _add_activity(session, "delete", DISTRIBUTION_EVENT, event_id, f"Deleted distribution event: {event.name}", user_id)
    session.commit()
    logger.info("Deleted distribution event %s", event_id)


def list_distribution_items(session: Session, event_id: int) -> List[DistributionItem]:
    query = (
        select(DistributionItem)
        .where(DistributionItem.distribution_event_id == event_id)
        .order_by(DistributionItem.id)
    )
    return list(session.exec(query).all())


def create_distribution_item(
    session: Session,
    event_id: int,
    item_in: DistributionItemCreate,
) -> DistributionItem:
    line = DistributionItem(distribution_event_id=event_id, **item_in.model_dump())
    session.add(line)
    session.commit()
    session.refresh(line)
    return line
