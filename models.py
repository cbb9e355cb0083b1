from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Optional

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel


def utcnow() -> datetime:
    """
    Current UTC time as a naive datetime, the way it is stored.
    Datetime columns are declared as plain (timezone-less) DateTime.
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


class User(SQLModel, table=True):
    # Subject id issued by the identity provider
    id: str = Field(primary_key=True)
    email: Optional[str] = Field(default=None, unique=True)
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_image_url: Optional[str] = None
    role: str = "volunteer"  # volunteer | admin
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime)


class InventoryItem(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    created_by: Optional[str] = Field(default=None, foreign_key="user.id")

    name: str = Field(max_length=255)
    category: str = Field(max_length=100, index=True)
    quantity: int = 0
    unit: str = Field(max_length=50)
    expiry_date: Optional[date] = None
    low_stock_threshold: int = 5
    notes: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime)


class Donation(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    created_by: Optional[str] = Field(default=None, foreign_key="user.id")

    donor_name: str = Field(max_length=255)
    donor_email: Optional[str] = Field(default=None, max_length=255)
    donor_phone: Optional[str] = Field(default=None, max_length=50)
    donation_type: str = Field(max_length=100)  # food | monetary | other
    description: Optional[str] = None
    value: Optional[Decimal] = Field(default=None, max_digits=10, decimal_places=2)
    donation_date: datetime = Field(default_factory=utcnow, sa_type=DateTime, index=True)
    notes: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime)


class DonationItem(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    donation_id: int = Field(foreign_key="donation.id", index=True)
    inventory_item_id: int = Field(foreign_key="inventoryitem.id")

    quantity: int
    expiry_date: Optional[date] = None


class DistributionEvent(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    created_by: Optional[str] = Field(default=None, foreign_key="user.id")

    name: str = Field(max_length=255)
    description: Optional[str] = None
    event_date: datetime = Field(sa_type=DateTime, index=True)
    location: Optional[str] = Field(default=None, max_length=255)
    max_families: Optional[int] = None
    registered_families: int = 0
    status: str = Field(default="scheduled", max_length=50)  # scheduled | active | completed | cancelled
    notes: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime)


class DistributionItem(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    distribution_event_id: int = Field(foreign_key="distributionevent.id", index=True)
    inventory_item_id: int = Field(foreign_key="inventoryitem.id")

    quantity_planned: int
    quantity_distributed: int = 0


class ActivityLog(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    created_by: Optional[str] = Field(default=None, foreign_key="user.id")

    action: str = Field(max_length=100)  # create | update | delete
    entity_type: str = Field(max_length=50)
    entity_id: int
    description: str
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime, index=True)
