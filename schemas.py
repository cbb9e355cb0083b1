from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Annotated, List, Literal, Optional, get_args

from pydantic import AfterValidator, BaseModel, ConfigDict, EmailStr, Field, field_validator


Category = Literal[
    "Canned Goods",
    "Dry Goods",
    "Fresh Produce",
    "Dairy",
    "Meat & Protein",
    "Bakery",
]
DonationType = Literal["food", "monetary", "other"]
EventStatus = Literal["scheduled", "active", "completed", "cancelled"]

CATEGORIES = get_args(Category)


def naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    # Stored datetimes are naive UTC
    if value is not None and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def _reject_null(value):
    if value is None:
        raise ValueError("Field may not be null")
    return value


UTCDatetime = Annotated[datetime, AfterValidator(naive_utc)]


class InventoryItemCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    category: Category
    quantity: int = Field(default=0, ge=0)
    unit: str = Field(min_length=1, max_length=50)
    expiry_date: Optional[date] = None
    low_stock_threshold: int = Field(default=5, ge=0)
    notes: Optional[str] = None


class InventoryItemUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    category: Optional[Category] = None
    quantity: Optional[int] = Field(default=None, ge=0)
    unit: Optional[str] = Field(default=None, min_length=1, max_length=50)
    expiry_date: Optional[date] = None
    low_stock_threshold: Optional[int] = Field(default=None, ge=0)
    notes: Optional[str] = None

    @field_validator("name", "category", "quantity", "unit", "low_stock_threshold")
    @classmethod
    def not_null(cls, value):
        return _reject_null(value)


class InventoryItemRead(BaseModel):
    id: int
    name: str
    category: str
    quantity: int
    unit: str
    expiry_date: Optional[date]
    low_stock_threshold: int
    notes: Optional[str]
    created_at: datetime
    updated_at: datetime
    created_by: Optional[str]
    status: str


class DonationCreate(BaseModel):
    donor_name: str = Field(min_length=1, max_length=255)
    donor_email: Optional[EmailStr] = None
    donor_phone: Optional[str] = Field(default=None, max_length=50)
    donation_type: DonationType
    description: Optional[str] = None
    value: Optional[Decimal] = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    donation_date: Optional[UTCDatetime] = None
    notes: Optional[str] = None


class DonationUpdate(BaseModel):
    donor_name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    donor_email: Optional[EmailStr] = None
    donor_phone: Optional[str] = Field(default=None, max_length=50)
    donation_type: Optional[DonationType] = None
    description: Optional[str] = None
    value: Optional[Decimal] = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    donation_date: Optional[UTCDatetime] = None
    notes: Optional[str] = None

    @field_validator("donor_name", "donation_type", "donation_date")
    @classmethod
    def not_null(cls, value):
        return _reject_null(value)


class DonationItemCreate(BaseModel):
    inventory_item_id: int
    quantity: int = Field(gt=0)
    expiry_date: Optional[date] = None


class DistributionEventCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    event_date: UTCDatetime
    location: Optional[str] = Field(default=None, max_length=255)
    max_families: Optional[int] = Field(default=None, ge=0)
    registered_families: int = Field(default=0, ge=0)
    status: EventStatus = "scheduled"
    notes: Optional[str] = None


class DistributionEventUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    event_date: Optional[UTCDatetime] = None
    location: Optional[str] = Field(default=None, max_length=255)
    max_families: Optional[int] = Field(default=None, ge=0)
    registered_families: Optional[int] = Field(default=None, ge=0)
    status: Optional[EventStatus] = None
    notes: Optional[str] = None

    @field_validator("name", "event_date", "registered_families", "status")
    @classmethod
    def not_null(cls, value):
        return _reject_null(value)


class DistributionItemCreate(BaseModel):
    inventory_item_id: int
    quantity_planned: int = Field(ge=0)
    quantity_distributed: int = Field(default=0, ge=0)


class IdentityClaims(BaseModel):
    """Claims the identity provider signs for a logged-in user."""

    sub: str = Field(min_length=1)
    email: Optional[EmailStr] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_image_url: Optional[str] = None


class LoginCallback(BaseModel):
    token: str


class UserRead(BaseModel):
    id: str
    email: Optional[str]
    first_name: Optional[str]
    last_name: Optional[str]
    profile_image_url: Optional[str]
    role: str

    model_config = ConfigDict(from_attributes=True)


class Alert(BaseModel):
    id: int
    type: Literal["low_stock", "expiring"]
    title: str
    description: str
    priority: Literal["high", "medium"]


class DashboardStats(BaseModel):
    total_items: int
    monthly_donations: int
    families_served: int
    upcoming_events: int
    low_stock_count: int
    expiring_count: int


class CategoryBreakdown(BaseModel):
    category: str
    items: int
    quantity: int


class DonationTypeBreakdown(BaseModel):
    donation_type: str
    count: int
    total_value: Decimal


class MonthlyDonationCount(BaseModel):
    month: str  # YYYY-MM
    count: int


class ReportSummary(BaseModel):
    inventory_by_category: List[CategoryBreakdown]
    donations_by_type: List[DonationTypeBreakdown]
    monthly_donations: List[MonthlyDonationCount]
