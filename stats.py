"""Dashboard aggregates, alerts and report breakdowns."""
from collections import Counter
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import func
from sqlmodel import Session, col, select

import storage
from inventory_status import build_alerts, expiry_cutoff
from models import DistributionEvent, Donation, InventoryItem, utcnow
from schemas import (
    Alert,
    CategoryBreakdown,
    DashboardStats,
    DonationTypeBreakdown,
    MonthlyDonationCount,
    ReportSummary,
)

CENTS = Decimal("0.01")


def start_of_month(now: datetime) -> datetime:
    return now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def _count(session: Session, column, *conditions) -> int:
    query = select(func.count(column))
    if conditions:
        query = query.where(*conditions)
    return session.exec(query).one()


def get_dashboard_stats(session: Session, now: Optional[datetime] = None) -> DashboardStats:
    """
    Six independent counts, each read on its own.
    Month boundaries and "now" are UTC.
    """
    now = now or utcnow()
    month_start = start_of_month(now)

    families_served = session.exec(
        select(func.coalesce(func.sum(DistributionEvent.registered_families), 0)).where(
            col(DistributionEvent.event_date) >= month_start,
            DistributionEvent.status == "completed",
        )
    ).one()

    return DashboardStats(
        total_items=_count(session, InventoryItem.id),
        monthly_donations=_count(
            session,
            Donation.id,
            col(Donation.donation_date) >= month_start,
        ),
        families_served=int(families_served),
        upcoming_events=_count(
            session,
            DistributionEvent.id,
            col(DistributionEvent.event_date) >= now,
            DistributionEvent.status == "scheduled",
        ),
        low_stock_count=_count(session, InventoryItem.id, storage.low_stock_clause()),
        expiring_count=_count(
            session,
            InventoryItem.id,
            storage.expiring_clause(expiry_cutoff(now.date())),
        ),
    )


def get_alerts(session: Session, today: Optional[date] = None) -> List[Alert]:
    return build_alerts(
        storage.get_low_stock_items(session),
        storage.get_expiring_items(session, today=today),
    )


def get_report_summary(session: Session) -> ReportSummary:
    category_rows = session.exec(
        select(
            InventoryItem.category,
            func.count(InventoryItem.id),
            func.coalesce(func.sum(InventoryItem.quantity), 0),
        )
        .group_by(InventoryItem.category)
        .order_by(InventoryItem.category)
    ).all()

    type_rows = session.exec(
        select(
            Donation.donation_type,
            func.count(Donation.id),
            func.sum(Donation.value),
        )
        .group_by(Donation.donation_type)
        .order_by(Donation.donation_type)
    ).all()

    # Grouping by month is dialect specific, so it is done here
    months = Counter(
        donation_date.strftime("%Y-%m")
        for donation_date in session.exec(select(Donation.donation_date)).all()
    )

    return ReportSummary(
        inventory_by_category=[
            CategoryBreakdown(category=category, items=items, quantity=int(quantity))
            for category, items, quantity in category_rows
        ],
        donations_by_type=[
            DonationTypeBreakdown(
                donation_type=donation_type,
                count=count,
                total_value=Decimal(str(total or 0)).quantize(CENTS),
            )
            for donation_type, count, total in type_rows
        ],
        monthly_donations=[
            MonthlyDonationCount(month=month, count=count)
            for month, count in sorted(months.items())
        ],
    )
