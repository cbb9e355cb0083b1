from typing import List

from fastapi import APIRouter, Depends, Query

import stats
import storage
from db import SessionDep
from models import ActivityLog
from schemas import Alert, DashboardStats
from .auth import get_current_user

router = APIRouter(
    prefix="/api/dashboard",
    tags=["dashboard"],
    dependencies=[Depends(get_current_user)],
)


@router.get("/stats", response_model=DashboardStats)
def dashboard_stats(session: SessionDep):
    return stats.get_dashboard_stats(session)


@router.get("/recent-activity", response_model=List[ActivityLog])
def recent_activity(session: SessionDep, limit: int = Query(default=10, ge=1, le=100)):
    """
    Latest activity log entries, newest first.
    """
    return storage.get_recent_activity(session, limit)


@router.get("/alerts", response_model=List[Alert])
def alerts(session: SessionDep):
    """
    Low-stock and expiring-soon alerts. An item may appear in both lists.
    """
    return stats.get_alerts(session)
