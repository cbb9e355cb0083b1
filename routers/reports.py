from fastapi import APIRouter, Depends

import stats
from db import SessionDep
from schemas import ReportSummary
from .auth import get_current_user

router = APIRouter(
    prefix="/api/reports",
    tags=["reports"],
    dependencies=[Depends(get_current_user)],
)


@router.get("/summary", response_model=ReportSummary)
def report_summary(session: SessionDep):
    """
    Inventory by category, donations by type and donations per month.
    """
    return stats.get_report_summary(session)
