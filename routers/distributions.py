from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Response

import storage
from db import SessionDep
from models import DistributionEvent, DistributionItem
from schemas import DistributionEventCreate, DistributionEventUpdate, DistributionItemCreate, naive_utc
from .auth import CurrentUserDep, get_current_user

router = APIRouter(
    prefix="/api/distributions",
    tags=["distributions"],
    dependencies=[Depends(get_current_user)],
)


def _get_event_or_404(session: SessionDep, event_id: int) -> DistributionEvent:
    event = storage.get_distribution_event(session, event_id)
    if event is None:
        raise HTTPException(status_code=404, detail="Distribution event not found")
    return event


@router.get("", response_model=List[DistributionEvent])
def list_distribution_events(
    session: SessionDep,
    status: Optional[str] = None,
    date_from: Optional[datetime] = None,
    date_to: Optional[datetime] = None,
):
    """
    List distribution events, latest first, optionally filtered by status and date range.
    """
    return storage.list_distribution_events(
        session,
        status=status,
        date_from=naive_utc(date_from),
        date_to=naive_utc(date_to),
    )


@router.get("/{event_id}", response_model=DistributionEvent)
def get_distribution_event(event_id: int, session: SessionDep):
    return _get_event_or_404(session, event_id)


@router.post("", response_model=DistributionEvent, status_code=201)
def create_distribution_event(
    event_in: DistributionEventCreate,
    session: SessionDep,
    current: CurrentUserDep,
):
    return storage.create_distribution_event(session, event_in, current.id)


@router.put("/{event_id}", response_model=DistributionEvent)
def update_distribution_event(
    event_id: int,
    event_in: DistributionEventUpdate,
    session: SessionDep,
    current: CurrentUserDep,
):
    event = storage.update_distribution_event(session, event_id, event_in, current.id)
    if event is None:
        raise HTTPException(status_code=404, detail="Distribution event not found")
    return event


@router.delete("/{event_id}", status_code=204)
def delete_distribution_event(event_id: int, session: SessionDep, current: CurrentUserDep):
    storage.delete_distribution_event(session, event_id, current.id)
    return Response(status_code=204)


@router.get("/{event_id}/items", response_model=List[DistributionItem])
def list_distribution_items(event_id: int, session: SessionDep):
    _get_event_or_404(session, event_id)
    return storage.list_distribution_items(session, event_id)


@router.post("/{event_id}/items", response_model=DistributionItem, status_code=201)
def create_distribution_item(event_id: int, item_in: DistributionItemCreate, session: SessionDep):
    """
    Plan which inventory goes out at an event.
    """
    _get_event_or_404(session, event_id)

    if storage.get_inventory_item(session, item_in.inventory_item_id) is None:
        raise HTTPException(status_code=400, detail="Inventory item not found")

    return storage.create_distribution_item(session, event_id, item_in)
