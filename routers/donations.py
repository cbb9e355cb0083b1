from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Response

import storage
from db import SessionDep
from models import Donation, DonationItem
from schemas import DonationCreate, DonationItemCreate, DonationUpdate, naive_utc
from .auth import CurrentUserDep, get_current_user

router = APIRouter(
    prefix="/api/donations",
    tags=["donations"],
    dependencies=[Depends(get_current_user)],
)


def _get_donation_or_404(session: SessionDep, donation_id: int) -> Donation:
    donation = storage.get_donation(session, donation_id)
    if donation is None:
        raise HTTPException(status_code=404, detail="Donation not found")
    return donation


@router.get("", response_model=List[Donation])
def list_donations(
    session: SessionDep,
    donation_type: Optional[str] = None,
    date_from: Optional[datetime] = None,
    date_to: Optional[datetime] = None,
):
    """
    List donations, newest first, optionally filtered by type and date range.
    """
    return storage.list_donations(
        session,
        donation_type=donation_type,
        date_from=naive_utc(date_from),
        date_to=naive_utc(date_to),
    )


@router.get("/{donation_id}", response_model=Donation)
def get_donation(donation_id: int, session: SessionDep):
    return _get_donation_or_404(session, donation_id)


@router.post("", response_model=Donation, status_code=201)
def create_donation(donation_in: DonationCreate, session: SessionDep, current: CurrentUserDep):
    return storage.create_donation(session, donation_in, current.id)


@router.put("/{donation_id}", response_model=Donation)
def update_donation(
    donation_id: int,
    donation_in: DonationUpdate,
    session: SessionDep,
    current: CurrentUserDep,
):
    donation = storage.update_donation(session, donation_id, donation_in, current.id)
    if donation is None:
        raise HTTPException(status_code=404, detail="Donation not found")
    return donation


@router.delete("/{donation_id}", status_code=204)
def delete_donation(donation_id: int, session: SessionDep, current: CurrentUserDep):
    storage.delete_donation(session, donation_id, current.id)
    return Response(status_code=204)


@router.get("/{donation_id}/items", response_model=List[DonationItem])
def list_donation_items(donation_id: int, session: SessionDep):
    _get_donation_or_404(session, donation_id)
    return storage.list_donation_items(session, donation_id)


@router.post("/{donation_id}/items", response_model=DonationItem, status_code=201)
def create_donation_item(donation_id: int, item_in: DonationItemCreate, session: SessionDep):
    """
    Break a food donation down into stock lines.
    """
    _get_donation_or_404(session, donation_id)

    if storage.get_inventory_item(session, item_in.inventory_item_id) is None:
        raise HTTPException(status_code=400, detail="Inventory item not found")

    return storage.create_donation_item(session, donation_id, item_in)
