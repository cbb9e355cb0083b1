from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Response

import storage
from db import SessionDep
from inventory_status import item_status, today_utc
from models import InventoryItem
from schemas import InventoryItemCreate, InventoryItemRead, InventoryItemUpdate
from .auth import CurrentUserDep, get_current_user

router = APIRouter(
    prefix="/api/inventory",
    tags=["inventory"],
    dependencies=[Depends(get_current_user)],
)


def _to_read(item: InventoryItem, today: Optional[date] = None) -> InventoryItemRead:
    return InventoryItemRead(**item.model_dump(), status=item_status(item, today))


@router.get("", response_model=List[InventoryItemRead])
def list_inventory(
    session: SessionDep,
    category: Optional[str] = None,
    search: Optional[str] = None,
    status: Optional[str] = None,
    sort_by: Optional[str] = None,
    sort_order: Optional[str] = None,
):
    """
    List inventory items, optionally filtered by category, search text and stock status.
    """
    today = today_utc()
    items = storage.list_inventory_items(
        session,
        category=category,
        search=search,
        status=status,
        sort_by=sort_by,
        sort_order=sort_order,
        today=today,
    )
    return [_to_read(item, today) for item in items]


@router.get("/{item_id}", response_model=InventoryItemRead)
def get_inventory_item(item_id: int, session: SessionDep):
    item = storage.get_inventory_item(session, item_id)
    if item is None:
        raise HTTPException(status_code=404, detail="Item not found")
    return _to_read(item)


@router.post("", response_model=InventoryItemRead, status_code=201)
def create_inventory_item(item_in: InventoryItemCreate, session: SessionDep, current: CurrentUserDep):
    item = storage.create_inventory_item(session, item_in, current.id)
    return _to_read(item)


@router.put("/{item_id}", response_model=InventoryItemRead)
def update_inventory_item(
    item_id: int,
    item_in: InventoryItemUpdate,
    session: SessionDep,
    current: CurrentUserDep,
):
    item = storage.update_inventory_item(session, item_id, item_in, current.id)
    if item is None:
        raise HTTPException(status_code=404, detail="Item not found")
    return _to_read(item)


@router.delete("/{item_id}", status_code=204)
def delete_inventory_item(item_id: int, session: SessionDep, current: CurrentUserDep):
    # Missing ids are accepted silently
    storage.delete_inventory_item(session, item_id, current.id)
    return Response(status_code=204)
