# app/routers/spots.py
"""Spots — list + manual state change."""

from typing import Optional
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.database import get_db
from app.exceptions import ValidationError
from app.models.enums import Segment
from app.schemas.spot import SpotOut, SpotStateChanged, SpotStateUpdate
from app.services import spot_store
from app.services.lot_service import get_lot
from app.services.spot_service import update_spot_state

router = APIRouter()


@router.get("/lots/{lot_id}/spots", response_model=list[SpotOut], summary="List spots (stored state)")
def list_spots(lot_id: int, segment: Optional[str] = None, zone: Optional[str] = None,
               db: Session = Depends(get_db)):
    """Filter by segment (Car | Motorcycle | LightTruck) and/or zone name."""
    try:
        seg = Segment.from_label(segment) if segment else None
    except ValueError as e:
        raise ValidationError(str(e))
    get_lot(db, lot_id)
    spots = spot_store.list_spots(db, lot_id, seg)
    if zone:
        spots = [s for s in spots if s.zone == zone]
    return spots


@router.patch("/lots/{lot_id}/spots/{number}/state", response_model=SpotStateChanged,
              summary="Change a spot's stored state")
def change_spot_state(lot_id: int, number: int, body: SpotStateUpdate, db: Session = Depends(get_db)):
    spot, previous = update_spot_state(db, lot_id, number, body.state, body.reason)
    return SpotStateChanged(spot=SpotOut.model_validate(spot), previous_state=previous)
