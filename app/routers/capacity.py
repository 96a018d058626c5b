# app/routers/capacity.py
"""Capacity — per-segment spot counts (read) + SyncCapacity (write)."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.database import get_db
from app.models.enums import SEGMENT_ORDER, Segment
from app.schemas.capacity import CapacityOut, CapacitySyncOut, CapacityTargets
from app.services.capacity_service import get_capacity, sync_capacity

router = APIRouter()


def _by_label(counts: dict) -> dict:
    return {seg.label: counts[seg] for seg in SEGMENT_ORDER if seg in counts}


@router.get("/lots/{lot_id}/capacity", response_model=CapacityOut, summary="Spot count per segment")
def read_capacity(lot_id: int, db: Session = Depends(get_db)):
    return CapacityOut(**_by_label(get_capacity(db, lot_id)))


@router.put("/lots/{lot_id}/capacity", response_model=CapacitySyncOut,
            summary="Grow or shrink spots to the target count per segment")
def update_capacity(lot_id: int, body: CapacityTargets, db: Session = Depends(get_db)):
    """
    Occupied spots are never removed. If any segment cannot shrink, nothing
    changes and the response (409) lists the blocking spot numbers per segment.
    """
    targets = {Segment.from_label(label): value
               for label, value in body.model_dump().items() if value is not None}
    result = sync_capacity(db, lot_id, targets)
    return CapacitySyncOut(
        lot_id=result.lot_id,
        applied_targets=CapacityOut(**_by_label(result.applied_targets)),
        created=_by_label(result.created),
        removed=_by_label(result.removed),
        detached_occupations=result.detached_occupations,
    )
