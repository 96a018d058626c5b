# app/routers/status.py
"""Status — occupancy-aware per-spot view (ProjectStatus)."""

from dataclasses import asdict
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.database import get_db
from app.schemas.status import StatusOut
from app.services.status_service import project_status

router = APIRouter()


@router.get("/lots/{lot_id}/status", response_model=StatusOut, summary="Live spot status")
def read_status(lot_id: int, db: Session = Depends(get_db)):
    """
    Expires overdue subscriptions first, then reconciles stored spot state,
    open occupations and in-force subscriptions.
    `mode` is `simple` (flat spot list) when no spot has a zone, else `zones`.
    """
    return asdict(project_status(db, lot_id))
