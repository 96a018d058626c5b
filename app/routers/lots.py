# app/routers/lots.py
"""Parking lots — create + read endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.database import get_db
from app.models.parking_lot import ParkingLot
from app.schemas.lot import LotCreate, LotOut
from app.services.lot_service import get_lot
from app.utils.logger import get_logger

router = APIRouter()
logger = get_logger(__name__)


@router.post("/lots", response_model=LotOut, status_code=201, summary="Register a parking lot")
def create_lot(body: LotCreate, db: Session = Depends(get_db)):
    lot = ParkingLot(name=body.name, capacity=0, last_spot_number=0)
    db.add(lot)
    db.commit()
    db.refresh(lot)
    logger.info(f"[LOTS] Lot {lot.id} '{lot.name}' registered")
    return lot


@router.get("/lots", response_model=list[LotOut], summary="List parking lots")
def list_lots(db: Session = Depends(get_db)):
    return db.query(ParkingLot).order_by(ParkingLot.id).all()


@router.get("/lots/{lot_id}", response_model=LotOut, summary="Get a parking lot")
def read_lot(lot_id: int, db: Session = Depends(get_db)):
    return get_lot(db, lot_id)
