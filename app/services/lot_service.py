# app/services/lot_service.py
"""Lot lookup shared by every inventory operation."""

from sqlalchemy.orm import Session
from app.exceptions import InvalidLot
from app.models.parking_lot import ParkingLot


def get_lot(db: Session, lot_id: int, lock: bool = False) -> ParkingLot:
    """
    Load a lot or raise InvalidLot.
    lock=True takes a row lock (SELECT ... FOR UPDATE) that serialises
    numbering writers on the same lot; SQLite ignores it.
    """
    q = db.query(ParkingLot).filter(ParkingLot.id == lot_id)
    if lock:
        q = q.with_for_update()
    lot = q.first()
    if lot is None:
        raise InvalidLot(lot_id)
    return lot


def bump_high_water(lot: ParkingLot, numbers: list):
    if numbers:
        lot.last_spot_number = max(lot.last_spot_number or 0, max(numbers))
