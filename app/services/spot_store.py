# app/services/spot_store.py
"""
Row-level access to the spots table.
No commits here — callers own the transaction.
"""

from typing import Iterable, Optional
from sqlalchemy.orm import Session
from app.models.enums import Segment, SpotState
from app.models.spot import Spot


def list_spots(db: Session, lot_id: int, segment: Optional[Segment] = None) -> list:
    q = db.query(Spot).filter(Spot.lot_id == lot_id)
    if segment is not None:
        q = q.filter(Spot.segment == segment)
    return q.order_by(Spot.number).all()


def list_numbers(db: Session, lot_id: int) -> list:
    rows = db.query(Spot.number).filter(Spot.lot_id == lot_id).all()
    return [r[0] for r in rows]


def get_spot(db: Session, lot_id: int, number: int) -> Optional[Spot]:
    return db.query(Spot).filter(Spot.lot_id == lot_id, Spot.number == number).first()


def zone_in_use(db: Session, lot_id: int, zone_name: str) -> bool:
    return db.query(Spot.id).filter(Spot.lot_id == lot_id, Spot.zone == zone_name).first() is not None


def bulk_insert(db: Session, lot_id: int, numbers: Iterable[int], segment: Segment,
                zone: Optional[str] = None, zone_id: Optional[int] = None) -> list:
    spots = [
        Spot(lot_id=lot_id, number=n, segment=segment, state=SpotState.FREE,
             zone=zone, zone_id=zone_id)
        for n in numbers
    ]
    db.add_all(spots)
    db.flush()
    return spots


def bulk_delete(db: Session, lot_id: int, numbers: list) -> int:
    if not numbers:
        return 0
    return (
        db.query(Spot)
        .filter(Spot.lot_id == lot_id, Spot.number.in_(numbers))
        .delete(synchronize_session=False)
    )


def set_state(db: Session, lot_id: int, number: int, state: SpotState) -> int:
    """Returns the number of rows touched (0 when the spot no longer exists)."""
    return (
        db.query(Spot)
        .filter(Spot.lot_id == lot_id, Spot.number == number)
        .update({Spot.state: state}, synchronize_session=False)
    )
