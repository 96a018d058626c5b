# app/services/occupation_store.py
"""
Read-mostly access to the occupations table.
The only write is detach_spot(), used when a spot row is removed.
"""

from sqlalchemy.orm import Session
from app.models.occupation import Occupation


def open_occupations(db: Session, lot_id: int) -> list:
    """Open occupations that are parked on a specific spot."""
    return (
        db.query(Occupation)
        .filter(
            Occupation.lot_id == lot_id,
            Occupation.exit_time == None,        # noqa: E711
            Occupation.spot_number != None,      # noqa: E711
        )
        .all()
    )


def occupied_numbers(db: Session, lot_id: int) -> set:
    return {o.spot_number for o in open_occupations(db, lot_id)}


def open_occupation_for_spot(db: Session, lot_id: int, number: int):
    return (
        db.query(Occupation)
        .filter(
            Occupation.lot_id == lot_id,
            Occupation.spot_number == number,
            Occupation.exit_time == None,        # noqa: E711
        )
        .first()
    )


def detach_spot(db: Session, lot_id: int, numbers: list) -> int:
    """Null the spot reference of closed occupations; history rows are kept."""
    if not numbers:
        return 0
    return (
        db.query(Occupation)
        .filter(
            Occupation.lot_id == lot_id,
            Occupation.spot_number.in_(numbers),
            Occupation.exit_time != None,        # noqa: E711
        )
        .update({Occupation.spot_number: None}, synchronize_session=False)
    )
