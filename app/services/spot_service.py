# app/services/spot_service.py
"""
Manual spot state changes from the operator console.
Occupancy is the source of truth: an occupied spot cannot be blocked, and
a spot cannot be marked occupied without a vehicle on it.
"""

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.exceptions import InvalidStateTransition, SpotNotFound, StorageFailure, ValidationError
from app.models.enums import SpotState
from app.services import occupation_store, spot_store
from app.services.lot_service import get_lot
from app.utils.logger import get_logger

logger = get_logger(__name__)

SETTABLE_STATES = {SpotState.FREE, SpotState.OCCUPIED, SpotState.RESERVED, SpotState.MAINTENANCE}


def update_spot_state(db: Session, lot_id: int, number: int, state: SpotState, reason: str = None):
    if state not in SETTABLE_STATES:
        raise ValidationError(f"State {state.value} cannot be set manually")
    get_lot(db, lot_id)
    spot = spot_store.get_spot(db, lot_id, number)
    if spot is None:
        raise SpotNotFound(lot_id, number)

    occupation = occupation_store.open_occupation_for_spot(db, lot_id, number)
    if occupation is not None and state == SpotState.MAINTENANCE:
        raise InvalidStateTransition(
            f"Spot {number} is occupied by vehicle {occupation.plate} and cannot be blocked"
        )
    if occupation is None and state == SpotState.OCCUPIED:
        raise InvalidStateTransition(f"Spot {number} has no vehicle and cannot be marked occupied")

    previous = spot.state
    spot.state = state
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise StorageFailure(f"Could not update spot {number}", e)

    logger.info(f"[SPOTS] Lot {lot_id}: spot {number} {previous.value} → {state.value}"
                + (f" ({reason})" if reason else ""))
    db.refresh(spot)
    return spot, previous
