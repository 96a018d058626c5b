# app/services/expiry_service.py
"""
Subscription expiry sweep.
Runs lazily before every status read rather than on a timer.

For each subscription still marked active after its validity_end:
  - mark it expired
  - free its spot, unless a vehicle is parked there right now
    (occupancy wins; nobody is evicted)

Each subscription is committed on its own. A failure is recorded and the
sweep moves on; the row is still active and will be picked up next time.
"""

import enum
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.models.enums import SpotState, SubscriptionState
from app.services import occupation_store, spot_store, subscription_store
from app.services.lot_service import get_lot
from app.utils.logger import get_logger

logger = get_logger(__name__)


class SweepAction(str, enum.Enum):
    RELEASED = "released"            # spot set back to Free
    KEPT_OCCUPIED = "kept_occupied"  # vehicle present, spot left alone
    NO_SPOT = "no_spot"              # no spot assigned, or spot no longer exists
    ERROR = "error"


@dataclass
class SweepOutcome:
    subscription_number: int
    spot_number: Optional[int]
    action: SweepAction
    success: bool
    reason: Optional[str] = None


@dataclass
class SweepReport:
    lot_id: int
    outcomes: list = field(default_factory=list)

    @property
    def processed(self) -> int:
        return len(self.outcomes)

    @property
    def succeeded(self) -> int:
        return sum(1 for o in self.outcomes if o.success)

    @property
    def failures(self) -> list:
        return [o for o in self.outcomes if not o.success]


def sweep_expired(db: Session, lot_id: int, now: Optional[datetime] = None) -> SweepReport:
    now = now or datetime.utcnow()
    get_lot(db, lot_id)
    overdue = [(s.number, s.spot_number) for s in subscription_store.overdue_active(db, lot_id, now)]

    report = SweepReport(lot_id=lot_id)
    for number, spot_number in overdue:
        report.outcomes.append(_expire_one(db, lot_id, number, spot_number))

    if report.processed:
        logger.info(f"[SWEEP] Lot {lot_id}: {report.succeeded}/{report.processed} expired subscriptions closed, "
                    f"{len(report.failures)} failures")
    return report


def _expire_one(db: Session, lot_id: int, number: int, spot_number: Optional[int]) -> SweepOutcome:
    try:
        occupation = None
        if spot_number is not None:
            occupation = occupation_store.open_occupation_for_spot(db, lot_id, spot_number)

        subscription_store.set_state(db, lot_id, number, SubscriptionState.EXPIRED)

        if spot_number is None:
            action = SweepAction.NO_SPOT
        elif occupation is not None:
            action = SweepAction.KEPT_OCCUPIED
        elif spot_store.set_state(db, lot_id, spot_number, SpotState.FREE):
            action = SweepAction.RELEASED
        else:
            action = SweepAction.NO_SPOT

        plate = occupation.plate if occupation is not None else None
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.warning(f"[SWEEP] Lot {lot_id}: subscription #{number} could not be expired: {e}")
        return SweepOutcome(number, spot_number, SweepAction.ERROR, success=False, reason=str(e))

    if action == SweepAction.KEPT_OCCUPIED:
        logger.info(f"[SWEEP] Subscription #{number} expired — spot {spot_number} still occupied "
                    f"by {plate}, state left unchanged")
    else:
        logger.info(f"[SWEEP] Subscription #{number} expired — {action.value} (spot {spot_number})")
    return SweepOutcome(number, spot_number, action, success=True)
