# app/routers/subscriptions.py
"""Subscriptions — listing + expiry sweep (SweepExpired)."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.database import get_db
from app.schemas.subscription import SubscriptionOut, SweepFailureOut, SweepOut, SweepOutcomeOut
from app.services.expiry_service import sweep_expired
from app.services.subscription_service import list_subscriptions

router = APIRouter()


@router.get("/lots/{lot_id}/subscriptions", response_model=list[SubscriptionOut],
            summary="Subscriptions ordered by end date")
def list_subscriptions_endpoint(lot_id: int, include_expired: bool = False, db: Session = Depends(get_db)):
    return list_subscriptions(db, lot_id, include_expired=include_expired)


@router.post("/lots/{lot_id}/subscriptions/sweep", response_model=SweepOut,
             summary="Expire overdue subscriptions now")
def sweep_endpoint(lot_id: int, db: Session = Depends(get_db)):
    """Individual failures are reported, never raised; they are retried on the next sweep."""
    report = sweep_expired(db, lot_id)
    return SweepOut(
        lot_id=report.lot_id,
        processed=report.processed,
        succeeded=report.succeeded,
        failures=[SweepFailureOut(subscription_number=o.subscription_number, reason=o.reason)
                  for o in report.failures],
        outcomes=[SweepOutcomeOut(subscription_number=o.subscription_number, spot_number=o.spot_number,
                                  action=o.action.value, success=o.success)
                  for o in report.outcomes],
    )
