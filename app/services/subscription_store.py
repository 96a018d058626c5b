# app/services/subscription_store.py
"""Row-level access to the subscriptions table."""

from datetime import datetime
from sqlalchemy.orm import Session
from app.models.enums import SubscriptionState
from app.models.subscription import Subscription


def list_subscriptions(db: Session, lot_id: int, include_inactive: bool = False) -> list:
    q = db.query(Subscription).filter(Subscription.lot_id == lot_id)
    if not include_inactive:
        q = q.filter(Subscription.state == SubscriptionState.ACTIVE)
    return q.order_by(Subscription.validity_end.asc(), Subscription.number.asc()).all()


def overdue_active(db: Session, lot_id: int, now: datetime) -> list:
    """Still marked active although their window closed before `now`."""
    return (
        db.query(Subscription)
        .filter(
            Subscription.lot_id == lot_id,
            Subscription.state == SubscriptionState.ACTIVE,
            Subscription.validity_end < now,
        )
        .order_by(Subscription.number)
        .all()
    )


def in_force_with_spot(db: Session, lot_id: int, now: datetime) -> list:
    return (
        db.query(Subscription)
        .filter(
            Subscription.lot_id == lot_id,
            Subscription.state == SubscriptionState.ACTIVE,
            Subscription.validity_start <= now,
            Subscription.validity_end >= now,
            Subscription.spot_number != None,    # noqa: E711
        )
        .all()
    )


def set_state(db: Session, lot_id: int, number: int, state: SubscriptionState) -> int:
    return (
        db.query(Subscription)
        .filter(Subscription.lot_id == lot_id, Subscription.number == number)
        .update({Subscription.state: state}, synchronize_session=False)
    )
