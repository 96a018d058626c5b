# app/services/subscription_service.py
"""Subscription listing with remaining days and a display status."""

import enum
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from app.config import settings
from app.services import subscription_store
from app.services.lot_service import get_lot


class DisplayStatus(str, enum.Enum):
    ACTIVE = "Active"
    EXPIRING_SOON = "ExpiringSoon"
    EXPIRED = "Expired"


@dataclass
class SubscriptionSummary:
    number: int
    holder: str
    spot_number: Optional[int]
    validity_start: datetime
    validity_end: datetime
    state: str
    allowed_vehicles: list
    days_remaining: int
    status: str


def days_until(end: datetime, now: datetime) -> int:
    """Whole calendar days from today to the end date (negative once past)."""
    return (end.date() - now.date()).days


def display_status(days: int, soon: int) -> DisplayStatus:
    if days < 0:
        return DisplayStatus.EXPIRED
    if days <= soon:
        return DisplayStatus.EXPIRING_SOON
    return DisplayStatus.ACTIVE


def list_subscriptions(db: Session, lot_id: int, include_expired: bool = False,
                       now: Optional[datetime] = None) -> list:
    now = now or datetime.utcnow()
    get_lot(db, lot_id)
    summaries = []
    for sub in subscription_store.list_subscriptions(db, lot_id, include_inactive=include_expired):
        days = days_until(sub.validity_end, now)
        summaries.append(SubscriptionSummary(
            number=sub.number,
            holder=sub.holder,
            spot_number=sub.spot_number,
            validity_start=sub.validity_start,
            validity_end=sub.validity_end,
            state=sub.state.value,
            allowed_vehicles=sorted(sub.allowed_vehicles),
            days_remaining=max(days, 0),
            status=display_status(days, settings.SUBSCRIPTION_EXPIRING_SOON_DAYS).value,
        ))
    return summaries
