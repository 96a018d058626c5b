# app/services/status_service.py
"""
Occupancy-aware status projection for operator displays.

Displayed state of a spot, first match wins:
  1. an open occupation points at it          → Occupied
  2. an in-force subscription points at it    → Subscribed
  3. otherwise                                → stored state

When several in-force subscriptions point at one spot (bad data), the one
with the latest validity_end is shown; ties go to the highest number.

The result is one of two shapes, decided once per call:
  simple — no spot has a zone: flat spot list + stats
  zones  — at least one zoned spot: stats grouped per zone × segment
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from app.config import settings
from app.models.enums import SEGMENT_ORDER, SpotState
from app.services import occupation_store, spot_store, subscription_store
from app.services.expiry_service import sweep_expired
from app.services.lot_service import get_lot
from app.utils.logger import get_logger

logger = get_logger(__name__)

MODE_SIMPLE = "simple"
MODE_ZONES = "zones"


@dataclass
class Stats:
    total: int = 0
    occupied: int = 0
    free: int = 0
    subscribed: int = 0
    reserved: int = 0
    maintenance: int = 0

    def add(self, state: SpotState):
        self.total += 1
        if state == SpotState.OCCUPIED:
            self.occupied += 1
        elif state == SpotState.FREE:
            self.free += 1
        elif state == SpotState.SUBSCRIBED:
            self.subscribed += 1
        elif state == SpotState.RESERVED:
            self.reserved += 1
        elif state == SpotState.MAINTENANCE:
            self.maintenance += 1
        else:
            raise ValueError(f"Unhandled spot state: {state!r}")


@dataclass
class SpotStatus:
    number: int
    segment: str
    zone: Optional[str]
    stored_state: SpotState
    state: SpotState
    plate: Optional[str] = None
    subscription_number: Optional[int] = None
    subscription_holder: Optional[str] = None
    subscription_end: Optional[datetime] = None


@dataclass
class SegmentView:
    stats: Stats = field(default_factory=Stats)
    spots: list = field(default_factory=list)


@dataclass
class ZoneView:
    name: Optional[str]
    stats: Stats = field(default_factory=Stats)
    per_segment: dict = field(default_factory=dict)


@dataclass
class SimpleStatus:
    lot_id: int
    stats: Stats
    per_segment: dict
    spots: list
    mode: str = MODE_SIMPLE


@dataclass
class ZoneStatus:
    lot_id: int
    stats: Stats
    per_segment: dict
    zones: list
    mode: str = MODE_ZONES


def pick_subscription(candidates: list):
    """Deterministic winner among in-force subscriptions sharing a spot."""
    return max(candidates, key=lambda s: (s.validity_end, s.number))


def subscriptions_by_spot(subscriptions: list) -> dict:
    grouped = {}
    for sub in subscriptions:
        grouped.setdefault(sub.spot_number, []).append(sub)
    resolved = {}
    for number, subs in grouped.items():
        if len(subs) > 1:
            logger.warning(f"[STATUS] Spot {number} has {len(subs)} in-force subscriptions "
                           f"{sorted(s.number for s in subs)}; showing the latest-ending one")
        resolved[number] = pick_subscription(subs)
    return resolved


def derive_spot_status(spot, occupation, subscription) -> SpotStatus:
    status = SpotStatus(
        number=spot.number,
        segment=spot.segment.label,
        zone=spot.zone or None,
        stored_state=spot.state,
        state=spot.state,
    )
    if subscription is not None:
        status.subscription_number = subscription.number
        status.subscription_holder = subscription.holder
        status.subscription_end = subscription.validity_end
    if occupation is not None:
        status.state = SpotState.OCCUPIED
        status.plate = occupation.plate
    elif subscription is not None:
        status.state = SpotState.SUBSCRIBED
    return status


def project_status(db: Session, lot_id: int, now: Optional[datetime] = None,
                   sweep: Optional[bool] = None):
    now = now or datetime.utcnow()
    get_lot(db, lot_id)

    if settings.SWEEP_ON_STATUS if sweep is None else sweep:
        try:
            sweep_expired(db, lot_id, now)
        except Exception as e:
            # Stale subscription data beats a broken read path
            db.rollback()
            logger.error(f"[STATUS] Lot {lot_id}: expiry sweep failed, continuing with current data: {e}",
                         exc_info=True)

    spots = spot_store.list_spots(db, lot_id)
    occupations = {o.spot_number: o for o in occupation_store.open_occupations(db, lot_id)}
    subscriptions = subscriptions_by_spot(subscription_store.in_force_with_spot(db, lot_id, now))

    statuses = [
        derive_spot_status(s, occupations.get(s.number), subscriptions.get(s.number))
        for s in spots
    ]
    return build_view(lot_id, statuses)


def build_view(lot_id: int, statuses: list):
    """Aggregate derived statuses into the simple or zoned shape."""
    stats = Stats()
    per_segment = {seg.label: Stats() for seg in SEGMENT_ORDER}
    for st in statuses:
        stats.add(st.state)
        per_segment[st.segment].add(st.state)

    if not any(st.zone for st in statuses):
        return SimpleStatus(lot_id=lot_id, stats=stats, per_segment=per_segment,
                            spots=sorted(statuses, key=lambda st: st.number))

    zones = {}
    for st in sorted(statuses, key=lambda st: st.number):
        view = zones.get(st.zone)
        if view is None:
            view = zones[st.zone] = ZoneView(
                name=st.zone,
                per_segment={seg.label: SegmentView() for seg in SEGMENT_ORDER},
            )
        view.stats.add(st.state)
        view.per_segment[st.segment].stats.add(st.state)
        view.per_segment[st.segment].spots.append(st)

    # Named zones alphabetically, unzoned spots last
    ordered = sorted(zones.values(), key=lambda z: (z.name is None, z.name or ""))
    return ZoneStatus(lot_id=lot_id, stats=stats, per_segment=per_segment, zones=ordered)
