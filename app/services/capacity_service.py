# app/services/capacity_service.py
"""
Inventory reconciliation: bring the per-segment spot count of a lot to a target.

Per segment (fixed order Car, Motorcycle, LightTruck):
  grow   — new spots numbered above every number the lot has ever issued
  shrink — remove the highest-numbered free spots among those numbered
           above the target count; occupied spots are never removed
  equal  — no-op

Every segment's shrink is checked before anything is written, so one blocked
segment fails the whole request. Grows run before shrinks and everything is
committed in a single transaction.
"""

from dataclasses import dataclass, field
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import settings
from app.exceptions import CapacityBlockedByOccupancy, ParkingCoreError, StorageFailure, ValidationError
from app.models.enums import SEGMENT_ORDER, Segment
from app.services import occupation_store, spot_store
from app.services.lot_service import get_lot, bump_high_water
from app.services.numbering import allocate_after
from app.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class ShrinkPlan:
    segment: Segment
    remove: list
    blocking: list


@dataclass
class CapacitySyncResult:
    lot_id: int
    applied_targets: dict
    created: dict = field(default_factory=dict)
    removed: dict = field(default_factory=dict)
    detached_occupations: int = 0


def get_capacity(db: Session, lot_id: int) -> dict:
    """Current spot count per segment, zero-filled."""
    get_lot(db, lot_id)
    counts = {seg: 0 for seg in SEGMENT_ORDER}
    for spot in spot_store.list_spots(db, lot_id):
        counts[spot.segment] += 1
    return counts


def plan_shrink(segment: Segment, numbers: list, target: int, occupied: set) -> ShrinkPlan:
    """
    Pick the spots to remove when `numbers` (this segment's spots) must go
    down to `target`. Candidates are numbers above `target`, highest first.
    """
    need = len(numbers) - target
    candidates = sorted((n for n in numbers if n > target), reverse=True)
    free = [n for n in candidates if n not in occupied]
    if len(free) < need:
        return ShrinkPlan(segment, remove=[], blocking=sorted(n for n in candidates if n in occupied))
    return ShrinkPlan(segment, remove=free[:need], blocking=[])


def _validate_targets(target_counts: dict) -> dict:
    targets = {}
    for seg in SEGMENT_ORDER:
        if seg not in target_counts or target_counts[seg] is None:
            continue
        value = target_counts[seg]
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise ValidationError(f"Target for {seg.label} must be a non-negative integer")
        targets[seg] = value
    unknown = set(target_counts) - set(SEGMENT_ORDER)
    if unknown:
        raise ValidationError(f"Unknown segments: {sorted(str(u) for u in unknown)}")
    return targets


def sync_capacity(db: Session, lot_id: int, target_counts: dict) -> CapacitySyncResult:
    """
    Apply `target_counts` ({Segment: int}). Segments left out are not touched.
    Raises CapacityBlockedByOccupancy listing every blocked segment.
    """
    targets = _validate_targets(target_counts)

    last_error = None
    for attempt in range(1, settings.ALLOCATION_RETRIES + 1):
        try:
            return _apply(db, lot_id, targets)
        except IntegrityError as e:
            db.rollback()
            last_error = e
            logger.warning(f"[CAPACITY] Lot {lot_id}: spot number collision on attempt {attempt}, retrying")
        except ParkingCoreError:
            db.rollback()
            raise
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"[CAPACITY] Lot {lot_id}: storage failure, nothing committed: {e}")
            raise StorageFailure(f"Capacity update for lot {lot_id} failed, no segment was changed", e)

    raise StorageFailure(
        f"Could not allocate spot numbers for lot {lot_id} after {settings.ALLOCATION_RETRIES} attempts",
        last_error,
    )


def _apply(db: Session, lot_id: int, targets: dict) -> CapacitySyncResult:
    lot = get_lot(db, lot_id, lock=True)
    spots = spot_store.list_spots(db, lot_id)
    occupied = occupation_store.occupied_numbers(db, lot_id)

    by_segment = {seg: [] for seg in SEGMENT_ORDER}
    for spot in spots:
        by_segment[spot.segment].append(spot.number)

    # Nothing is written unless every segment can shrink
    grows, shrinks, blocked = {}, [], {}
    for seg, target in targets.items():
        diff = target - len(by_segment[seg])
        if diff > 0:
            grows[seg] = diff
        elif diff < 0:
            plan = plan_shrink(seg, by_segment[seg], target, occupied)
            if plan.blocking:
                blocked[seg] = plan.blocking
            else:
                shrinks.append(plan)

    if blocked:
        for seg, nums in blocked.items():
            logger.warning(f"[CAPACITY] Lot {lot_id}: {seg.label} shrink blocked by occupied spots {nums}")
        raise CapacityBlockedByOccupancy(blocked)

    result = CapacitySyncResult(lot_id=lot_id, applied_targets={})
    existing = [s.number for s in spots]

    for seg, diff in grows.items():
        numbers = allocate_after(existing, diff, lot.last_spot_number)
        spot_store.bulk_insert(db, lot_id, numbers, seg)
        bump_high_water(lot, numbers)
        existing.extend(numbers)
        by_segment[seg].extend(numbers)
        result.created[seg] = numbers
        logger.info(f"[CAPACITY] Lot {lot_id}: +{diff} {seg.label} spots ({numbers[0]}-{numbers[-1]})")

    for plan in shrinks:
        result.detached_occupations += occupation_store.detach_spot(db, lot_id, plan.remove)
        spot_store.bulk_delete(db, lot_id, plan.remove)
        removed = set(plan.remove)
        by_segment[plan.segment] = [n for n in by_segment[plan.segment] if n not in removed]
        result.removed[plan.segment] = plan.remove
        logger.info(f"[CAPACITY] Lot {lot_id}: -{len(plan.remove)} {plan.segment.label} spots {plan.remove}")

    result.applied_targets = {seg: len(by_segment[seg]) for seg in SEGMENT_ORDER}
    lot.capacity = sum(result.applied_targets.values())
    db.commit()

    logger.info(f"[CAPACITY] Lot {lot_id}: capacity now {lot.capacity} "
                f"({', '.join(f'{s.label}={n}' for s, n in result.applied_targets.items())})")
    return result
