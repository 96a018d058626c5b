# app/services/zone_service.py
"""
Zone provisioning: create a named zone and a batch of freshly numbered spots.

Sizing is either an explicit count or rows × columns.
A grid-sized zone keeps its rows, columns and numbering order (row-major or
column-major) on the zone row; zones sized by count get a detected layout.

Numbering modes:
  restart  — lowest unused numbers in the lot, scanning up from 1 (fills gaps)
  continue — contiguous block above the lot's high-water mark

The zone row is committed before the spots are inserted. If the insert keeps
failing, the zone row is deleted again so no empty zone is left behind.
"""

import enum
from dataclasses import dataclass, field
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import settings
from app.exceptions import (
    DuplicateZoneName, InvalidSizing, StorageFailure, ValidationError, ZoneNotFound,
)
from app.models.enums import GridNumbering, Segment, SpotState
from app.models.zone import Zone
from app.services import spot_store
from app.services.lot_service import get_lot, bump_high_water
from app.services.numbering import allocate_after, first_fit
from app.utils.logger import get_logger

logger = get_logger(__name__)

# Column counts tried, in order, when guessing a zone's grid layout
LAYOUT_COLUMN_CANDIDATES = (5, 8, 10, 12, 15, 16, 20, 24, 25, 30)

# Bounds for an operator-edited grid
GRID_MAX = 100


class NumberingMode(str, enum.Enum):
    RESTART = "restart"
    CONTINUE = "continue"


@dataclass
class ZoneCreated:
    zone_id: int
    name: str
    capacity: int
    spot_numbers: list
    rows: Optional[int] = None
    columns: Optional[int] = None
    numbering: GridNumbering = GridNumbering.ROW_MAJOR

    @property
    def number_range(self) -> tuple:
        return (self.spot_numbers[0], self.spot_numbers[-1])


@dataclass
class GridLayout:
    zone_id: int
    name: str
    rows: int
    columns: int
    numbering: GridNumbering
    detected: bool


@dataclass
class ZoneDetail:
    zone_id: Optional[int]
    name: str
    capacity: int
    total: int
    state_counts: dict
    number_min: Optional[int]
    number_max: Optional[int]
    rows: int
    columns: int
    numbering: GridNumbering = GridNumbering.ROW_MAJOR
    layout_detected: bool = False
    spots: list = field(default_factory=list)


def resolve_sizing(count: Optional[int] = None, rows: Optional[int] = None,
                   columns: Optional[int] = None) -> int:
    """Turn either sizing form into a spot count. Grid sizing wins when given."""
    if rows is not None or columns is not None:
        if rows is None or columns is None or rows <= 0 or columns <= 0:
            raise InvalidSizing("Rows and columns must both be greater than 0")
        return rows * columns
    if count is None:
        raise InvalidSizing("Specify a spot count or rows and columns")
    if count <= 0:
        raise InvalidSizing("Spot count must be greater than 0")
    return count


def detect_layout(total: int) -> tuple:
    """Best-effort (rows, columns) guess for a zone of `total` spots."""
    for cols in LAYOUT_COLUMN_CANDIDATES:
        if total and total % cols == 0:
            return total // cols, cols
    return 1, total


def create_zone(db: Session, lot_id: int, name: str, count: Optional[int] = None,
                rows: Optional[int] = None, columns: Optional[int] = None,
                numbering_mode=NumberingMode.RESTART,
                grid_numbering=GridNumbering.ROW_MAJOR) -> ZoneCreated:
    if not name or not name.strip():
        raise ValidationError("Zone name is required")
    try:
        mode = NumberingMode(numbering_mode)
    except ValueError:
        raise ValidationError(f"Invalid numbering mode: {numbering_mode!r}")
    grid_order = _grid_numbering(grid_numbering)
    total = resolve_sizing(count, rows, columns)

    zone_id = _insert_zone_row(db, lot_id, name, total, rows, columns, grid_order)
    logger.info(f"[ZONES] Lot {lot_id}: zone '{name}' registered (id={zone_id}), allocating {total} spots")

    last_error = None
    for attempt in range(1, settings.ALLOCATION_RETRIES + 1):
        try:
            lot = get_lot(db, lot_id, lock=True)
            existing = spot_store.list_numbers(db, lot_id)
            if mode == NumberingMode.RESTART:
                numbers = first_fit(existing, total)
            else:
                numbers = allocate_after(existing, total, lot.last_spot_number)
            spot_store.bulk_insert(db, lot_id, numbers, Segment.CAR, zone=name, zone_id=zone_id)
            bump_high_water(lot, numbers)
            db.commit()
        except IntegrityError as e:
            db.rollback()
            last_error = e
            logger.warning(f"[ZONES] Lot {lot_id}: spot number collision on attempt {attempt}, retrying")
            continue
        except SQLAlchemyError as e:
            db.rollback()
            _compensate(db, lot_id, zone_id, name)
            raise StorageFailure(f"Could not create spots for zone '{name}'", e)

        logger.info(f"[ZONES] Lot {lot_id}: zone '{name}' created with spots {numbers[0]}-{numbers[-1]}")
        return ZoneCreated(zone_id=zone_id, name=name, capacity=total, spot_numbers=numbers,
                           rows=rows, columns=columns, numbering=grid_order)

    _compensate(db, lot_id, zone_id, name)
    raise StorageFailure(
        f"Could not allocate spot numbers for zone '{name}' after "
        f"{settings.ALLOCATION_RETRIES} attempts", last_error,
    )


def _insert_zone_row(db: Session, lot_id: int, name: str, capacity: int, rows: Optional[int],
                     columns: Optional[int], numbering: GridNumbering) -> int:
    get_lot(db, lot_id, lock=True)
    exists = db.query(Zone.id).filter(Zone.lot_id == lot_id, Zone.name == name).first()
    if exists or spot_store.zone_in_use(db, lot_id, name):
        db.rollback()
        raise DuplicateZoneName(lot_id, name)

    zone = Zone(lot_id=lot_id, name=name, capacity=capacity,
                grid_rows=rows, grid_cols=columns, grid_numbering=numbering)
    db.add(zone)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise DuplicateZoneName(lot_id, name)
    except SQLAlchemyError as e:
        db.rollback()
        raise StorageFailure(f"Could not create zone '{name}'", e)
    return zone.id


def _compensate(db: Session, lot_id: int, zone_id: int, name: str):
    """Delete a zone row whose spots could not be created."""
    try:
        db.query(Zone).filter(Zone.id == zone_id).delete(synchronize_session=False)
        db.commit()
        logger.warning(f"[ZONES] Lot {lot_id}: zone '{name}' rolled back after spot insertion failure")
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"[ZONES] Lot {lot_id}: compensation failed for zone '{name}' (id={zone_id}): {e}",
                     exc_info=True)


def list_zones(db: Session, lot_id: int) -> list:
    get_lot(db, lot_id)
    return db.query(Zone).filter(Zone.lot_id == lot_id).order_by(Zone.name).all()


def zone_detail(db: Session, lot_id: int, name: str) -> ZoneDetail:
    get_lot(db, lot_id)
    zone = db.query(Zone).filter(Zone.lot_id == lot_id, Zone.name == name).first()
    spots = [s for s in spot_store.list_spots(db, lot_id) if s.zone == name]
    if zone is None and not spots:
        raise ZoneNotFound(lot_id, name)

    counts = {state: 0 for state in SpotState}
    for s in spots:
        counts[s.state] += 1
    numbers = [s.number for s in spots]
    rows, columns, numbering, detected = _layout_of(zone, len(spots))

    return ZoneDetail(
        zone_id=zone.id if zone else None,
        name=name,
        capacity=zone.capacity if zone else len(spots),
        total=len(spots),
        state_counts=counts,
        number_min=min(numbers) if numbers else None,
        number_max=max(numbers) if numbers else None,
        rows=rows,
        columns=columns,
        numbering=numbering,
        layout_detected=detected,
        spots=spots,
    )


def _grid_numbering(value) -> GridNumbering:
    try:
        return GridNumbering(value)
    except ValueError:
        raise ValidationError(f"Invalid grid numbering: {value!r}, expected ROW_MAJOR or COL_MAJOR")


def _layout_of(zone: Optional[Zone], total: int) -> tuple:
    """(rows, columns, numbering, detected); the stored grid wins when the zone has one."""
    if zone is not None and zone.grid_rows and zone.grid_cols:
        return zone.grid_rows, zone.grid_cols, zone.grid_numbering, False
    rows, columns = detect_layout(total)
    numbering = zone.grid_numbering if zone is not None else GridNumbering.ROW_MAJOR
    return rows, columns, numbering, True


def _get_zone_row(db: Session, lot_id: int, name: str) -> Zone:
    get_lot(db, lot_id)
    zone = db.query(Zone).filter(Zone.lot_id == lot_id, Zone.name == name).first()
    if zone is None:
        raise ZoneNotFound(lot_id, name)
    return zone


def get_grid(db: Session, lot_id: int, name: str) -> GridLayout:
    zone = _get_zone_row(db, lot_id, name)
    total = len([s for s in spot_store.list_spots(db, lot_id) if s.zone == name])
    rows, columns, numbering, detected = _layout_of(zone, total)
    return GridLayout(zone_id=zone.id, name=zone.name, rows=rows, columns=columns,
                      numbering=numbering, detected=detected)


def update_grid(db: Session, lot_id: int, name: str, rows: Optional[int] = None,
                columns: Optional[int] = None, numbering=None) -> GridLayout:
    """
    Change the stored layout of a zone. Fields left as None keep their value;
    spots are not renumbered. Rows and columns must end up both set.
    """
    for label, value in (("Rows", rows), ("Columns", columns)):
        if value is not None and not 1 <= value <= GRID_MAX:
            raise ValidationError(f"{label} must be between 1 and {GRID_MAX}")
    order = _grid_numbering(numbering) if numbering is not None else None

    zone = _get_zone_row(db, lot_id, name)
    new_rows = rows if rows is not None else zone.grid_rows
    new_cols = columns if columns is not None else zone.grid_cols
    if (new_rows is None) != (new_cols is None):
        raise ValidationError("Rows and columns must be set together")

    if rows is None and columns is None and order is None:
        return get_grid(db, lot_id, name)

    zone.grid_rows = new_rows
    zone.grid_cols = new_cols
    if order is not None:
        zone.grid_numbering = order
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise StorageFailure(f"Could not update grid of zone '{name}'", e)

    logger.info(f"[ZONES] Lot {lot_id}: zone '{name}' grid set to {new_rows}x{new_cols} "
                f"{zone.grid_numbering.value}")
    return get_grid(db, lot_id, name)
