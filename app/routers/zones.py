# app/routers/zones.py
"""Zones — provisioning (CreateZone), read endpoints and grid layout."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.database import get_db
from app.schemas.spot import SpotOut
from app.schemas.zone import GridOut, GridUpdate, ZoneCreate, ZoneCreatedOut, ZoneDetailOut, ZoneOut
from app.services.zone_service import create_zone, get_grid, list_zones, update_grid, zone_detail

router = APIRouter()


@router.post("/lots/{lot_id}/zones", response_model=ZoneCreatedOut, status_code=201,
             summary="Create a zone with freshly numbered spots")
def create_zone_endpoint(lot_id: int, body: ZoneCreate, db: Session = Depends(get_db)):
    """
    Size the zone with either `count` or `rows` × `columns`.
    `restart` numbering fills the lowest unused numbers; `continue` numbers
    after the highest number ever issued in the lot.
    """
    created = create_zone(db, lot_id, body.name, count=body.count, rows=body.rows,
                          columns=body.columns, numbering_mode=body.numbering_mode,
                          grid_numbering=body.grid_numbering)
    return ZoneCreatedOut(
        zone_id=created.zone_id,
        name=created.name,
        capacity=created.capacity,
        spot_numbers_created=list(created.number_range),
        spot_numbers=created.spot_numbers,
        rows=created.rows,
        columns=created.columns,
        grid_numbering=created.numbering,
    )


@router.get("/lots/{lot_id}/zones", response_model=list[ZoneOut], summary="List zones")
def list_zones_endpoint(lot_id: int, db: Session = Depends(get_db)):
    return list_zones(db, lot_id)


@router.get("/lots/{lot_id}/zones/{name}", response_model=ZoneDetailOut, summary="Zone detail")
def zone_detail_endpoint(lot_id: int, name: str, db: Session = Depends(get_db)):
    """Spots, per-state counts, number range and grid layout (stored, else detected) of one zone."""
    detail = zone_detail(db, lot_id, name)
    return ZoneDetailOut(
        zone_id=detail.zone_id,
        name=detail.name,
        capacity=detail.capacity,
        total=detail.total,
        state_counts={state.value: n for state, n in detail.state_counts.items()},
        number_min=detail.number_min,
        number_max=detail.number_max,
        rows=detail.rows,
        columns=detail.columns,
        grid_numbering=detail.numbering,
        layout_detected=detail.layout_detected,
        spots=[SpotOut.model_validate(s) for s in detail.spots],
    )


def _grid_out(grid) -> GridOut:
    return GridOut(zone_id=grid.zone_id, name=grid.name, rows=grid.rows, columns=grid.columns,
                   grid_numbering=grid.numbering, detected=grid.detected)


@router.get("/lots/{lot_id}/zones/{name}/grid", response_model=GridOut, summary="Zone grid layout")
def read_grid(lot_id: int, name: str, db: Session = Depends(get_db)):
    return _grid_out(get_grid(db, lot_id, name))


@router.put("/lots/{lot_id}/zones/{name}/grid", response_model=GridOut, summary="Change a zone's grid layout")
def change_grid(lot_id: int, name: str, body: GridUpdate, db: Session = Depends(get_db)):
    """Rows and columns between 1 and 100; omitted fields keep their value. Spots are not renumbered."""
    grid = update_grid(db, lot_id, name, rows=body.rows, columns=body.columns, numbering=body.grid_numbering)
    return _grid_out(grid)
