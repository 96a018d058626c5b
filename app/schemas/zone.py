# app/schemas/zone.py
from pydantic import BaseModel, Field
from datetime import datetime
from typing import Literal, Optional

from app.models.enums import GridNumbering
from app.schemas.spot import SpotOut


class ZoneCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    count: Optional[int] = None       # either count ...
    rows: Optional[int] = None        # ... or rows × columns
    columns: Optional[int] = None
    numbering_mode: Literal["restart", "continue"] = "restart"
    grid_numbering: Literal["ROW_MAJOR", "COL_MAJOR"] = "ROW_MAJOR"


class ZoneCreatedOut(BaseModel):
    zone_id: int
    name: str
    capacity: int
    spot_numbers_created: list[int]   # [lo, hi]
    spot_numbers: list[int]
    rows: Optional[int] = None
    columns: Optional[int] = None
    grid_numbering: GridNumbering = GridNumbering.ROW_MAJOR


class ZoneOut(BaseModel):
    id: int
    name: str
    capacity: int
    grid_rows: Optional[int]
    grid_cols: Optional[int]
    grid_numbering: GridNumbering
    created_at: datetime

    class Config:
        from_attributes = True


class ZoneDetailOut(BaseModel):
    zone_id: Optional[int]
    name: str
    capacity: int
    total: int
    state_counts: dict[str, int]
    number_min: Optional[int]
    number_max: Optional[int]
    rows: int
    columns: int
    grid_numbering: GridNumbering
    layout_detected: bool
    spots: list[SpotOut]


class GridOut(BaseModel):
    zone_id: int
    name: str
    rows: int
    columns: int
    grid_numbering: GridNumbering
    detected: bool            # true when no layout is stored for the zone


class GridUpdate(BaseModel):
    rows: Optional[int] = None
    columns: Optional[int] = None
    grid_numbering: Optional[GridNumbering] = None

    class Config:
        extra = "forbid"
