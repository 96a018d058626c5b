# app/schemas/status.py
from pydantic import BaseModel, Field
from datetime import datetime
from typing import Annotated, Literal, Optional, Union
from app.models.enums import SpotState


class StatsOut(BaseModel):
    total: int
    occupied: int
    free: int
    subscribed: int
    reserved: int
    maintenance: int


class SpotStatusOut(BaseModel):
    number: int
    segment: str
    zone: Optional[str]
    stored_state: SpotState
    state: SpotState
    plate: Optional[str] = None
    subscription_number: Optional[int] = None
    subscription_holder: Optional[str] = None
    subscription_end: Optional[datetime] = None


class SegmentViewOut(BaseModel):
    stats: StatsOut
    spots: list[SpotStatusOut]


class ZoneViewOut(BaseModel):
    name: Optional[str]       # null groups spots without a zone
    stats: StatsOut
    per_segment: dict[str, SegmentViewOut]


class SimpleStatusOut(BaseModel):
    mode: Literal["simple"]
    lot_id: int
    stats: StatsOut
    per_segment: dict[str, StatsOut]
    spots: list[SpotStatusOut]


class ZoneStatusOut(BaseModel):
    mode: Literal["zones"]
    lot_id: int
    stats: StatsOut
    per_segment: dict[str, StatsOut]
    zones: list[ZoneViewOut]


StatusOut = Annotated[Union[SimpleStatusOut, ZoneStatusOut], Field(discriminator="mode")]
