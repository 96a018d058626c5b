# app/schemas/spot.py
from pydantic import BaseModel, field_validator
from typing import Optional
from app.models.enums import Segment, SpotState


class SpotOut(BaseModel):
    number: int
    segment: str              # Car | Motorcycle | LightTruck
    state: SpotState
    zone: Optional[str]

    @field_validator("segment", mode="before")
    @classmethod
    def segment_label(cls, v):
        return v.label if isinstance(v, Segment) else v

    class Config:
        from_attributes = True


class SpotStateUpdate(BaseModel):
    state: SpotState
    reason: Optional[str] = None


class SpotStateChanged(BaseModel):
    spot: SpotOut
    previous_state: SpotState
