# app/schemas/capacity.py
from pydantic import BaseModel
from typing import Optional


class CapacityTargets(BaseModel):
    """Target spot count per segment. Omitted segments are left unchanged."""
    Car: Optional[int] = None
    Motorcycle: Optional[int] = None
    LightTruck: Optional[int] = None

    class Config:
        extra = "forbid"


class CapacityOut(BaseModel):
    Car: int = 0
    Motorcycle: int = 0
    LightTruck: int = 0


class CapacitySyncOut(BaseModel):
    lot_id: int
    applied_targets: CapacityOut
    created: dict[str, list[int]]
    removed: dict[str, list[int]]
    detached_occupations: int
