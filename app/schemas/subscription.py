# app/schemas/subscription.py
from pydantic import BaseModel
from datetime import datetime
from typing import Optional


class SubscriptionOut(BaseModel):
    number: int
    holder: str
    spot_number: Optional[int]
    validity_start: datetime
    validity_end: datetime
    state: str
    allowed_vehicles: list[str]
    days_remaining: int
    status: str               # Active | ExpiringSoon | Expired

    class Config:
        from_attributes = True


class SweepFailureOut(BaseModel):
    subscription_number: int
    reason: Optional[str]


class SweepOutcomeOut(BaseModel):
    subscription_number: int
    spot_number: Optional[int]
    action: str
    success: bool


class SweepOut(BaseModel):
    lot_id: int
    processed: int
    succeeded: int
    failures: list[SweepFailureOut]
    outcomes: list[SweepOutcomeOut]
