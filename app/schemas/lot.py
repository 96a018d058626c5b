# app/schemas/lot.py
from pydantic import BaseModel, Field
from datetime import datetime


class LotCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)


class LotOut(BaseModel):
    id: int
    name: str
    capacity: int
    last_spot_number: int
    created_at: datetime

    class Config:
        from_attributes = True
