# app/models/parking_lot.py
"""
Parking lots table.
Every spot, zone, occupation and subscription is scoped to one lot.
last_spot_number is the high-water mark of issued spot numbers; grow paths
allocate above it so numbers freed by a shrink are not handed out again.
"""

from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime
from app.database import Base


class ParkingLot(Base):
    __tablename__ = "lots"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False)
    capacity = Column(Integer, default=0, nullable=False)
    last_spot_number = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<ParkingLot {self.id} name={self.name} capacity={self.capacity}>"
