# app/models/spot.py
"""
Spots table — one row per numbered physical parking space.
(lot_id, number) is unique across all segments and zones of a lot;
numbers are never changed once issued.
"""

from sqlalchemy import Column, Integer, String, ForeignKey, UniqueConstraint
from app.database import Base
from app.models.enums import Segment, SpotState, enum_column


class Spot(Base):
    __tablename__ = "spots"
    __table_args__ = (
        UniqueConstraint("lot_id", "number", name="uq_spot_lot_number"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    lot_id = Column(Integer, ForeignKey("lots.id", ondelete="CASCADE"), nullable=False, index=True)
    number = Column(Integer, nullable=False)
    segment = Column(enum_column(Segment, length=3), nullable=False, default=Segment.CAR)
    state = Column(enum_column(SpotState), nullable=False, default=SpotState.FREE)
    zone = Column(String(100), index=True)       # zone name, null = unzoned
    zone_id = Column(Integer, ForeignKey("zones.id", ondelete="SET NULL"))

    def __repr__(self):
        return f"<Spot lot={self.lot_id} #{self.number} {self.segment.value} {self.state.value}>"
