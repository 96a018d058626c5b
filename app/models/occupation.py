# app/models/occupation.py
"""
Occupation table — vehicles currently or formerly parked in the lot.
Rows are created and closed by the entry/exit flow, outside this service.
exit_time NULL = open occupation; an open occupation carrying a spot_number
is the authoritative signal that the spot is physically taken.
"""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from app.database import Base


class Occupation(Base):
    __tablename__ = "occupations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    lot_id = Column(Integer, ForeignKey("lots.id", ondelete="CASCADE"), nullable=False, index=True)
    plate = Column(String(20), nullable=False, index=True)
    spot_number = Column(Integer, index=True)     # nulled when the spot is removed
    entry_time = Column(DateTime, nullable=False)
    exit_time = Column(DateTime, index=True)

    @property
    def is_open(self) -> bool:
        return self.exit_time is None

    def __repr__(self):
        return f"<Occupation {self.id} plate={self.plate} spot={self.spot_number} open={self.is_open}>"
