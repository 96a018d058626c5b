# app/models/zone.py
"""
Zones table — operator-defined named groups of spots.
Created once by the zone provisioner together with a batch of fresh spots.
capacity is informational: the spot count at creation time.
grid_rows / grid_cols hold the operator layout; both NULL means none was
given and readers fall back to a detected layout.
"""

from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint
from app.database import Base
from app.models.enums import GridNumbering, enum_column


class Zone(Base):
    __tablename__ = "zones"
    __table_args__ = (
        UniqueConstraint("lot_id", "name", name="uq_zone_lot_name"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    lot_id = Column(Integer, ForeignKey("lots.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    capacity = Column(Integer, default=0, nullable=False)
    grid_rows = Column(Integer)
    grid_cols = Column(Integer)
    grid_numbering = Column(enum_column(GridNumbering, length=10), nullable=False,
                            default=GridNumbering.ROW_MAJOR)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<Zone {self.id} lot={self.lot_id} name={self.name} capacity={self.capacity}>"
