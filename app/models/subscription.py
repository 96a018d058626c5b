# app/models/subscription.py
"""
Subscriptions (abonos) — time-bounded rights to a spot.
Identity is (lot_id, number). Several rows may point at the same spot over
time; a row is in force while state = active and start <= now <= end.
"""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKeyConstraint, ForeignKey
from sqlalchemy.orm import relationship
from app.database import Base
from app.models.enums import SubscriptionState, enum_column


class Subscription(Base):
    __tablename__ = "subscriptions"

    lot_id = Column(Integer, ForeignKey("lots.id", ondelete="CASCADE"), primary_key=True)
    number = Column(Integer, primary_key=True)
    holder = Column(String(200), nullable=False)
    spot_number = Column(Integer, index=True)
    validity_start = Column(DateTime, nullable=False)
    validity_end = Column(DateTime, nullable=False, index=True)
    state = Column(enum_column(SubscriptionState), nullable=False, default=SubscriptionState.ACTIVE)

    vehicles = relationship(
        "SubscriptionVehicle",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    @property
    def allowed_vehicles(self) -> set:
        return {v.plate for v in self.vehicles}

    def is_in_force(self, now) -> bool:
        return (
            self.state == SubscriptionState.ACTIVE
            and self.validity_start <= now <= self.validity_end
        )

    def __repr__(self):
        return f"<Subscription lot={self.lot_id} #{self.number} spot={self.spot_number} {self.state.value}>"


class SubscriptionVehicle(Base):
    __tablename__ = "subscription_vehicles"
    __table_args__ = (
        ForeignKeyConstraint(
            ["lot_id", "subscription_number"],
            ["subscriptions.lot_id", "subscriptions.number"],
            ondelete="CASCADE",
        ),
    )

    lot_id = Column(Integer, primary_key=True)
    subscription_number = Column(Integer, primary_key=True)
    plate = Column(String(20), primary_key=True)

    def __repr__(self):
        return f"<SubscriptionVehicle #{self.subscription_number} plate={self.plate}>"
