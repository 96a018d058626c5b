# app/models/enums.py
"""
Explicit state machines for spots and subscriptions.
Persisted as their wire codes; unknown stored values fail on load.
"""

import enum

from sqlalchemy import Enum as SAEnum


class Segment(str, enum.Enum):
    CAR = "AUT"
    MOTORCYCLE = "MOT"
    LIGHT_TRUCK = "CAM"

    @property
    def label(self) -> str:
        return _SEGMENT_LABELS[self]

    @classmethod
    def from_label(cls, label: str) -> "Segment":
        for seg, name in _SEGMENT_LABELS.items():
            if name == label:
                return seg
        raise ValueError(f"Unknown segment: {label!r}")


_SEGMENT_LABELS = {
    Segment.CAR: "Car",
    Segment.MOTORCYCLE: "Motorcycle",
    Segment.LIGHT_TRUCK: "LightTruck",
}

# Fixed processing order for grows and shrinks
SEGMENT_ORDER = (Segment.CAR, Segment.MOTORCYCLE, Segment.LIGHT_TRUCK)


class SpotState(str, enum.Enum):
    FREE = "Libre"
    OCCUPIED = "Ocupada"
    RESERVED = "Reservada"
    MAINTENANCE = "Mantenimiento"
    SUBSCRIBED = "Abonado"


class SubscriptionState(str, enum.Enum):
    ACTIVE = "active"
    EXPIRED = "expired"
    CANCELLED = "cancelled"


def enum_column(enum_cls, length: int = 20) -> SAEnum:
    """String-backed enum column storing member values, not member names."""
    return SAEnum(
        enum_cls,
        values_callable=lambda members: [m.value for m in members],
        native_enum=False,
        validate_strings=True,
        length=length,
    )


class GridNumbering(str, enum.Enum):
    """Order in which a zone's spot numbers run across its grid."""
    ROW_MAJOR = "ROW_MAJOR"
    COL_MAJOR = "COL_MAJOR"
