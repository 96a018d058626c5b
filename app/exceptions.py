# app/exceptions.py
"""
Domain errors raised by the services and rendered by the handler in app.main.

ValidationError  — bad input, never touches storage (400 / 404)
ConflictError    — storage consulted, no mutation attempted (409)
StorageFailure   — backing store unavailable or write rejected (503)
"""

from typing import Optional


class ParkingCoreError(Exception):
    status_code = 500
    code = "internal_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"error": self.code, "detail": self.message}


# ── Validation ───────────────────────────────────────────────────────────────
class ValidationError(ParkingCoreError):
    status_code = 400
    code = "validation_error"


class InvalidSizing(ValidationError):
    code = "invalid_sizing"


class InvalidLot(ValidationError):
    status_code = 404
    code = "invalid_lot"

    def __init__(self, lot_id: int):
        super().__init__(f"Parking lot {lot_id} not found")
        self.lot_id = lot_id


class SpotNotFound(ValidationError):
    status_code = 404
    code = "spot_not_found"

    def __init__(self, lot_id: int, number: int):
        super().__init__(f"Spot {number} not found in lot {lot_id}")
        self.lot_id = lot_id
        self.number = number


class ZoneNotFound(ValidationError):
    status_code = 404
    code = "zone_not_found"

    def __init__(self, lot_id: int, name: str):
        super().__init__(f"Zone '{name}' not found in lot {lot_id}")
        self.lot_id = lot_id
        self.name = name


# ── Conflicts ────────────────────────────────────────────────────────────────
class ConflictError(ParkingCoreError):
    status_code = 409
    code = "conflict"


class DuplicateZoneName(ConflictError):
    code = "duplicate_zone_name"

    def __init__(self, lot_id: int, name: str):
        super().__init__(f"Zone '{name}' already exists in lot {lot_id}")
        self.lot_id = lot_id
        self.name = name


class CapacityBlockedByOccupancy(ConflictError):
    """
    Shrink is infeasible for one or more segments.
    `blocked` maps each blocked segment to the occupied spot numbers that
    prevent enough free candidates from being removed.
    """

    code = "capacity_blocked_by_occupancy"

    def __init__(self, blocked: dict):
        self.blocked = blocked
        parts = [f"{seg.label}: {nums}" for seg, nums in blocked.items()]
        super().__init__("Cannot reduce capacity, occupied spots block removal: " + "; ".join(parts))

    @property
    def segment(self):
        """First blocked segment, in processing order."""
        return next(iter(self.blocked))

    @property
    def blocking_numbers(self) -> list:
        return self.blocked[self.segment]

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["segment"] = self.segment.label
        data["blocking_spot_numbers"] = self.blocking_numbers
        data["blocked"] = [
            {"segment": seg.label, "blocking_spot_numbers": nums}
            for seg, nums in self.blocked.items()
        ]
        return data


class InvalidStateTransition(ConflictError):
    code = "invalid_state_transition"


# ── Storage ──────────────────────────────────────────────────────────────────
class StorageFailure(ParkingCoreError):
    status_code = 503
    code = "storage_failure"

    def __init__(self, message: str, cause: Optional[Exception] = None):
        super().__init__(message)
        self.cause = cause
