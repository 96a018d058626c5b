"""Tests for manual spot state changes."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest

from app.exceptions import InvalidLot, InvalidStateTransition, SpotNotFound, ValidationError
from app.models.enums import SpotState
from app.services.spot_service import update_spot_state


class TestUpdateSpotState:
    def test_block_free_spot(self, db, lot, make_spots):
        make_spots(lot.id, [1])
        spot, previous = update_spot_state(db, lot.id, 1, SpotState.MAINTENANCE, "painting")
        assert previous == SpotState.FREE
        assert spot.state == SpotState.MAINTENANCE

    def test_reserve_then_free(self, db, lot, make_spots):
        make_spots(lot.id, [1])
        update_spot_state(db, lot.id, 1, SpotState.RESERVED)
        spot, previous = update_spot_state(db, lot.id, 1, SpotState.FREE)
        assert previous == SpotState.RESERVED
        assert spot.state == SpotState.FREE

    def test_occupied_spot_cannot_be_blocked(self, db, lot, make_spots, park):
        make_spots(lot.id, [1])
        park(lot.id, "ZZ000AA", 1)
        with pytest.raises(InvalidStateTransition, match="ZZ000AA"):
            update_spot_state(db, lot.id, 1, SpotState.MAINTENANCE)

    def test_occupied_requires_a_vehicle(self, db, lot, make_spots):
        make_spots(lot.id, [1])
        with pytest.raises(InvalidStateTransition):
            update_spot_state(db, lot.id, 1, SpotState.OCCUPIED)

    def test_occupied_with_vehicle(self, db, lot, make_spots, park):
        make_spots(lot.id, [1])
        park(lot.id, "ZZ000AA", 1)
        spot, _ = update_spot_state(db, lot.id, 1, SpotState.OCCUPIED)
        assert spot.state == SpotState.OCCUPIED

    def test_subscribed_is_not_settable(self, db, lot, make_spots):
        make_spots(lot.id, [1])
        with pytest.raises(ValidationError):
            update_spot_state(db, lot.id, 1, SpotState.SUBSCRIBED)

    def test_missing_spot(self, db, lot):
        with pytest.raises(SpotNotFound):
            update_spot_state(db, lot.id, 3, SpotState.FREE)

    def test_missing_lot(self, db):
        with pytest.raises(InvalidLot):
            update_spot_state(db, 77, 1, SpotState.FREE)
