"""Tests for the subscription expiry sweep."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from datetime import datetime, timedelta

import pytest
from unittest.mock import patch
from sqlalchemy.exc import OperationalError

from app.exceptions import InvalidLot
from app.models.enums import SpotState, SubscriptionState
from app.models.subscription import Subscription
from app.services import spot_store
from app.services.expiry_service import SweepAction, sweep_expired

NOW = datetime(2024, 6, 15, 12, 0, 0)


def subscription(db, lot_id, number):
    return db.get(Subscription, (lot_id, number))


class TestSweepExpired:
    def test_expired_subscription_releases_free_spot(self, db, lot, make_spots, subscribe):
        make_spots(lot.id, [7], state=SpotState.SUBSCRIBED)
        subscribe(lot.id, 1, 7, NOW - timedelta(days=30), NOW - timedelta(days=1))

        report = sweep_expired(db, lot.id, NOW)

        assert report.processed == 1 and report.failures == []
        assert report.outcomes[0].action == SweepAction.RELEASED
        assert subscription(db, lot.id, 1).state == SubscriptionState.EXPIRED
        assert spot_store.get_spot(db, lot.id, 7).state == SpotState.FREE

    def test_occupied_spot_keeps_its_state(self, db, lot, make_spots, subscribe, park):
        make_spots(lot.id, [7], state=SpotState.SUBSCRIBED)
        subscribe(lot.id, 1, 7, NOW - timedelta(days=30), NOW - timedelta(days=1))
        park(lot.id, "AB123CD", 7)

        report = sweep_expired(db, lot.id, NOW)

        assert report.outcomes[0].action == SweepAction.KEPT_OCCUPIED
        assert subscription(db, lot.id, 1).state == SubscriptionState.EXPIRED
        assert spot_store.get_spot(db, lot.id, 7).state == SpotState.SUBSCRIBED

    def test_second_sweep_is_a_noop(self, db, lot, make_spots, subscribe):
        make_spots(lot.id, [3], state=SpotState.SUBSCRIBED)
        subscribe(lot.id, 1, 3, NOW - timedelta(days=30), NOW - timedelta(hours=1))

        sweep_expired(db, lot.id, NOW)
        again = sweep_expired(db, lot.id, NOW)

        assert again.processed == 0
        assert spot_store.get_spot(db, lot.id, 3).state == SpotState.FREE

    def test_subscription_without_spot(self, db, lot, subscribe):
        subscribe(lot.id, 5, None, NOW - timedelta(days=30), NOW - timedelta(days=1))
        report = sweep_expired(db, lot.id, NOW)
        assert report.outcomes[0].action == SweepAction.NO_SPOT
        assert subscription(db, lot.id, 5).state == SubscriptionState.EXPIRED

    def test_spot_removed_since(self, db, lot, subscribe):
        subscribe(lot.id, 5, 99, NOW - timedelta(days=30), NOW - timedelta(days=1))
        report = sweep_expired(db, lot.id, NOW)
        assert report.outcomes[0].action == SweepAction.NO_SPOT
        assert report.outcomes[0].success

    def test_current_and_inactive_rows_untouched(self, db, lot, make_spots, subscribe):
        make_spots(lot.id, [1, 2], state=SpotState.SUBSCRIBED)
        subscribe(lot.id, 1, 1, NOW - timedelta(days=3), NOW + timedelta(days=3))
        subscribe(lot.id, 2, 2, NOW - timedelta(days=30), NOW - timedelta(days=1),
                  state=SubscriptionState.CANCELLED)

        report = sweep_expired(db, lot.id, NOW)

        assert report.processed == 0
        assert subscription(db, lot.id, 1).state == SubscriptionState.ACTIVE
        assert subscription(db, lot.id, 2).state == SubscriptionState.CANCELLED
        assert spot_store.get_spot(db, lot.id, 2).state == SpotState.SUBSCRIBED

    def test_subscription_ending_exactly_now_is_not_swept(self, db, lot, make_spots, subscribe):
        make_spots(lot.id, [4], state=SpotState.SUBSCRIBED)
        subscribe(lot.id, 1, 4, NOW - timedelta(days=30), NOW)

        report = sweep_expired(db, lot.id, NOW)

        assert report.processed == 0
        assert subscription(db, lot.id, 1).state == SubscriptionState.ACTIVE
        assert spot_store.get_spot(db, lot.id, 4).state == SpotState.SUBSCRIBED

        later = sweep_expired(db, lot.id, NOW + timedelta(seconds=1))
        assert later.outcomes[0].action == SweepAction.RELEASED

    def test_one_failure_does_not_stop_the_sweep(self, db, lot, make_spots, subscribe):
        make_spots(lot.id, [1, 2, 3], state=SpotState.SUBSCRIBED)
        for n in (1, 2, 3):
            subscribe(lot.id, n, n, NOW - timedelta(days=30), NOW - timedelta(days=1))

        real_set_state = spot_store.set_state

        def flaky(db_, lot_id, number, state):
            if number == 2:
                raise OperationalError("UPDATE spots", {}, Exception("deadlock detected"))
            return real_set_state(db_, lot_id, number, state)

        with patch("app.services.expiry_service.spot_store.set_state", side_effect=flaky):
            report = sweep_expired(db, lot.id, NOW)

        assert report.processed == 3
        assert report.succeeded == 2
        assert [f.subscription_number for f in report.failures] == [2]
        assert report.failures[0].action == SweepAction.ERROR
        assert "deadlock" in report.failures[0].reason

        # the failed item rolled back completely and stays eligible
        assert subscription(db, lot.id, 2).state == SubscriptionState.ACTIVE
        assert spot_store.get_spot(db, lot.id, 2).state == SpotState.SUBSCRIBED
        assert spot_store.get_spot(db, lot.id, 1).state == SpotState.FREE
        assert spot_store.get_spot(db, lot.id, 3).state == SpotState.FREE

        retry = sweep_expired(db, lot.id, NOW)
        assert retry.processed == 1 and retry.failures == []

    def test_unknown_lot(self, db):
        with pytest.raises(InvalidLot):
            sweep_expired(db, 404, NOW)
