"""Tests for the occupancy-aware status projection."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from datetime import datetime, timedelta
from types import SimpleNamespace

import pytest
from unittest.mock import patch

from app.models.enums import Segment, SpotState, SubscriptionState
from app.models.subscription import Subscription
from app.services.status_service import (
    MODE_SIMPLE, MODE_ZONES, Stats, pick_subscription, project_status,
)

NOW = datetime(2024, 6, 15, 12, 0, 0)


def by_number(view):
    return {s.number: s for s in view.spots}


class TestPickSubscription:
    def test_latest_end_wins(self):
        a = SimpleNamespace(number=1, validity_end=NOW + timedelta(days=1))
        b = SimpleNamespace(number=2, validity_end=NOW + timedelta(days=5))
        assert pick_subscription([a, b]) is b
        assert pick_subscription([b, a]) is b

    def test_equal_end_highest_number_wins(self):
        a = SimpleNamespace(number=9, validity_end=NOW)
        b = SimpleNamespace(number=4, validity_end=NOW)
        assert pick_subscription([a, b]) is a


class TestStats:
    def test_counts_sum_to_total(self):
        stats = Stats()
        for state in (SpotState.FREE, SpotState.FREE, SpotState.OCCUPIED,
                      SpotState.RESERVED, SpotState.MAINTENANCE, SpotState.SUBSCRIBED):
            stats.add(state)
        assert stats.total == 6
        assert stats.free + stats.occupied + stats.reserved + stats.maintenance + stats.subscribed == 6


class TestProjectStatus:
    def test_simple_mode(self, db, lot, make_spots, park, subscribe):
        make_spots(lot.id, [1, 2, 3, 4])
        park(lot.id, "XY999ZZ", 2)
        subscribe(lot.id, 10, 4, NOW - timedelta(days=1), NOW + timedelta(days=1))

        view = project_status(db, lot.id, NOW)

        assert view.mode == MODE_SIMPLE
        spots = by_number(view)
        assert [spots[n].state for n in (1, 2, 3, 4)] == [
            SpotState.FREE, SpotState.OCCUPIED, SpotState.FREE, SpotState.SUBSCRIBED,
        ]
        assert spots[2].plate == "XY999ZZ"
        assert spots[4].subscription_number == 10
        assert view.stats == Stats(total=4, occupied=1, free=2, subscribed=1)
        assert view.per_segment["Car"].total == 4
        assert view.per_segment["Motorcycle"].total == 0

    def test_occupation_overrides_subscription_and_stored_state(self, db, lot, make_spots, park, subscribe):
        make_spots(lot.id, [1], state=SpotState.MAINTENANCE)
        make_spots(lot.id, [2])
        park(lot.id, "AAA111", 1)
        park(lot.id, "BBB222", 2)
        subscribe(lot.id, 1, 2, NOW - timedelta(days=1), NOW + timedelta(days=1))

        spots = by_number(project_status(db, lot.id, NOW))

        assert spots[1].state == SpotState.OCCUPIED
        assert spots[1].stored_state == SpotState.MAINTENANCE
        assert spots[2].state == SpotState.OCCUPIED
        assert spots[2].subscription_number == 1

    def test_closed_occupation_is_ignored(self, db, lot, make_spots, park):
        make_spots(lot.id, [1])
        park(lot.id, "GONE01", 1, closed=True)
        assert by_number(project_status(db, lot.id, NOW))[1].state == SpotState.FREE

    def test_future_subscription_not_in_force(self, db, lot, make_spots, subscribe):
        make_spots(lot.id, [1])
        subscribe(lot.id, 1, 1, NOW + timedelta(days=1), NOW + timedelta(days=30))
        assert by_number(project_status(db, lot.id, NOW))[1].state == SpotState.FREE

    def test_subscription_in_force_at_its_last_instant(self, db, lot, make_spots, subscribe):
        make_spots(lot.id, [1, 2])
        subscribe(lot.id, 1, 1, NOW - timedelta(days=30), NOW, holder="Ends now")
        subscribe(lot.id, 2, 2, NOW, NOW + timedelta(days=30), holder="Starts now")

        view = project_status(db, lot.id, NOW, sweep=True)

        spots = by_number(view)
        assert spots[1].state == SpotState.SUBSCRIBED
        assert spots[1].subscription_holder == "Ends now"
        assert spots[2].state == SpotState.SUBSCRIBED
        assert db.get(Subscription, (lot.id, 1)).state == SubscriptionState.ACTIVE

    def test_overlapping_subscriptions_pick_latest_end(self, db, lot, make_spots, subscribe):
        make_spots(lot.id, [5])
        subscribe(lot.id, 1, 5, NOW - timedelta(days=2), NOW + timedelta(days=1), holder="Early")
        subscribe(lot.id, 2, 5, NOW - timedelta(days=2), NOW + timedelta(days=9), holder="Late")

        spot = by_number(project_status(db, lot.id, NOW))[5]
        assert spot.subscription_number == 2
        assert spot.subscription_holder == "Late"

    def test_zone_mode_groups_and_puts_unzoned_last(self, db, lot, make_spots, park):
        make_spots(lot.id, [1, 2], zone="Sur")
        make_spots(lot.id, [3, 4], zone="Norte")
        make_spots(lot.id, [5], segment=Segment.MOTORCYCLE)
        park(lot.id, "NOR001", 3)

        view = project_status(db, lot.id, NOW)

        assert view.mode == MODE_ZONES
        assert [z.name for z in view.zones] == ["Norte", "Sur", None]
        norte = view.zones[0]
        assert norte.stats == Stats(total=2, occupied=1, free=1)
        assert [s.number for s in norte.per_segment["Car"].spots] == [3, 4]
        unzoned = view.zones[2]
        assert unzoned.per_segment["Motorcycle"].stats.total == 1
        assert view.stats.total == 5

    def test_expired_subscriptions_swept_before_projection(self, db, lot, make_spots, subscribe):
        make_spots(lot.id, [1], state=SpotState.SUBSCRIBED)
        subscribe(lot.id, 1, 1, NOW - timedelta(days=30), NOW - timedelta(days=1))

        view = project_status(db, lot.id, NOW, sweep=True)

        assert by_number(view)[1].state == SpotState.FREE
        assert db.get(Subscription, (lot.id, 1)).state == SubscriptionState.EXPIRED

    def test_sweep_can_be_skipped(self, db, lot, make_spots, subscribe):
        make_spots(lot.id, [1], state=SpotState.SUBSCRIBED)
        subscribe(lot.id, 1, 1, NOW - timedelta(days=30), NOW - timedelta(days=1))

        view = project_status(db, lot.id, NOW, sweep=False)

        assert by_number(view)[1].state == SpotState.SUBSCRIBED
        assert db.get(Subscription, (lot.id, 1)).state == SubscriptionState.ACTIVE

    def test_sweep_crash_does_not_break_the_read(self, db, lot, make_spots):
        make_spots(lot.id, [1, 2])
        with patch("app.services.status_service.sweep_expired", side_effect=RuntimeError("boom")):
            view = project_status(db, lot.id, NOW, sweep=True)
        assert view.stats.total == 2

    def test_empty_lot(self, db, lot):
        view = project_status(db, lot.id, NOW)
        assert view.mode == MODE_SIMPLE
        assert view.spots == []
        assert view.stats == Stats()
