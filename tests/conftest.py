"""Shared fixtures: in-memory SQLite session, a lot, row factories, API client."""

import os
import sys
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["API_KEY"] = ""
os.environ["LOG_TO_FILE"] = "false"

from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import create_tables, get_db
from app.models.enums import Segment, SpotState, SubscriptionState
from app.models.occupation import Occupation
from app.models.parking_lot import ParkingLot
from app.models.spot import Spot
from app.models.subscription import Subscription, SubscriptionVehicle


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_tables(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def lot(db):
    lot = ParkingLot(name="Test lot", capacity=0, last_spot_number=0)
    db.add(lot)
    db.commit()
    return lot


@pytest.fixture
def make_spots(db):
    def _make(lot_id, numbers, segment=Segment.CAR, state=SpotState.FREE, zone=None):
        for n in numbers:
            db.add(Spot(lot_id=lot_id, number=n, segment=segment, state=state, zone=zone))
        lot = db.get(ParkingLot, lot_id)
        lot.last_spot_number = max([lot.last_spot_number, *numbers])
        db.commit()
    return _make


@pytest.fixture
def park(db):
    def _park(lot_id, plate, spot_number, closed=False):
        now = datetime.utcnow()
        occupation = Occupation(
            lot_id=lot_id,
            plate=plate,
            spot_number=spot_number,
            entry_time=now - timedelta(hours=2),
            exit_time=now - timedelta(hours=1) if closed else None,
        )
        db.add(occupation)
        db.commit()
        return occupation
    return _park


@pytest.fixture
def subscribe(db):
    def _subscribe(lot_id, number, spot_number, start, end,
                   state=SubscriptionState.ACTIVE, holder="Holder", plates=()):
        sub = Subscription(
            lot_id=lot_id, number=number, holder=holder, spot_number=spot_number,
            validity_start=start, validity_end=end, state=state,
        )
        sub.vehicles = [SubscriptionVehicle(plate=p) for p in plates]
        db.add(sub)
        db.commit()
        return sub
    return _subscribe


@pytest.fixture
def client(session_factory):
    from app.main import app

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
