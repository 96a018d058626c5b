# app/database.py
"""
Database connection, session management, and table creation.
Uses SQLAlchemy with PostgreSQL (SQLite accepted for local runs). All models
are auto-imported here so create_tables() creates every table in one call.
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from app.config import settings


def _engine_options(url: str) -> dict:
    if url.startswith("sqlite"):
        # SQLite connections are shared across FastAPI's threadpool
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_pre_ping": True,       # Auto-reconnect if DB connection drops
        "pool_size": 10,
        "max_overflow": 20,
    }


engine = create_engine(
    settings.DATABASE_URL,
    echo=False,                      # Set True to log all SQL queries (debug only)
    **_engine_options(settings.DATABASE_URL),
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """FastAPI dependency — yields a DB session and closes it after request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def create_tables(bind=None):
    """
    Creates all DB tables on startup. Safe to call multiple times.
    Import all models here so SQLAlchemy knows about them.
    """
    from app.models.parking_lot import ParkingLot        # noqa
    from app.models.zone import Zone                     # noqa
    from app.models.spot import Spot                     # noqa
    from app.models.occupation import Occupation         # noqa
    from app.models.subscription import Subscription, SubscriptionVehicle  # noqa

    Base.metadata.create_all(bind=bind or engine)
