# scripts/setup/init_db.py
"""
Initialize database — creates all tables, optionally registers a first lot.
Run once before first launch, or after adding new models.
Usage: python scripts/setup/init_db.py [--lot-name "Main lot"] [--cars 20 --motorcycles 5 --trucks 3]
"""

import argparse
import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

from app.database import create_tables, engine, SessionLocal
from app.config import settings
from app.exceptions import ParkingCoreError
from app.models.enums import Segment
from app.models.parking_lot import ParkingLot
from app.services.capacity_service import sync_capacity
from sqlalchemy import inspect, text


def seed_lot(name: str, cars: int, motorcycles: int, trucks: int):
    db = SessionLocal()
    try:
        lot = ParkingLot(name=name, capacity=0, last_spot_number=0)
        db.add(lot)
        db.commit()
        print(f"Lot {lot.id} '{name}' registered")

        targets = {Segment.CAR: cars, Segment.MOTORCYCLE: motorcycles, Segment.LIGHT_TRUCK: trucks}
        result = sync_capacity(db, lot.id, targets)
        for seg, numbers in result.created.items():
            print(f"   {seg.label}: spots {numbers[0]}-{numbers[-1]}")
    finally:
        db.close()


def main():
    parser = argparse.ArgumentParser(description="Create tables and optionally seed a lot")
    parser.add_argument("--lot-name", help="Register a lot with this name")
    parser.add_argument("--cars", type=int, default=0)
    parser.add_argument("--motorcycles", type=int, default=0)
    parser.add_argument("--trucks", type=int, default=0)
    args = parser.parse_args()

    print("Parking inventory DB initialization")
    print("=" * 40)
    print(f"Database: {settings.DATABASE_URL}")

    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        print("Database connection OK")
    except Exception as e:
        print(f"Cannot connect to database: {e}")
        print("\nMake sure PostgreSQL is running:")
        print("  docker-compose up -d db")
        print("  # or: sudo systemctl start postgresql")
        sys.exit(1)

    print("\nCreating tables...")
    create_tables()

    tables = sorted(inspect(engine).get_table_names())
    print(f"\nTables in database ({len(tables)} total):")
    for t in tables:
        print(f"   - {t}")

    if args.lot_name:
        print()
        try:
            seed_lot(args.lot_name, args.cars, args.motorcycles, args.trucks)
        except ParkingCoreError as e:
            print(f"Seeding failed: {e.message}")
            sys.exit(1)

    print("\nDatabase ready! You can now start the backend:")
    print(f"   uvicorn app.main:app --host {settings.BACKEND_HOST} --port {settings.BACKEND_PORT} --reload")


if __name__ == "__main__":
    main()
