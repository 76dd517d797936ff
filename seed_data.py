#!/usr/bin/env python3
"""
Seed Data Script

Creates the schema and initial data for the College Bus Pass Booking System:
buses with their stops, full seat availability, the settings row, and an admin
account. Existing buses with the same route code are left untouched.

Usage:
    python seed_data.py
    ADMIN_USERNAME=transport ADMIN_PASSWORD='S3cret!pass' python seed_data.py
"""

import os
import sys
from datetime import date, timedelta

from sqlalchemy.orm import Session

from src.admin.schemas import BookingSettings
from src.admin.settings_service import SettingsService
from src.auth.schemas import AdminCreate
from src.auth.service import AdminUserService
from src.buses.schemas import BusCreate, RouteStopCreate
from src.buses.service import BusService
from src.database import Base, SessionLocal, engine
from src.models import AdminSettings, Bus

# Fares are in paise
BUSES = [
    {
        "name": "Bus 1 - City Centre",
        "route_code": "R1",
        "total_seats": 50,
        "stops": [("Railway Station", 1200000), ("Market Square", 1100000), ("City Centre", 1000000)],
    },
    {
        "name": "Bus 2 - North Campus Road",
        "route_code": "R2",
        "total_seats": 45,
        "stops": [("Hill View", 1500000), ("North Gate", 1350000), ("Lake Road", 1250000)],
    },
    {
        "name": "Bus 3 - Airport Road",
        "route_code": "R3",
        "total_seats": 40,
        "stops": [("Airport Junction", 1800000), ("Tech Park", 1600000)],
    },
    {
        "name": "Bus 4 - Coastal Highway",
        "route_code": "R4",
        "total_seats": 40,
        "stops": [("Beach Road", 1700000), ("Fishing Harbour", 1650000), ("Lighthouse", 1550000)],
    },
]

def create_buses(db: Session) -> int:
    print("🚌 Creating buses...")
    service = BusService(db)
    created = 0

    for bus in BUSES:
        if db.query(Bus.id).filter(Bus.route_code == bus["route_code"]).first():
            print(f"✅ Route {bus['route_code']} already exists, skipping...")
            continue

        service.create_bus(BusCreate(
            name=bus["name"],
            route_code=bus["route_code"],
            total_seats=bus["total_seats"],
            stops=[RouteStopCreate(name=name, fare=fare) for name, fare in bus["stops"]],
        ))
        created += 1

    return created

def create_settings(db: Session) -> None:
    print("⚙️  Creating booking settings...")
    if db.get(AdminSettings, AdminSettings.SINGLETON_ID):
        print("✅ Settings already exist, skipping...")
        return

    go_date = date.today() + timedelta(days=14)
    SettingsService(db).save(BookingSettings(
        booking_enabled=False,
        go_date=go_date,
        return_date=go_date + timedelta(days=3),
    ))

def create_admin(db: Session, username: str, password: str) -> None:
    print("🔧 Creating admin account...")
    if AdminUserService.get_admin_by_username(db, username):
        print(f"✅ Admin '{username}' already exists, skipping...")
        return

    AdminUserService.create_admin(db, AdminCreate(username=username, password=password))

def main() -> bool:
    username = os.environ.get("ADMIN_USERNAME", "admin")
    password = os.environ.get("ADMIN_PASSWORD", "admin12345")

    print("🚀 Seeding College Bus Pass Booking System...")
    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        created = create_buses(db)
        create_settings(db)
        create_admin(db, username, password)

        print("=" * 50)
        print("✅ Seeding completed successfully!")
        print(f"  - {created} buses created")
        print(f"  - admin login: {username}")
        return True

    except Exception as e:
        print(f"❌ Error during seeding: {e}")
        db.rollback()
        return False

    finally:
        db.close()

if __name__ == "__main__":
    success = main()
    sys.exit(0 if success else 1)
