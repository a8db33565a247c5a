#!/usr/bin/env python3

from datetime import time
from decimal import Decimal

from railadmin.database import SessionLocal, init_db
from railadmin.auth.utils import get_password_hash
from railadmin.models import (
    Station, Train, TrainRoute, TrainSchedule, Staff, Ticket, VerificationLog, DailyReport
)

NETWORK = "Washim"

def create_seed_data():
    init_db()
    db = SessionLocal()

    try:
        print("🚀 Creating seed data for the Washim station network...")

        # Clear existing data (in reverse dependency order)
        print("Clearing existing data...")
        db.query(VerificationLog).delete()
        db.query(Ticket).delete()
        db.query(DailyReport).delete()
        db.query(TrainSchedule).delete()
        db.query(TrainRoute).delete()
        db.query(Train).delete()
        db.query(Station).delete()
        db.query(Staff).delete()

        # 1. Create Stations
        print("Creating stations...")
        stations = {
            code: Station(name=name, code=code, address=address, working_station=NETWORK)
            for name, code, address in [
                ("Washim", "WH", "Station Road, Washim"),
                ("Akola", "AK", "Akola Junction"),
                ("Nagpur", "NG", "Nagpur Junction"),
                ("Mumbai", "MB", "Chhatrapati Shivaji Terminus"),
                ("Pune", "PN", "Pune Junction"),
            ]
        }
        db.add_all(stations.values())
        db.flush()

        # 2. Create Trains with halts
        print("Creating trains...")
        def halt(code, km, arrival, departure, duration, general, sleeper=None, ac_3=None):
            return TrainRoute(
                station_id=stations[code].id,
                distance_from_start=Decimal(km),
                arrival_time=arrival,
                departure_time=departure,
                halt_duration=duration,
                general_price=general,
                sleeper_price=sleeper,
                ac_3_tier_price=ac_3
            )

        trains = [
            (
                Train(name="Washim Nagpur Express", number="17641", working_station=NETWORK),
                [
                    halt("WH", "0", None, time(6, 0), None, Decimal("90"), Decimal("180"), Decimal("480")),
                    halt("AK", "80", time(7, 30), time(7, 40), 10, Decimal("70"), Decimal("150")),
                    halt("NG", "330", time(12, 15), None, None, None),
                ],
                range(7)
            ),
            (
                Train(name="Deccan Link", number="11205", working_station=NETWORK),
                [
                    halt("PN", "0", None, time(21, 0), None, Decimal("320"), Decimal("540"), Decimal("1400")),
                    halt("WH", "540", time(7, 5), time(7, 15), 10, Decimal("260"), Decimal("430")),
                    halt("AK", "620", time(8, 40), time(8, 40), 0, None),
                    halt("MB", "1010", time(15, 30), None, None, None),
                ],
                [0, 2, 4]  # Monday, Wednesday, Friday
            ),
        ]
        for train, halts, days in trains:
            for order, route_halt in enumerate(halts, start=1):
                route_halt.halt_order = order
            train.halts = halts
            train.schedules = [TrainSchedule(day_of_week=day, is_active=True) for day in days]
            db.add(train)
        db.flush()

        # 3. Create Staff
        print("Creating staff...")
        staff = [
            Staff(staff_id="TC001", name="Ravi Kumar", role="ticket_creator",
                  password_hash=get_password_hash("password123"), working_station=NETWORK),
            Staff(staff_id="TTE001", name="Sunita Patil", role="tte",
                  password_hash=get_password_hash("password123"), working_station=NETWORK),
        ]
        db.add_all(staff)

        # Commit all changes
        db.commit()
        print("✅ Successfully created seed data!")
        print(f"Created:")
        print(f"  - {len(stations)} stations")
        print(f"  - {len(trains)} trains")
        print(f"  - {len(staff)} staff members")

    except Exception as e:
        print(f"❌ Error creating seed data: {e}")
        db.rollback()
        raise
    finally:
        db.close()

if __name__ == "__main__":
    create_seed_data()
