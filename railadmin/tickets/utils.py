import random
from datetime import date, datetime, time, timedelta
from typing import List, Optional

from railadmin.config import settings

DEFAULT_STATION_CODE = "GN"

def generate_travel_id(station_code: Optional[str] = None) -> str:
    """Travel id like ``WH-48213``: origin code plus five random digits.

    No collision check is made against issued tickets.
    """
    code = (station_code or "").strip().upper() or DEFAULT_STATION_CODE
    return f"{code}-{random.randint(10000, 99999)}"

def generate_platform_travel_id(issued_at: Optional[datetime] = None) -> str:
    """Platform travel id like ``PLT-1718000000000-42``"""
    issued_at = issued_at or datetime.now()
    millis = int(issued_at.timestamp() * 1000)
    return f"PLT-{millis}-{random.randint(0, 999)}"

def calculate_expiry(travel_date: date, travel_time: time, hours: Optional[int] = None) -> datetime:
    """Expiry of a standard ticket: travel date at issue time-of-day plus the validity window"""
    hours = settings.TICKET_VALIDITY_HOURS if hours is None else hours
    return datetime.combine(travel_date, travel_time) + timedelta(hours=hours)

def calculate_platform_expiry(issued_at: datetime, hours: Optional[int] = None) -> datetime:
    hours = settings.TICKET_VALIDITY_HOURS if hours is None else hours
    return issued_at + timedelta(hours=hours)

def is_expired(expires_at: datetime, now: Optional[datetime] = None) -> bool:
    """A ticket is still valid at exactly its expiry instant"""
    now = now or datetime.now()
    return now > expires_at

def generate_seat_labels(travel_class: str, total_seats: int, limit: Optional[int] = None) -> List[str]:
    """Seat labels ``GENERAL-1`` .. ``GENERAL-n``; occupancy is not tracked"""
    limit = settings.MAX_SEATS_PER_CLASS if limit is None else limit
    count = min(total_seats, limit)
    prefix = travel_class.upper()
    return [f"{prefix}-{n}" for n in range(1, count + 1)]
