from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime, date, time
from decimal import Decimal
from enum import Enum

# Issuance Models
class TicketCreate(BaseModel):
    """Counter sale of a standard ticket; selections are checked by the issuance service"""
    passenger_name: str = ""
    passenger_count: int = Field(1, ge=1)
    from_station_id: Optional[int] = None
    to_station_id: Optional[int] = None
    train_id: Optional[int] = None
    class_type: Optional[str] = None
    seat_number: Optional[str] = None
    price: Optional[Decimal] = None  # per passenger; fare table price when omitted
    travel_date: Optional[date] = None  # today when omitted

class PlatformTicketCreate(BaseModel):
    passenger_name: str = ""
    passenger_count: int = Field(1, ge=1)
    price: Optional[Decimal] = None  # per passenger; PLATFORM_TICKET_PRICE when omitted
    travel_date: Optional[date] = None

class Ticket(BaseModel):
    id: int
    travel_id: str
    passenger_name: str
    passenger_count: int
    from_station_id: Optional[int] = None
    to_station_id: Optional[int] = None
    from_station_name: Optional[str] = None
    to_station_name: Optional[str] = None
    train_id: Optional[int] = None
    train_name: Optional[str] = None
    train_number: Optional[str] = None
    kilometres: Decimal
    travel_date: date
    created_time: time
    departure_time: Optional[time] = None
    arrival_time: Optional[time] = None
    price: Decimal
    total_price: Decimal
    ticket_class: str
    class_type: str
    seat_number: Optional[str] = None
    expires_at: datetime
    is_verified: bool
    verified_by: Optional[str] = None
    verified_at: Optional[datetime] = None
    created_by: str
    working_station: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class TicketList(BaseModel):
    tickets: List[Ticket]
    total: int

class SeatList(BaseModel):
    class_type: str
    seats: List[str]
    total: int

# Verification Models
class VerificationStatus(str, Enum):
    VALID = "valid"
    INVALID = "invalid"  # travel id not found
    EXPIRED = "expired"
    DUPLICATE = "duplicate"

class VerificationRequest(BaseModel):
    travel_id: str = Field(..., min_length=1)

class VerificationResult(BaseModel):
    travel_id: str
    status: VerificationStatus
    is_valid: bool
    message: str
    fraud_attempt: bool = False
    ticket: Optional[Ticket] = None
    log_id: Optional[int] = None

class VerificationLog(BaseModel):
    id: int
    travel_id: str
    ticket_id: Optional[int] = None
    verified_by: str
    status: VerificationStatus
    fraud_attempt: bool
    details: Optional[str] = None
    working_station: Optional[str] = None
    verified_at: datetime

    class Config:
        from_attributes = True

class VerificationLogList(BaseModel):
    logs: List[VerificationLog]
    total: int
