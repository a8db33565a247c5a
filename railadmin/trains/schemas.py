from pydantic import BaseModel, Field, validator
from typing import List, Optional
from datetime import datetime, time, date
from decimal import Decimal

# Halt Models
class HaltPricing(BaseModel):
    """Per-class fares quoted from a halt to the end of the line"""
    general_price: Optional[Decimal] = Field(None, ge=0)
    sleeper_price: Optional[Decimal] = Field(None, ge=0)
    ac_1_tier_price: Optional[Decimal] = Field(None, ge=0)
    ac_2_tier_price: Optional[Decimal] = Field(None, ge=0)
    ac_3_tier_price: Optional[Decimal] = Field(None, ge=0)
    ac_3_economy_price: Optional[Decimal] = Field(None, ge=0)
    chair_car_price: Optional[Decimal] = Field(None, ge=0)
    second_sitting_price: Optional[Decimal] = Field(None, ge=0)

class HaltCreate(HaltPricing):
    station_id: int
    distance_from_start: Decimal = Field(Decimal('0'), ge=0)
    arrival_time: Optional[time] = None
    departure_time: Optional[time] = None
    halt_duration: Optional[int] = Field(None, ge=0)  # minutes; 0 means pass-through

class Halt(HaltCreate):
    id: int
    train_id: int
    halt_order: int
    station_name: Optional[str] = None
    station_code: Optional[str] = None

    class Config:
        from_attributes = True

class ScheduleEntry(BaseModel):
    day_of_week: int = Field(..., ge=0, le=6)
    day_name: str
    is_active: bool

# Train Models
class TrainCreate(BaseModel):
    name: str
    number: str
    halts: List[HaltCreate] = []
    schedule_days: List[int] = []  # date.weekday() values, Monday=0

    @validator('schedule_days')
    def validate_days(cls, v):
        for day in v:
            if day < 0 or day > 6:
                raise ValueError('Schedule days must be between 0 (Monday) and 6 (Sunday)')
        return sorted(set(v))

class TrainUpdate(BaseModel):
    name: Optional[str] = None
    number: Optional[str] = None
    halts: Optional[List[HaltCreate]] = None
    schedule_days: Optional[List[int]] = None

    @validator('schedule_days')
    def validate_days(cls, v):
        if v is None:
            return v
        for day in v:
            if day < 0 or day > 6:
                raise ValueError('Schedule days must be between 0 (Monday) and 6 (Sunday)')
        return sorted(set(v))

class TrainSummary(BaseModel):
    id: int
    name: str
    number: str
    working_station: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class TrainDetail(TrainSummary):
    halts: List[Halt] = []
    schedule: List[ScheduleEntry] = []

class TrainList(BaseModel):
    trains: List[TrainSummary]
    total: int

# Fare & Route Resolution Models
class TravelClassInfo(BaseModel):
    class_type: str
    display_name: str
    short_name: str
    default_price: Decimal
    total_seats: int

class ClassFare(BaseModel):
    """A class offered on a train from the origin halt"""
    class_type: str
    display_name: str
    short_name: str
    base_price: Decimal
    total_seats: int
    is_default_price: bool = False

class AvailableTrain(BaseModel):
    id: int
    name: str
    number: str
    from_halt_order: int
    to_halt_order: int
    departure_time: Optional[time] = None
    arrival_time: Optional[time] = None
    distance_km: Decimal
    classes: List[ClassFare]

class AvailableTrainList(BaseModel):
    from_station_id: int
    to_station_id: int
    travel_date: date
    trains: List[AvailableTrain]
    total: int

class RouteDistance(BaseModel):
    from_station_id: int
    to_station_id: int
    distance_km: Decimal
    train_id: Optional[int] = None
