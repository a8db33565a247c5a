from typing import Dict, Iterable, List, NamedTuple, Optional, Tuple
from datetime import date
from decimal import Decimal
from enum import Enum

from sqlalchemy.orm import Session, selectinload

from railadmin.models import Train, TrainRoute
from railadmin.tickets.repository import TicketRepository
from railadmin.trains.schemas import AvailableTrain, ClassFare, TravelClassInfo

class TravelClass(str, Enum):
    """Travel classes sold on a train"""
    GENERAL = "general"
    SLEEPER = "sleeper"
    AC_3_TIER = "ac_3_tier"
    AC_2_TIER = "ac_2_tier"
    AC_1_TIER = "ac_1_tier"
    CHAIR_CAR = "chair_car"
    SECOND_SITTING = "second_sitting"
    AC_3_ECONOMY = "ac_3_economy"

class ClassInfo(NamedTuple):
    price_field: str
    display_name: str
    short_name: str
    default_price: Decimal
    total_seats: int

CLASS_INFO: Dict[TravelClass, ClassInfo] = {
    TravelClass.GENERAL: ClassInfo("general_price", "General", "GEN", Decimal('50'), 80),
    TravelClass.SLEEPER: ClassInfo("sleeper_price", "Sleeper", "SL", Decimal('100'), 72),
    TravelClass.AC_3_TIER: ClassInfo("ac_3_tier_price", "3rd AC", "3A", Decimal('250'), 64),
    TravelClass.AC_2_TIER: ClassInfo("ac_2_tier_price", "2nd AC", "2A", Decimal('400'), 48),
    TravelClass.AC_1_TIER: ClassInfo("ac_1_tier_price", "1st AC", "1A", Decimal('600'), 24),
    TravelClass.CHAIR_CAR: ClassInfo("chair_car_price", "Chair Car", "CC", Decimal('120'), 78),
    TravelClass.SECOND_SITTING: ClassInfo("second_sitting_price", "2nd Sitting", "2S", Decimal('40'), 108),
    TravelClass.AC_3_ECONOMY: ClassInfo("ac_3_economy_price", "3rd AC Economy", "3E", Decimal('200'), 83),
}

def class_catalogue() -> List[TravelClassInfo]:
    return [
        TravelClassInfo(
            class_type=travel_class.value,
            display_name=info.display_name,
            short_name=info.short_name,
            default_price=info.default_price,
            total_seats=info.total_seats
        )
        for travel_class, info in CLASS_INFO.items()
    ]

def stopping_halts(halts: Iterable[TrainRoute]) -> List[TrainRoute]:
    """Halts that take part in route and fare resolution.

    A zero-minute halt is a pass-through and is skipped; an unknown
    duration counts as a stop.
    """
    return [halt for halt in halts if halt.halt_duration != 0]

def resolve_route(
    halts: Iterable[TrainRoute],
    from_station_id: int,
    to_station_id: int
) -> Optional[Tuple[TrainRoute, TrainRoute]]:
    """Return the (origin, destination) halts if the train carries the pair in order"""
    stops = stopping_halts(halts)
    from_halt = next((h for h in stops if h.station_id == from_station_id), None)
    to_halt = next((h for h in stops if h.station_id == to_station_id), None)

    if from_halt is None or to_halt is None:
        return None
    if from_halt.halt_order >= to_halt.halt_order:
        return None
    return from_halt, to_halt

def runs_on(active_days: Iterable[int], travel_date: date) -> bool:
    return travel_date.weekday() in set(active_days)

def halt_distance(from_halt: TrainRoute, to_halt: TrainRoute) -> Decimal:
    return abs(Decimal(to_halt.distance_from_start or 0) - Decimal(from_halt.distance_from_start or 0))

def class_price(origin_halt: Optional[TrainRoute], travel_class: TravelClass) -> Tuple[Decimal, bool]:
    """Fare for one class from the origin halt, and whether the default was used"""
    info = CLASS_INFO[travel_class]
    price = getattr(origin_halt, info.price_field, None) if origin_halt is not None else None
    if not price:
        return info.default_price, True
    return Decimal(price), False

def fare_table(origin_halt: Optional[TrainRoute]) -> List[ClassFare]:
    """Every class with its price from the origin halt, falling back to class defaults"""
    fares = []
    for travel_class, info in CLASS_INFO.items():
        price, is_default = class_price(origin_halt, travel_class)
        fares.append(ClassFare(
            class_type=travel_class.value,
            display_name=info.display_name,
            short_name=info.short_name,
            base_price=price,
            total_seats=info.total_seats,
            is_default_price=is_default
        ))
    return fares

class RouteResolver:
    """Finds trains serving a station pair on a date, with distance and fares"""

    def __init__(self, db: Session):
        self.db = db
        self.repository = TicketRepository(db)

    def _candidate_trains(self, working_station: Optional[str] = None) -> List[Train]:
        query = self.db.query(Train).options(
            selectinload(Train.halts),
            selectinload(Train.schedules)
        )
        if working_station:
            query = query.filter(Train.working_station == working_station)
        return query.order_by(Train.id).all()

    def available_trains(
        self,
        from_station_id: int,
        to_station_id: int,
        travel_date: date,
        working_station: Optional[str] = None
    ) -> List[AvailableTrain]:
        """Trains that stop at both stations in order and run on the travel date"""
        available = []

        for train in self._candidate_trains(working_station):
            resolved = resolve_route(train.halts, from_station_id, to_station_id)
            if not resolved:
                continue

            active_days = [s.day_of_week for s in train.schedules if s.is_active]
            if not runs_on(active_days, travel_date):
                continue

            from_halt, to_halt = resolved
            available.append(AvailableTrain(
                id=train.id,
                name=train.name,
                number=train.number,
                from_halt_order=from_halt.halt_order,
                to_halt_order=to_halt.halt_order,
                departure_time=from_halt.departure_time,
                arrival_time=to_halt.arrival_time,
                distance_km=halt_distance(from_halt, to_halt),
                classes=fare_table(from_halt)
            ))

        return available

    def resolve_for_train(
        self,
        train_id: int,
        from_station_id: int,
        to_station_id: int,
        travel_date: date
    ) -> Optional[Tuple[TrainRoute, TrainRoute]]:
        """Origin/destination halts of one train, or None if it does not qualify"""
        halts = self.repository.find_train_halts(train_id)
        resolved = resolve_route(halts, from_station_id, to_station_id)
        if not resolved:
            return None
        if not runs_on(self.repository.find_schedule(train_id), travel_date):
            return None
        return resolved

    def route_distance(self, from_station_id: int, to_station_id: int) -> Tuple[Decimal, Optional[int]]:
        """Distance between two stations on the first train stopping at both.

        Direction is not checked and disagreeing trains are not reconciled.
        Returns (0, None) when no train links the pair.
        """
        if from_station_id == to_station_id:
            return Decimal('0'), None

        halts = self.db.query(TrainRoute).filter(
            TrainRoute.station_id.in_([from_station_id, to_station_id])
        ).order_by(TrainRoute.train_id, TrainRoute.halt_order).all()

        by_train: Dict[int, List[TrainRoute]] = {}
        for halt in stopping_halts(halts):
            by_train.setdefault(halt.train_id, []).append(halt)

        for train_id, train_halts in by_train.items():
            from_halt = next((h for h in train_halts if h.station_id == from_station_id), None)
            to_halt = next((h for h in train_halts if h.station_id == to_station_id), None)
            if from_halt is None or to_halt is None:
                continue
            distance = halt_distance(from_halt, to_halt)
            if distance > 0:
                return distance, train_id

        return Decimal('0'), None
