import logging
from datetime import datetime
from decimal import Decimal
from typing import Callable, Optional

from sqlalchemy.orm import Session

from railadmin.config import settings
from railadmin.models import Station, Ticket
from railadmin.auth.schemas import ActingUser, UserRole
from railadmin.tickets.repository import TicketRepository, PLATFORM_CLASS
from railadmin.tickets.schemas import TicketCreate, PlatformTicketCreate
from railadmin.tickets.utils import (
    generate_travel_id, generate_platform_travel_id, calculate_expiry, calculate_platform_expiry
)
from railadmin.trains.fare_service import RouteResolver, TravelClass, class_price, halt_distance

logger = logging.getLogger(__name__)

class TicketIssuanceError(ValueError):
    """Issuance request rejected before anything was written"""

class TicketIssuanceService:
    """Counter sale of standard and platform tickets"""

    def __init__(self, db: Session, clock: Callable[[], datetime] = datetime.now):
        self.db = db
        self.clock = clock
        self.repository = TicketRepository(db)
        self.resolver = RouteResolver(db)

    def _now(self) -> datetime:
        return self.clock().replace(microsecond=0)

    @staticmethod
    def _passenger_name(name: Optional[str]) -> str:
        name = (name or "").strip()
        if not name:
            raise TicketIssuanceError("Please enter passenger name")
        return name

    @staticmethod
    def _check_price(price: Optional[Decimal]) -> Decimal:
        if price is None or price <= 0:
            raise TicketIssuanceError("Please set a valid price")
        return Decimal(price)

    def _check_origin(self, from_station: Station, acting_user: ActingUser):
        """Ticket creators sell only from the station they work at"""
        if acting_user.role != UserRole.TICKET_CREATOR or not acting_user.working_station:
            return
        if from_station.name.strip().lower() != acting_user.working_station.strip().lower():
            raise TicketIssuanceError("From station must be your working station")

    def issue_ticket(self, request: TicketCreate, acting_user: ActingUser) -> Ticket:
        """Validate a standard ticket sale, price it and store it"""
        passenger_name = self._passenger_name(request.passenger_name)

        if not request.from_station_id or not request.to_station_id:
            raise TicketIssuanceError("Please select both from and to stations")
        from_station = self.db.get(Station, request.from_station_id)
        to_station = self.db.get(Station, request.to_station_id)
        if from_station is None or to_station is None:
            raise TicketIssuanceError("Please select both from and to stations")
        self._check_origin(from_station, acting_user)

        if not request.train_id:
            raise TicketIssuanceError("Please select a train")
        try:
            travel_class = TravelClass(request.class_type)
        except ValueError:
            raise TicketIssuanceError("Please select a class")
        if not (request.seat_number or "").strip():
            raise TicketIssuanceError("Please select a seat")

        now = self._now()
        travel_date = request.travel_date or now.date()

        resolved = self.resolver.resolve_for_train(
            request.train_id, from_station.id, to_station.id, travel_date
        )
        if not resolved:
            raise TicketIssuanceError("Selected train does not serve this route on the travel date")
        from_halt, to_halt = resolved

        distance = halt_distance(from_halt, to_halt)
        if distance <= 0:
            raise TicketIssuanceError("Route distance not available")

        if request.price is None:
            price, _ = class_price(from_halt, travel_class)
        else:
            price = request.price
        price = self._check_price(price)
        total_price = price * request.passenger_count

        ticket = Ticket(
            travel_id=generate_travel_id(from_station.code),
            passenger_name=passenger_name,
            passenger_count=request.passenger_count,
            from_station_id=from_station.id,
            to_station_id=to_station.id,
            train_id=request.train_id,
            kilometres=distance,
            travel_date=travel_date,
            created_time=now.time(),
            departure_time=from_halt.departure_time,
            arrival_time=to_halt.arrival_time,
            price=price,
            total_price=total_price,
            ticket_class="general",
            class_type=travel_class.value,
            seat_number=request.seat_number.strip(),
            expires_at=calculate_expiry(travel_date, now.time()),
            is_verified=False,
            created_by=acting_user.display_name,
            working_station=acting_user.working_station,
            created_at=now
        )
        ticket = self.repository.insert_ticket(ticket)

        logger.info(
            "Ticket %s issued by %s: %s -> %s, %s x%d, total %s",
            ticket.travel_id, ticket.created_by, from_station.code, to_station.code,
            ticket.class_type, ticket.passenger_count, ticket.total_price
        )
        return ticket

    def issue_platform_ticket(self, request: PlatformTicketCreate, acting_user: ActingUser) -> Ticket:
        """Platform pass valid for a fixed window from the moment of sale"""
        passenger_name = self._passenger_name(request.passenger_name)
        if not acting_user.working_station:
            raise TicketIssuanceError("Working station not found. Please login again.")

        price = request.price
        if price is None:
            price = Decimal(str(settings.PLATFORM_TICKET_PRICE))
        price = self._check_price(price)

        now = self._now()
        ticket = Ticket(
            travel_id=generate_platform_travel_id(now),
            passenger_name=passenger_name,
            passenger_count=request.passenger_count,
            from_station_id=None,
            to_station_id=None,
            train_id=None,
            kilometres=Decimal('0'),
            travel_date=request.travel_date or now.date(),
            created_time=now.time(),
            price=price,
            total_price=price * request.passenger_count,
            ticket_class="general",
            class_type=PLATFORM_CLASS,
            seat_number=None,
            expires_at=calculate_platform_expiry(now),
            is_verified=False,
            created_by=acting_user.display_name,
            working_station=acting_user.working_station,
            created_at=now
        )
        ticket = self.repository.insert_ticket(ticket)

        logger.info(
            "Platform ticket %s issued by %s for %d passenger(s)",
            ticket.travel_id, ticket.created_by, ticket.passenger_count
        )
        return ticket
