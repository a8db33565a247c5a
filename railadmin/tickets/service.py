from datetime import date
from typing import List, Optional

from sqlalchemy.orm import Session, joinedload

from railadmin.models import Ticket
from railadmin.tickets.repository import PLATFORM_CLASS
from railadmin.tickets.utils import generate_seat_labels
from railadmin.trains.fare_service import CLASS_INFO, TravelClass

class TicketService:
    @staticmethod
    def get_tickets(
        db: Session,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        working_station: Optional[str] = None,
        platform: Optional[bool] = None,
        limit: int = 100
    ) -> List[Ticket]:
        """Tickets by travel date range, most recently issued first"""
        query = db.query(Ticket).options(
            joinedload(Ticket.from_station),
            joinedload(Ticket.to_station),
            joinedload(Ticket.train)
        )
        if start_date:
            query = query.filter(Ticket.travel_date >= start_date)
        if end_date:
            query = query.filter(Ticket.travel_date <= end_date)
        if working_station:
            query = query.filter(Ticket.working_station == working_station)
        if platform is True:
            query = query.filter(Ticket.class_type == PLATFORM_CLASS)
        elif platform is False:
            query = query.filter(Ticket.class_type != PLATFORM_CLASS)
        return query.order_by(Ticket.created_at.desc(), Ticket.id.desc()).limit(limit).all()

    @staticmethod
    def get_ticket_by_travel_id(db: Session, travel_id: str) -> Optional[Ticket]:
        """Lookup across both namespaces; the oldest matching ticket wins"""
        return db.query(Ticket).filter(
            Ticket.travel_id == travel_id.strip().upper()
        ).order_by(Ticket.id).first()

    @staticmethod
    def get_seats(travel_class: TravelClass) -> List[str]:
        return generate_seat_labels(travel_class.value, CLASS_INFO[travel_class].total_seats)
