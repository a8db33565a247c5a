from datetime import datetime
from typing import List, Optional, Set

from sqlalchemy.orm import Session, joinedload

from railadmin.models import Ticket, TrainRoute, TrainSchedule, VerificationLog

PLATFORM_CLASS = "platform"

class TicketRepository:
    """Storage operations the issuance and verification flows are written against.

    Every write commits on its own: a ticket update and the log row that
    follows it are separate statements, never one transaction.
    """

    def __init__(self, db: Session):
        self.db = db

    def find_train_halts(self, train_id: int) -> List[TrainRoute]:
        """Halts of one train ordered along its path"""
        return self.db.query(TrainRoute).options(
            joinedload(TrainRoute.station)
        ).filter(
            TrainRoute.train_id == train_id
        ).order_by(TrainRoute.halt_order).all()

    def find_schedule(self, train_id: int) -> Set[int]:
        """Weekdays (date.weekday()) on which the train runs"""
        rows = self.db.query(TrainSchedule.day_of_week).filter(
            TrainSchedule.train_id == train_id,
            TrainSchedule.is_active == True
        ).all()
        return {row[0] for row in rows}

    def insert_ticket(self, ticket: Ticket) -> Ticket:
        self.db.add(ticket)
        self.db.commit()
        self.db.refresh(ticket)
        return ticket

    def find_ticket_by_travel_id(self, travel_id: str, platform: bool = False) -> Optional[Ticket]:
        """Exact travel-id lookup inside the standard or the platform namespace.

        Travel ids are not unique; the oldest matching ticket wins.
        """
        query = self.db.query(Ticket).filter(Ticket.travel_id == travel_id)
        if platform:
            query = query.filter(Ticket.class_type == PLATFORM_CLASS)
        else:
            query = query.filter(Ticket.class_type != PLATFORM_CLASS)
        return query.order_by(Ticket.id).first()

    def update_ticket_verification(self, ticket_id: int, verifier: str, timestamp: datetime) -> bool:
        """Mark a ticket verified only if nobody has yet.

        Returns False when another verifier got there first.
        """
        updated = self.db.query(Ticket).filter(
            Ticket.id == ticket_id,
            Ticket.is_verified == False
        ).update(
            {"is_verified": True, "verified_by": verifier, "verified_at": timestamp},
            synchronize_session=False
        )
        self.db.commit()
        return updated == 1

    def insert_verification_log(self, entry: VerificationLog) -> VerificationLog:
        self.db.add(entry)
        self.db.commit()
        self.db.refresh(entry)
        return entry
