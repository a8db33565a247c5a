import logging
from datetime import date, datetime, time
from typing import Callable, List, Optional

from sqlalchemy.orm import Session

from railadmin.models import Ticket, VerificationLog
from railadmin.auth.schemas import ActingUser
from railadmin.tickets.repository import TicketRepository, PLATFORM_CLASS
from railadmin.tickets.schemas import VerificationResult, VerificationStatus, Ticket as TicketOut
from railadmin.tickets.utils import is_expired

logger = logging.getLogger(__name__)

class VerificationInputError(ValueError):
    """Blank travel id; no attempt is recorded"""

class VerificationService:
    """On-train verification of travel ids.

    Checks run in a fixed order and the first match ends the attempt:
    not found, expired, already verified, valid. Each attempt writes
    exactly one verification log row.
    """

    def __init__(self, db: Session, clock: Callable[[], datetime] = datetime.now):
        self.db = db
        self.clock = clock
        self.repository = TicketRepository(db)

    def verify(self, travel_id: str, acting_user: ActingUser, platform: bool = False) -> VerificationResult:
        travel_id = (travel_id or "").strip().upper()
        if not travel_id:
            raise VerificationInputError("Please enter Travel ID")

        now = self.clock().replace(microsecond=0)
        verifier = acting_user.display_name
        prefix = "Platform ticket" if platform else "Ticket"

        ticket = self.repository.find_ticket_by_travel_id(travel_id, platform=platform)

        if ticket is None:
            message = "Platform ticket not found" if platform else "Travel ID not found - possible fraud attempt"
            log = self._log(travel_id, None, acting_user, VerificationStatus.INVALID, "Travel ID not found", now, fraud=True)
            logger.warning("Possible fraud: %s not found, checked by %s", travel_id, verifier)
            return self._result(travel_id, VerificationStatus.INVALID, message, None, log, fraud=True)

        if is_expired(ticket.expires_at, now):
            log = self._log(travel_id, ticket, acting_user, VerificationStatus.EXPIRED, "Ticket has expired", now)
            logger.info("%s %s expired at %s", prefix, travel_id, ticket.expires_at)
            return self._result(travel_id, VerificationStatus.EXPIRED, f"{prefix} has expired", ticket, log)

        if ticket.is_verified:
            return self._duplicate(travel_id, ticket, acting_user, now, prefix)

        if not self.repository.update_ticket_verification(ticket.id, verifier, now):
            # Another verifier committed between the read and the update
            self.db.refresh(ticket)
            return self._duplicate(travel_id, ticket, acting_user, now, prefix)

        self.db.refresh(ticket)
        log = self._log(travel_id, ticket, acting_user, VerificationStatus.VALID, "Successfully verified", now)
        logger.info("%s %s verified by %s", prefix, travel_id, verifier)
        return self._result(travel_id, VerificationStatus.VALID, f"{prefix} verified successfully", ticket, log)

    def verify_platform(self, travel_id: str, acting_user: ActingUser) -> VerificationResult:
        return self.verify(travel_id, acting_user, platform=True)

    def _duplicate(self, travel_id: str, ticket: Ticket, acting_user: ActingUser, now: datetime, prefix: str):
        when = ticket.verified_at.strftime("%Y-%m-%d %H:%M:%S") if ticket.verified_at else "unknown time"
        details = f"Already verified by {ticket.verified_by} at {when}"
        log = self._log(travel_id, ticket, acting_user, VerificationStatus.DUPLICATE, details, now)
        logger.warning("Duplicate verification of %s by %s (%s)", travel_id, acting_user.display_name, details)
        return self._result(travel_id, VerificationStatus.DUPLICATE, f"{prefix} already verified", ticket, log)

    def _log(
        self,
        travel_id: str,
        ticket: Optional[Ticket],
        acting_user: ActingUser,
        status: VerificationStatus,
        details: str,
        now: datetime,
        fraud: bool = False
    ) -> VerificationLog:
        entry = VerificationLog(
            travel_id=travel_id,
            ticket_id=ticket.id if ticket is not None else None,
            verified_by=acting_user.display_name,
            status=status.value,
            fraud_attempt=fraud,
            details=details,
            working_station=acting_user.working_station,
            verified_at=now
        )
        return self.repository.insert_verification_log(entry)

    @staticmethod
    def _result(travel_id, status, message, ticket, log, fraud=False) -> VerificationResult:
        return VerificationResult(
            travel_id=travel_id,
            status=status,
            is_valid=status == VerificationStatus.VALID,
            message=message,
            fraud_attempt=fraud,
            ticket=TicketOut.model_validate(ticket) if ticket is not None else None,
            log_id=log.id
        )

    # Audit log queries

    def get_logs(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        status: Optional[VerificationStatus] = None,
        fraud_only: bool = False,
        working_station: Optional[str] = None,
        limit: int = 100
    ) -> List[VerificationLog]:
        """Verification attempts, newest first"""
        query = self.db.query(VerificationLog)
        if start_date:
            query = query.filter(VerificationLog.verified_at >= datetime.combine(start_date, time.min))
        if end_date:
            query = query.filter(VerificationLog.verified_at <= datetime.combine(end_date, time.max))
        if status:
            query = query.filter(VerificationLog.status == status.value)
        if fraud_only:
            query = query.filter(VerificationLog.fraud_attempt == True)
        if working_station:
            query = query.filter(VerificationLog.working_station == working_station)
        return query.order_by(VerificationLog.verified_at.desc(), VerificationLog.id.desc()).limit(limit).all()

    def get_verified_tickets(self, verifier: str, platform: Optional[bool] = None, limit: int = 100) -> List[Ticket]:
        """Tickets a verifier has marked verified, latest first"""
        query = self.db.query(Ticket).filter(
            Ticket.is_verified == True,
            Ticket.verified_by == verifier
        )
        if platform is True:
            query = query.filter(Ticket.class_type == PLATFORM_CLASS)
        elif platform is False:
            query = query.filter(Ticket.class_type != PLATFORM_CLASS)
        return query.order_by(Ticket.verified_at.desc(), Ticket.id.desc()).limit(limit).all()
