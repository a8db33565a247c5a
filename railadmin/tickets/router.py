import logging
from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from typing import Optional
from datetime import date

from railadmin.database import get_db
from railadmin.auth.dependencies import get_current_user, require_ticket_creator, require_tte
from railadmin.auth.schemas import ActingUser
from railadmin.tickets.schemas import (
    Ticket, TicketCreate, PlatformTicketCreate, TicketList, SeatList,
    VerificationRequest, VerificationResult, VerificationStatus, VerificationLogList
)
from railadmin.tickets.service import TicketService
from railadmin.tickets.issuance_service import TicketIssuanceService, TicketIssuanceError
from railadmin.tickets.verification_service import VerificationService, VerificationInputError
from railadmin.trains.fare_service import TravelClass

logger = logging.getLogger(__name__)

router = APIRouter()

def _issue(db: Session, issue):
    try:
        return issue()
    except TicketIssuanceError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Ticket insert failed")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create ticket. Please try again."
        )

def _verify(db: Session, verify):
    try:
        return verify()
    except VerificationInputError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Ticket verification failed")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to validate ticket. Please try again."
        )

@router.post("/", response_model=Ticket, status_code=status.HTTP_201_CREATED)
def create_ticket(
    ticket: TicketCreate,
    current_user: ActingUser = Depends(require_ticket_creator),
    db: Session = Depends(get_db)
):
    """Issue a standard ticket"""
    service = TicketIssuanceService(db)
    return _issue(db, lambda: service.issue_ticket(ticket, current_user))

@router.post("/platform", response_model=Ticket, status_code=status.HTTP_201_CREATED)
def create_platform_ticket(
    ticket: PlatformTicketCreate,
    current_user: ActingUser = Depends(require_ticket_creator),
    db: Session = Depends(get_db)
):
    """Issue a platform ticket at the caller's working station"""
    service = TicketIssuanceService(db)
    return _issue(db, lambda: service.issue_platform_ticket(ticket, current_user))

@router.get("/", response_model=TicketList)
def get_tickets(
    start_date: Optional[date] = Query(None, description="Travel date from; defaults to today"),
    end_date: Optional[date] = Query(None, description="Travel date to; defaults to start_date"),
    platform: Optional[bool] = Query(None, description="Only platform (true) or only standard (false) tickets"),
    working_station: Optional[str] = Query(None),
    all_networks: bool = Query(False),
    limit: int = Query(100, ge=1, le=1000),
    current_user: ActingUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Recent tickets for a travel date range"""
    start_date = start_date or date.today()
    end_date = end_date or start_date
    network = None if all_networks else (working_station or current_user.working_station)
    tickets = TicketService.get_tickets(
        db, start_date=start_date, end_date=end_date,
        working_station=network, platform=platform, limit=limit
    )
    return TicketList(tickets=tickets, total=len(tickets))

@router.get("/seats", response_model=SeatList)
def get_seats(
    class_type: TravelClass = Query(...),
    current_user: ActingUser = Depends(get_current_user)
):
    """Seat labels for a class; occupancy is not tracked"""
    seats = TicketService.get_seats(class_type)
    return SeatList(class_type=class_type.value, seats=seats, total=len(seats))

@router.post("/verify", response_model=VerificationResult)
def verify_ticket(
    request: VerificationRequest,
    current_user: ActingUser = Depends(require_tte),
    db: Session = Depends(get_db)
):
    """Verify a standard ticket; every outcome is a 200 with a status"""
    service = VerificationService(db)
    return _verify(db, lambda: service.verify(request.travel_id, current_user))

@router.post("/platform/verify", response_model=VerificationResult)
def verify_platform_ticket(
    request: VerificationRequest,
    current_user: ActingUser = Depends(require_tte),
    db: Session = Depends(get_db)
):
    service = VerificationService(db)
    return _verify(db, lambda: service.verify_platform(request.travel_id, current_user))

@router.get("/logs", response_model=VerificationLogList)
def get_verification_logs(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    status_filter: Optional[VerificationStatus] = Query(None, alias="status"),
    fraud_only: bool = Query(False),
    working_station: Optional[str] = Query(None),
    all_networks: bool = Query(False),
    limit: int = Query(100, ge=1, le=1000),
    current_user: ActingUser = Depends(require_tte),
    db: Session = Depends(get_db)
):
    """Verification audit trail, newest first"""
    network = None if all_networks else (working_station or current_user.working_station)
    logs = VerificationService(db).get_logs(
        start_date=start_date, end_date=end_date, status=status_filter,
        fraud_only=fraud_only, working_station=network, limit=limit
    )
    return VerificationLogList(logs=logs, total=len(logs))

@router.get("/verified", response_model=TicketList)
def get_verified_tickets(
    platform: Optional[bool] = Query(None),
    limit: int = Query(100, ge=1, le=1000),
    current_user: ActingUser = Depends(require_tte),
    db: Session = Depends(get_db)
):
    """Tickets verified by the caller"""
    tickets = VerificationService(db).get_verified_tickets(
        current_user.display_name, platform=platform, limit=limit
    )
    return TicketList(tickets=tickets, total=len(tickets))

@router.get("/{travel_id}", response_model=Ticket)
def get_ticket(
    travel_id: str,
    current_user: ActingUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    ticket = TicketService.get_ticket_by_travel_id(db, travel_id)
    if not ticket:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Ticket not found"
        )
    return ticket
