import logging
from typing import List, Optional

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from railadmin.models import Station, Ticket, TrainRoute
from railadmin.stations.schemas import StationCreate, StationUpdate

logger = logging.getLogger(__name__)

class StationValidationError(ValueError):
    """Station input rejected before any write"""

class StationInUseError(Exception):
    """Station still referenced by halts or tickets"""

class StationService:
    @staticmethod
    def get_station_by_id(db: Session, station_id: int) -> Optional[Station]:
        """Get station by ID"""
        return db.query(Station).filter(Station.id == station_id).first()
    
    @staticmethod
    def get_stations(db: Session, working_station: Optional[str] = None) -> List[Station]:
        """Get stations ordered by name, optionally confined to one network"""
        query = db.query(Station)
        if working_station:
            query = query.filter(Station.working_station == working_station)
        return query.order_by(Station.name).all()
    
    @staticmethod
    def _check_unique(
        db: Session,
        working_station: str,
        name: str,
        code: str,
        exclude_id: Optional[int] = None
    ):
        query = db.query(Station).filter(Station.working_station == working_station)
        if exclude_id is not None:
            query = query.filter(Station.id != exclude_id)
        existing = query.filter(
            or_(func.lower(Station.name) == name.lower(), func.upper(Station.code) == code.upper())
        ).all()
        
        for station in existing:
            if station.name.lower() == name.lower():
                raise StationValidationError(
                    f'Station name "{name}" already exists in {working_station} station network. '
                    'Please use a different name.'
                )
            if station.code.upper() == code.upper():
                raise StationValidationError(
                    f'Station code "{code.upper()}" already exists in {working_station} station network. '
                    'Please use a different code.'
                )
    
    @staticmethod
    def create_station(db: Session, station: StationCreate, working_station: Optional[str]) -> Station:
        """Create a station inside the caller's network"""
        if not working_station:
            raise StationValidationError("Working station not found. Please contact admin.")
        
        StationService._check_unique(db, working_station, station.name, station.code)
        
        db_station = Station(
            name=station.name,
            code=station.code,
            address=station.address,
            working_station=working_station
        )
        db.add(db_station)
        db.commit()
        db.refresh(db_station)
        
        logger.info("Station %s (%s) added to %s network", db_station.name, db_station.code, working_station)
        return db_station
    
    @staticmethod
    def update_station(db: Session, station_id: int, station_update: StationUpdate) -> Optional[Station]:
        """Update station fields, keeping name/code unique in its network"""
        db_station = StationService.get_station_by_id(db, station_id)
        if not db_station:
            return None
        
        update_data = station_update.model_dump(exclude_unset=True)
        if "name" in update_data and update_data["name"] is not None:
            update_data["name"] = update_data["name"].strip()
            if not update_data["name"]:
                raise StationValidationError("Please enter station name and station code")
        
        name = update_data.get("name") or db_station.name
        code = update_data.get("code") or db_station.code
        if db_station.working_station:
            StationService._check_unique(db, db_station.working_station, name, code, exclude_id=db_station.id)
        
        for field, value in update_data.items():
            if value is not None:
                setattr(db_station, field, value)
        
        db.commit()
        db.refresh(db_station)
        return db_station
    
    @staticmethod
    def delete_station(db: Session, station_id: int) -> bool:
        """Delete a station that no halt or ticket references"""
        db_station = StationService.get_station_by_id(db, station_id)
        if not db_station:
            return False
        
        in_routes = db.query(TrainRoute).filter(TrainRoute.station_id == station_id).count()
        in_tickets = db.query(Ticket).filter(
            or_(Ticket.from_station_id == station_id, Ticket.to_station_id == station_id)
        ).count()
        if in_routes or in_tickets:
            raise StationInUseError(
                f"Station {db_station.name} is used by train routes or tickets and cannot be deleted"
            )
        
        try:
            db.delete(db_station)
            db.commit()
        except IntegrityError:
            db.rollback()
            raise StationInUseError(
                f"Station {db_station.name} is used by train routes or tickets and cannot be deleted"
            )
        return True
