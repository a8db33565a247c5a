from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from typing import Optional

from railadmin.database import get_db
from railadmin.auth.dependencies import get_current_user, require_admin
from railadmin.auth.schemas import ActingUser
from railadmin.stations.schemas import Station, StationCreate, StationUpdate, StationList
from railadmin.stations.service import StationService, StationValidationError, StationInUseError

router = APIRouter()

@router.get("/", response_model=StationList)
def get_stations(
    working_station: Optional[str] = Query(None, description="Network to list; defaults to the caller's"),
    all_networks: bool = Query(False, description="Ignore network scoping"),
    current_user: ActingUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """List stations in a working-station network"""
    network = None if all_networks else (working_station or current_user.working_station)
    stations = StationService.get_stations(db, working_station=network)
    return StationList(stations=stations, total=len(stations))

@router.post("/", response_model=Station, status_code=status.HTTP_201_CREATED)
def create_station(
    station: StationCreate,
    current_user: ActingUser = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Add a station to the admin's network"""
    try:
        return StationService.create_station(db, station, current_user.working_station)
    except StationValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )

@router.get("/{station_id}", response_model=Station)
def get_station(
    station_id: int,
    current_user: ActingUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get station details by ID"""
    station = StationService.get_station_by_id(db, station_id=station_id)
    if not station:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Station not found"
        )
    return station

@router.put("/{station_id}", response_model=Station)
def update_station(
    station_id: int,
    station_update: StationUpdate,
    current_user: ActingUser = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Edit a station"""
    try:
        station = StationService.update_station(db, station_id, station_update)
    except StationValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    if not station:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Station not found"
        )
    return station

@router.delete("/{station_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_station(
    station_id: int,
    current_user: ActingUser = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Delete an unreferenced station"""
    try:
        deleted = StationService.delete_station(db, station_id)
    except StationInUseError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e)
        )
    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Station not found"
        )
