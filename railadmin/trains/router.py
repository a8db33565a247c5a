from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import date

from railadmin.database import get_db
from railadmin.auth.dependencies import get_current_user, require_admin
from railadmin.auth.schemas import ActingUser
from railadmin.trains.schemas import (
    TrainCreate, TrainUpdate, TrainDetail, TrainList, AvailableTrainList,
    RouteDistance, TravelClassInfo
)
from railadmin.trains.service import TrainService, TrainValidationError
from railadmin.trains.fare_service import RouteResolver, class_catalogue

router = APIRouter()

@router.get("/", response_model=TrainList)
def get_trains(
    working_station: Optional[str] = Query(None, description="Network to list; defaults to the caller's"),
    all_networks: bool = Query(False, description="Ignore network scoping"),
    current_user: ActingUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """List trains in a working-station network"""
    network = None if all_networks else (working_station or current_user.working_station)
    trains = TrainService.get_trains(db, working_station=network)
    return TrainList(trains=trains, total=len(trains))

@router.post("/", response_model=TrainDetail, status_code=status.HTTP_201_CREATED)
def create_train(
    train: TrainCreate,
    current_user: ActingUser = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Add a train with its halts and running days"""
    try:
        db_train = TrainService.create_train(db, train, current_user.working_station)
    except TrainValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    return TrainService.to_detail(TrainService.get_train(db, db_train.id))

@router.get("/available", response_model=AvailableTrainList)
def get_available_trains(
    from_station_id: int = Query(...),
    to_station_id: int = Query(...),
    travel_date: date = Query(...),
    all_networks: bool = Query(True, description="Search trains of every network"),
    current_user: ActingUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Trains that stop at both stations in order and run on the travel date"""
    network = None if all_networks else current_user.working_station
    trains = RouteResolver(db).available_trains(
        from_station_id, to_station_id, travel_date, working_station=network
    )
    return AvailableTrainList(
        from_station_id=from_station_id,
        to_station_id=to_station_id,
        travel_date=travel_date,
        trains=trains,
        total=len(trains)
    )

@router.get("/distance", response_model=RouteDistance)
def get_route_distance(
    from_station_id: int = Query(...),
    to_station_id: int = Query(...),
    current_user: ActingUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Distance between two stations; 0 when no train links them"""
    distance, train_id = RouteResolver(db).route_distance(from_station_id, to_station_id)
    return RouteDistance(
        from_station_id=from_station_id,
        to_station_id=to_station_id,
        distance_km=distance,
        train_id=train_id
    )

@router.get("/classes", response_model=List[TravelClassInfo])
def get_travel_classes(current_user: ActingUser = Depends(get_current_user)):
    return class_catalogue()

@router.get("/{train_id}", response_model=TrainDetail)
def get_train(
    train_id: int,
    current_user: ActingUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get train details with halts and schedule"""
    train = TrainService.get_train(db, train_id)
    if not train:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Train not found"
        )
    return TrainService.to_detail(train)

@router.put("/{train_id}", response_model=TrainDetail)
def update_train(
    train_id: int,
    train_update: TrainUpdate,
    current_user: ActingUser = Depends(require_admin),
    db: Session = Depends(get_db)
):
    try:
        train = TrainService.update_train(db, train_id, train_update)
    except TrainValidationError as e:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    if not train:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Train not found"
        )
    return TrainService.to_detail(train)

@router.delete("/{train_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_train(
    train_id: int,
    current_user: ActingUser = Depends(require_admin),
    db: Session = Depends(get_db)
):
    if not TrainService.delete_train(db, train_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Train not found"
        )
