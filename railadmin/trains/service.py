import calendar
import logging
from typing import List, Optional

from sqlalchemy.orm import Session, joinedload

from railadmin.models import Station, Train, TrainRoute, TrainSchedule
from railadmin.trains.schemas import HaltCreate, TrainCreate, TrainUpdate

logger = logging.getLogger(__name__)

PRICE_FIELDS = [
    "general_price", "sleeper_price", "ac_1_tier_price", "ac_2_tier_price",
    "ac_3_tier_price", "ac_3_economy_price", "chair_car_price", "second_sitting_price",
]

class TrainValidationError(ValueError):
    """Train input rejected before any write"""

def day_name(day_of_week: int) -> str:
    """Label for a date.weekday() value"""
    return calendar.day_name[day_of_week]

class TrainService:
    @staticmethod
    def get_trains(db: Session, working_station: Optional[str] = None) -> List[Train]:
        """Get trains, newest first, optionally confined to one network"""
        query = db.query(Train)
        if working_station:
            query = query.filter(Train.working_station == working_station)
        return query.order_by(Train.created_at.desc(), Train.id.desc()).all()

    @staticmethod
    def get_train(db: Session, train_id: int) -> Optional[Train]:
        """Get a train with its halts, their stations and its schedule"""
        return db.query(Train).options(
            joinedload(Train.halts).joinedload(TrainRoute.station),
            joinedload(Train.schedules)
        ).filter(Train.id == train_id).first()

    @staticmethod
    def _validate_halts(db: Session, halts: List[HaltCreate]):
        if not halts:
            raise TrainValidationError("Please add at least one route station")

        station_ids = [h.station_id for h in halts]
        if len(set(station_ids)) != len(station_ids):
            raise TrainValidationError("A station can appear only once in a train route")

        found = db.query(Station.id).filter(Station.id.in_(station_ids)).count()
        if found != len(station_ids):
            raise TrainValidationError("Route contains an unknown station")

        previous = None
        for halt in halts:
            if previous is not None and halt.distance_from_start < previous:
                raise TrainValidationError("Distance from start must not decrease along the route")
            previous = halt.distance_from_start

    @staticmethod
    def _build_halts(halts: List[HaltCreate]) -> List[TrainRoute]:
        """Halt order follows list position, starting at 1"""
        built = []
        for position, halt in enumerate(halts, start=1):
            data = halt.model_dump()
            built.append(TrainRoute(
                station_id=data["station_id"],
                halt_order=position,
                distance_from_start=data["distance_from_start"],
                arrival_time=data["arrival_time"],
                departure_time=data["departure_time"],
                halt_duration=data["halt_duration"],
                **{field: data[field] for field in PRICE_FIELDS}
            ))
        return built

    @staticmethod
    def create_train(db: Session, train: TrainCreate, working_station: Optional[str] = None) -> Train:
        """Create a train with its route halts and weekly schedule"""
        name = train.name.strip()
        number = train.number.strip()
        if not name or not number:
            raise TrainValidationError("Please enter train name and number")
        TrainService._validate_halts(db, train.halts)
        if not train.schedule_days:
            raise TrainValidationError("Please select at least one day for train schedule")

        db_train = Train(name=name, number=number, working_station=working_station)
        db_train.halts = TrainService._build_halts(train.halts)
        db_train.schedules = [
            TrainSchedule(day_of_week=day, is_active=True) for day in train.schedule_days
        ]

        db.add(db_train)
        db.commit()
        db.refresh(db_train)

        logger.info(
            "Train %s (%s) added to %s station network",
            db_train.name, db_train.number, working_station or "general"
        )
        return db_train

    @staticmethod
    def update_train(db: Session, train_id: int, train_update: TrainUpdate) -> Optional[Train]:
        """Update name/number and optionally replace halts or schedule"""
        db_train = TrainService.get_train(db, train_id)
        if not db_train:
            return None

        if train_update.name is not None:
            if not train_update.name.strip():
                raise TrainValidationError("Please enter train name and number")
            db_train.name = train_update.name.strip()
        if train_update.number is not None:
            if not train_update.number.strip():
                raise TrainValidationError("Please enter train name and number")
            db_train.number = train_update.number.strip()

        if train_update.halts is not None:
            TrainService._validate_halts(db, train_update.halts)
            db_train.halts.clear()
            db.flush()
            db_train.halts.extend(TrainService._build_halts(train_update.halts))

        if train_update.schedule_days is not None:
            if not train_update.schedule_days:
                raise TrainValidationError("Please select at least one day for train schedule")
            db_train.schedules.clear()
            db.flush()
            db_train.schedules.extend(
                TrainSchedule(day_of_week=day, is_active=True) for day in train_update.schedule_days
            )

        db.commit()
        return TrainService.get_train(db, train_id)

    @staticmethod
    def delete_train(db: Session, train_id: int) -> bool:
        """Delete a train with its halts and schedule; issued tickets keep their rows"""
        db_train = db.query(Train).filter(Train.id == train_id).first()
        if not db_train:
            return False
        db.delete(db_train)
        db.commit()
        logger.info("Train %s (%s) deleted", db_train.name, db_train.number)
        return True

    @staticmethod
    def to_detail(train: Train) -> dict:
        """Flatten a loaded train into the detail response shape"""
        return {
            "id": train.id,
            "name": train.name,
            "number": train.number,
            "working_station": train.working_station,
            "created_at": train.created_at,
            "halts": [
                {
                    "id": halt.id,
                    "train_id": halt.train_id,
                    "station_id": halt.station_id,
                    "station_name": halt.station.name if halt.station else None,
                    "station_code": halt.station.code if halt.station else None,
                    "halt_order": halt.halt_order,
                    "distance_from_start": halt.distance_from_start,
                    "arrival_time": halt.arrival_time,
                    "departure_time": halt.departure_time,
                    "halt_duration": halt.halt_duration,
                    **{field: getattr(halt, field) for field in PRICE_FIELDS}
                } for halt in train.halts
            ],
            "schedule": [
                {
                    "day_of_week": entry.day_of_week,
                    "day_name": day_name(entry.day_of_week),
                    "is_active": entry.is_active
                } for entry in sorted(train.schedules, key=lambda s: s.day_of_week)
            ]
        }
