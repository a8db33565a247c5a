from sqlalchemy import Column, Integer, String, Boolean, DateTime, Date, Time, Text, ForeignKey, Numeric, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from railadmin.database import Base, BigIntPK

# ================================
# Station Network
# ================================
class Station(Base):
    __tablename__ = "stations"

    id = Column(BigIntPK, primary_key=True, index=True)
    name = Column(String(255), nullable=False, index=True)
    code = Column(String(4), nullable=False, index=True)
    address = Column(Text)
    working_station = Column(String(255), index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    halts = relationship("TrainRoute", back_populates="station")

# ================================
# Trains, Route Halts & Weekly Schedule
# ================================
class Train(Base):
    __tablename__ = "trains"

    id = Column(BigIntPK, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    number = Column(String(50), nullable=False, index=True)
    working_station = Column(String(255), index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    halts = relationship(
        "TrainRoute", back_populates="train",
        order_by="TrainRoute.halt_order", cascade="all, delete-orphan"
    )
    schedules = relationship("TrainSchedule", back_populates="train", cascade="all, delete-orphan")

class TrainRoute(Base):
    """One halt of a train; fares are quoted from this halt to the end of the line"""
    __tablename__ = "train_routes"

    id = Column(BigIntPK, primary_key=True, index=True)
    train_id = Column(BigIntPK, ForeignKey("trains.id", ondelete="CASCADE"), nullable=False, index=True)
    station_id = Column(BigIntPK, ForeignKey("stations.id"), nullable=False, index=True)
    halt_order = Column(Integer, nullable=False)
    distance_from_start = Column(Numeric(8, 2), nullable=False, default=0)
    arrival_time = Column(Time)
    departure_time = Column(Time)
    halt_duration = Column(Integer)
    general_price = Column(Numeric(10, 2))
    sleeper_price = Column(Numeric(10, 2))
    ac_1_tier_price = Column(Numeric(10, 2))
    ac_2_tier_price = Column(Numeric(10, 2))
    ac_3_tier_price = Column(Numeric(10, 2))
    ac_3_economy_price = Column(Numeric(10, 2))
    chair_car_price = Column(Numeric(10, 2))
    second_sitting_price = Column(Numeric(10, 2))
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    train = relationship("Train", back_populates="halts")
    station = relationship("Station", back_populates="halts")

class TrainSchedule(Base):
    __tablename__ = "train_schedules"
    __table_args__ = (UniqueConstraint("train_id", "day_of_week", name="uq_train_schedule_day"),)

    id = Column(BigIntPK, primary_key=True, index=True)
    train_id = Column(BigIntPK, ForeignKey("trains.id", ondelete="CASCADE"), nullable=False, index=True)
    day_of_week = Column(Integer, nullable=False)  # date.weekday(): Monday=0
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    train = relationship("Train", back_populates="schedules")

# ================================
# Tickets
# ================================
class Ticket(Base):
    __tablename__ = "tickets"

    id = Column(BigIntPK, primary_key=True, index=True)
    travel_id = Column(String(50), nullable=False, index=True)  # not unique
    passenger_name = Column(String(255), nullable=False)
    passenger_count = Column(Integer, nullable=False, default=1)
    from_station_id = Column(BigIntPK, ForeignKey("stations.id"), index=True)
    to_station_id = Column(BigIntPK, ForeignKey("stations.id"), index=True)
    train_id = Column(BigIntPK, ForeignKey("trains.id", ondelete="SET NULL"), index=True)
    kilometres = Column(Numeric(8, 2), nullable=False, default=0)
    travel_date = Column(Date, nullable=False, index=True)
    created_time = Column(Time, nullable=False)
    departure_time = Column(Time)
    arrival_time = Column(Time)
    price = Column(Numeric(10, 2), nullable=False)
    total_price = Column(Numeric(10, 2), nullable=False)
    ticket_class = Column(String(50), nullable=False, default="general")
    class_type = Column(String(50), nullable=False, index=True)
    seat_number = Column(String(50))
    expires_at = Column(DateTime, nullable=False, index=True)
    is_verified = Column(Boolean, nullable=False, default=False, index=True)
    verified_by = Column(String(255))
    verified_at = Column(DateTime)
    created_by = Column(String(255), nullable=False)
    working_station = Column(String(255), index=True)
    created_at = Column(DateTime, server_default=func.now(), index=True)

    # Relationships
    from_station = relationship("Station", foreign_keys=[from_station_id])
    to_station = relationship("Station", foreign_keys=[to_station_id])
    train = relationship("Train")
    verification_logs = relationship("VerificationLog", back_populates="ticket")

    @property
    def from_station_name(self):
        return self.from_station.name if self.from_station else None

    @property
    def to_station_name(self):
        return self.to_station.name if self.to_station else None

    @property
    def train_name(self):
        return self.train.name if self.train else None

    @property
    def train_number(self):
        return self.train.number if self.train else None

class VerificationLog(Base):
    """Append-only audit trail, one row per verification attempt"""
    __tablename__ = "verification_logs"

    id = Column(BigIntPK, primary_key=True, index=True)
    travel_id = Column(String(50), nullable=False, index=True)
    ticket_id = Column(BigIntPK, ForeignKey("tickets.id", ondelete="SET NULL"), index=True)
    verified_by = Column(String(255), nullable=False)
    status = Column(String(20), nullable=False, index=True)
    fraud_attempt = Column(Boolean, nullable=False, default=False, index=True)
    details = Column(Text)
    working_station = Column(String(255), index=True)
    verified_at = Column(DateTime, nullable=False, server_default=func.now(), index=True)

    # Relationships
    ticket = relationship("Ticket", back_populates="verification_logs")

# ================================
# Staff
# ================================
class Staff(Base):
    __tablename__ = "staff"

    id = Column(BigIntPK, primary_key=True, index=True)
    staff_id = Column(String(50), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    name = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, index=True)
    is_active = Column(Boolean, default=True, nullable=False, index=True)
    working_station = Column(String(255), index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

# ================================
# Reports
# ================================
class DailyReport(Base):
    __tablename__ = "daily_reports"

    id = Column(BigIntPK, primary_key=True, index=True)
    report_date = Column(Date, nullable=False, index=True)
    report_type = Column(String(50), nullable=False, index=True)
    file_name = Column(String(255), nullable=False)
    file_path = Column(String(500), nullable=False)
    file_size = Column(Integer, default=0)
    working_station = Column(String(255), index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
