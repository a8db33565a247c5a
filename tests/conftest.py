from datetime import date, time, timedelta
from decimal import Decimal
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from railadmin.database import Base, get_db, enable_sqlite_foreign_keys, init_db
from railadmin.main import app
from railadmin.models import Station, Train, TrainRoute, TrainSchedule, Staff
from railadmin.auth.schemas import ActingUser, UserRole
from railadmin.auth.service import AuthService
from railadmin.auth.utils import create_access_token, get_password_hash

NETWORK = "Washim"
MONDAY = date(2024, 6, 10)
STAFF_PASSWORD = "secret123"

def next_monday() -> date:
    today = date.today()
    return today + timedelta(days=(7 - today.weekday()) % 7 or 7)

@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    enable_sqlite_foreign_keys(engine)
    init_db(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()

@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)

@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()

@pytest.fixture
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()

def build_network(db):
    """Washim -> Akola -> Nagpur on Mondays, with a pass-through at Pune.

    Karanja belongs to the network but no train stops there.
    """
    washim = Station(name="Washim", code="WH", working_station=NETWORK)
    akola = Station(name="Akola", code="AK", working_station=NETWORK)
    nagpur = Station(name="Nagpur", code="NG", working_station=NETWORK)
    pune = Station(name="Pune", code="PN", working_station=NETWORK)
    karanja = Station(name="Karanja", code="KJ", working_station=NETWORK)
    db.add_all([washim, akola, nagpur, pune, karanja])
    db.flush()

    train = Train(name="Washim Nagpur Express", number="17641", working_station=NETWORK)
    train.halts = [
        TrainRoute(station_id=washim.id, halt_order=1, distance_from_start=Decimal("0"),
                   departure_time=time(6, 0), general_price=Decimal("50"), sleeper_price=Decimal("0")),
        TrainRoute(station_id=akola.id, halt_order=2, distance_from_start=Decimal("80"),
                   arrival_time=time(7, 30), departure_time=time(7, 40), halt_duration=10,
                   general_price=Decimal("35")),
        TrainRoute(station_id=nagpur.id, halt_order=3, distance_from_start=Decimal("330"),
                   arrival_time=time(12, 15)),
        TrainRoute(station_id=pune.id, halt_order=4, distance_from_start=Decimal("500"),
                   arrival_time=time(15, 0), departure_time=time(15, 0), halt_duration=0),
    ]
    train.schedules = [TrainSchedule(day_of_week=0, is_active=True)]
    db.add(train)
    db.commit()

    return SimpleNamespace(
        washim=washim, akola=akola, nagpur=nagpur, pune=pune, karanja=karanja, train=train
    )

@pytest.fixture
def network(db_session):
    return build_network(db_session)

@pytest.fixture
def staff_members(db_session):
    creator = Staff(staff_id="TC001", name="Ravi Kumar", role="ticket_creator",
                    password_hash=get_password_hash(STAFF_PASSWORD), working_station=NETWORK)
    tte = Staff(staff_id="TTE001", name="Sunita Patil", role="tte",
                password_hash=get_password_hash(STAFF_PASSWORD), working_station=NETWORK)
    db_session.add_all([creator, tte])
    db_session.commit()
    return SimpleNamespace(creator=creator, tte=tte)

@pytest.fixture
def admin_user():
    return ActingUser(username="admin", role=UserRole.ADMIN, working_station=NETWORK)

@pytest.fixture
def creator_user():
    return ActingUser(username="Ravi Kumar", role=UserRole.TICKET_CREATOR,
                      working_station=NETWORK, staff_id="TC001")

@pytest.fixture
def tte_user():
    return ActingUser(username="Sunita Patil", role=UserRole.TTE,
                      working_station=NETWORK, staff_id="TTE001")

def auth_headers(user: ActingUser) -> dict:
    token = create_access_token(data=AuthService.token_claims(user))
    return {"Authorization": f"Bearer {token}"}

@pytest.fixture
def admin_headers(admin_user):
    return auth_headers(admin_user)

@pytest.fixture
def creator_headers(staff_members, creator_user):
    return auth_headers(creator_user)

@pytest.fixture
def tte_headers(staff_members, tte_user):
    return auth_headers(tte_user)
