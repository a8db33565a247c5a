from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from railadmin.auth.schemas import ActingUser, UserRole
from railadmin.models import Ticket
from railadmin.tickets.issuance_service import TicketIssuanceError, TicketIssuanceService
from railadmin.tickets.schemas import PlatformTicketCreate, TicketCreate
from railadmin.tickets.service import TicketService
from tests.conftest import MONDAY

NOW = datetime(2024, 6, 10, 8, 45, 30)

@pytest.fixture
def service(db_session):
    return TicketIssuanceService(db_session, clock=lambda: NOW)

def sale(network, **overrides):
    data = dict(
        passenger_name="Asha Deshmukh",
        passenger_count=2,
        from_station_id=network.washim.id,
        to_station_id=network.nagpur.id,
        train_id=network.train.id,
        class_type="general",
        seat_number="GENERAL-4",
        price=Decimal("50"),
        travel_date=MONDAY,
    )
    data.update(overrides)
    return TicketCreate(**data)

def test_issue_ticket(service, network, creator_user):
    ticket = service.issue_ticket(sale(network), creator_user)

    assert ticket.id is not None
    assert ticket.travel_id.startswith("WH-")
    assert ticket.total_price == Decimal("100")
    assert ticket.price == Decimal("50")
    assert ticket.kilometres == Decimal("330")
    assert ticket.ticket_class == "general"
    assert ticket.class_type == "general"
    assert ticket.created_by == "Ravi Kumar (Washim)"
    assert ticket.working_station == "Washim"
    assert ticket.departure_time.hour == 6
    assert ticket.arrival_time.hour == 12
    assert ticket.expires_at == datetime(2024, 6, 11, 8, 45, 30)
    assert ticket.is_verified is False

def test_issued_ticket_found_by_travel_id(service, db_session, network, creator_user):
    ticket = service.issue_ticket(sale(network), creator_user)

    found = TicketService.get_ticket_by_travel_id(db_session, ticket.travel_id.lower())
    assert found.id == ticket.id
    assert found.passenger_name == "Asha Deshmukh"
    assert found.seat_number == "GENERAL-4"
    assert found.from_station_name == "Washim"
    assert found.to_station_name == "Nagpur"

def test_price_defaults_to_fare_table(service, network, creator_user):
    ticket = service.issue_ticket(sale(network, price=None, passenger_count=3), creator_user)
    assert ticket.price == Decimal("50")
    assert ticket.total_price == Decimal("150")

def test_price_defaults_to_class_default_when_unset(service, network, creator_user):
    ticket = service.issue_ticket(sale(network, price=None, class_type="sleeper", passenger_count=1), creator_user)
    assert ticket.price == Decimal("100")

def test_price_from_intermediate_halt(service, network, admin_user):
    ticket = service.issue_ticket(
        sale(network, price=None, passenger_count=1, from_station_id=network.akola.id),
        admin_user
    )
    assert ticket.price == Decimal("35")
    assert ticket.kilometres == Decimal("250")
    assert ticket.travel_id.startswith("AK-")

@pytest.mark.parametrize("overrides, message", [
    ({"passenger_name": "   "}, "Please enter passenger name"),
    ({"to_station_id": None}, "Please select both from and to stations"),
    ({"from_station_id": 9999}, "Please select both from and to stations"),
    ({"train_id": None}, "Please select a train"),
    ({"class_type": None}, "Please select a class"),
    ({"class_type": "first_class"}, "Please select a class"),
    ({"seat_number": ""}, "Please select a seat"),
    ({"price": Decimal("0")}, "Please set a valid price"),
    ({"price": Decimal("-5")}, "Please set a valid price"),
])
def test_issue_ticket_rejections(service, db_session, network, creator_user, overrides, message):
    with pytest.raises(TicketIssuanceError, match=message):
        service.issue_ticket(sale(network, **overrides), creator_user)
    assert db_session.query(Ticket).count() == 0

def test_train_must_run_on_travel_date(service, network, creator_user):
    with pytest.raises(TicketIssuanceError, match="does not serve this route"):
        service.issue_ticket(sale(network, travel_date=MONDAY + timedelta(days=1)), creator_user)

def test_reverse_route_rejected(service, network, admin_user):
    with pytest.raises(TicketIssuanceError, match="does not serve this route"):
        service.issue_ticket(
            sale(network, from_station_id=network.nagpur.id, to_station_id=network.washim.id),
            admin_user
        )

def test_creator_sells_only_from_working_station(service, network, creator_user):
    with pytest.raises(TicketIssuanceError, match="From station must be your working station"):
        service.issue_ticket(sale(network, from_station_id=network.akola.id), creator_user)

def test_working_station_match_ignores_case(service, network):
    user = ActingUser(username="Ravi Kumar", role=UserRole.TICKET_CREATOR, working_station="washim")
    assert service.issue_ticket(sale(network), user).id is not None

def test_platform_ticket(service, creator_user):
    ticket = service.issue_platform_ticket(
        PlatformTicketCreate(passenger_name="Meera", passenger_count=3), creator_user
    )

    assert ticket.travel_id.startswith("PLT-")
    assert ticket.class_type == "platform"
    assert ticket.ticket_class == "general"
    assert ticket.from_station_id is None
    assert ticket.to_station_id is None
    assert ticket.train_id is None
    assert ticket.seat_number is None
    assert ticket.kilometres == Decimal("0")
    assert ticket.price == Decimal("10")
    assert ticket.total_price == Decimal("30")
    assert ticket.travel_date == NOW.date()
    assert ticket.expires_at == datetime(2024, 6, 11, 8, 45, 30)

def test_platform_ticket_needs_working_station(service):
    user = ActingUser(username="admin", role=UserRole.ADMIN)
    with pytest.raises(TicketIssuanceError, match="Working station not found. Please login again."):
        service.issue_platform_ticket(PlatformTicketCreate(passenger_name="Meera"), user)

def test_platform_ticket_rejections(service, creator_user):
    with pytest.raises(TicketIssuanceError, match="Please enter passenger name"):
        service.issue_platform_ticket(PlatformTicketCreate(passenger_name=""), creator_user)
    with pytest.raises(TicketIssuanceError, match="Please set a valid price"):
        service.issue_platform_ticket(PlatformTicketCreate(passenger_name="Meera", price=Decimal("0")), creator_user)
