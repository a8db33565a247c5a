from decimal import Decimal

from railadmin.config import settings
from tests.conftest import next_monday

API = settings.API_V1_STR

def sell(client, headers, network, **overrides):
    payload = {
        "passenger_name": "Asha Deshmukh",
        "passenger_count": 2,
        "from_station_id": network.washim.id,
        "to_station_id": network.nagpur.id,
        "train_id": network.train.id,
        "class_type": "general",
        "seat_number": "GENERAL-7",
        "price": "50",
        "travel_date": next_monday().isoformat(),
    }
    payload.update(overrides)
    return client.post(f"{API}/tickets/", json=payload, headers=headers)

def test_sell_and_fetch_ticket(client, creator_headers, network):
    resp = sell(client, creator_headers, network)
    assert resp.status_code == 201
    ticket = resp.json()
    assert ticket["travel_id"].startswith("WH-")
    assert Decimal(ticket["total_price"]) == Decimal("100")
    assert ticket["from_station_name"] == "Washim"
    assert ticket["to_station_name"] == "Nagpur"
    assert ticket["train_number"] == "17641"
    assert ticket["created_by"] == "Ravi Kumar (Washim)"

    fetched = client.get(f"{API}/tickets/{ticket['travel_id']}", headers=creator_headers)
    assert fetched.status_code == 200
    assert fetched.json()["id"] == ticket["id"]

def test_sale_rejection_is_400(client, creator_headers, network):
    resp = sell(client, creator_headers, network, passenger_name="")
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Please enter passenger name"

    resp = sell(client, creator_headers, network, from_station_id=network.akola.id)
    assert resp.json()["detail"] == "From station must be your working station"

def test_tte_cannot_sell(client, tte_headers, network):
    assert sell(client, tte_headers, network).status_code == 403

def test_platform_ticket_sale(client, creator_headers):
    resp = client.post(f"{API}/tickets/platform", json={"passenger_name": "Meera", "passenger_count": 2},
                       headers=creator_headers)
    assert resp.status_code == 201
    ticket = resp.json()
    assert ticket["class_type"] == "platform"
    assert ticket["travel_id"].startswith("PLT-")
    assert Decimal(ticket["total_price"]) == Decimal("20")

def test_verify_flow(client, creator_headers, tte_headers, network):
    travel_id = sell(client, creator_headers, network).json()["travel_id"]

    first = client.post(f"{API}/tickets/verify", json={"travel_id": travel_id}, headers=tte_headers)
    assert first.status_code == 200
    assert first.json()["status"] == "valid"
    assert first.json()["ticket"]["verified_by"] == "Sunita Patil (Washim)"

    second = client.post(f"{API}/tickets/verify", json={"travel_id": travel_id}, headers=tte_headers)
    assert second.status_code == 200
    assert second.json()["status"] == "duplicate"

    unknown = client.post(f"{API}/tickets/verify", json={"travel_id": "XX-00000"}, headers=tte_headers)
    assert unknown.json()["status"] == "invalid"
    assert unknown.json()["fraud_attempt"] is True

    logs = client.get(f"{API}/tickets/logs", headers=tte_headers).json()
    assert logs["total"] == 3
    fraud = client.get(f"{API}/tickets/logs", params={"fraud_only": True}, headers=tte_headers).json()
    assert [log["travel_id"] for log in fraud["logs"]] == ["XX-00000"]
    duplicates = client.get(f"{API}/tickets/logs", params={"status": "duplicate"}, headers=tte_headers).json()
    assert duplicates["total"] == 1

    verified = client.get(f"{API}/tickets/verified", headers=tte_headers).json()
    assert [t["travel_id"] for t in verified["tickets"]] == [travel_id]

def test_platform_verify_flow(client, creator_headers, tte_headers):
    travel_id = client.post(f"{API}/tickets/platform", json={"passenger_name": "Meera"},
                            headers=creator_headers).json()["travel_id"]

    standard = client.post(f"{API}/tickets/verify", json={"travel_id": travel_id}, headers=tte_headers)
    assert standard.json()["status"] == "invalid"

    platform = client.post(f"{API}/tickets/platform/verify", json={"travel_id": travel_id}, headers=tte_headers)
    assert platform.json()["status"] == "valid"
    assert platform.json()["message"] == "Platform ticket verified successfully"

def test_creator_cannot_verify(client, creator_headers):
    resp = client.post(f"{API}/tickets/verify", json={"travel_id": "WH-12345"}, headers=creator_headers)
    assert resp.status_code == 403

def test_blank_travel_id(client, tte_headers):
    resp = client.post(f"{API}/tickets/verify", json={"travel_id": "   "}, headers=tte_headers)
    assert resp.status_code == 400

def test_list_tickets_for_travel_date(client, creator_headers, network):
    sell(client, creator_headers, network)
    sell(client, creator_headers, network, passenger_name="Rahul")

    day = next_monday().isoformat()
    resp = client.get(f"{API}/tickets/", params={"start_date": day}, headers=creator_headers)
    assert resp.status_code == 200
    assert resp.json()["total"] == 2
    assert resp.json()["tickets"][0]["passenger_name"] == "Rahul"

    platform_only = client.get(f"{API}/tickets/", params={"start_date": day, "platform": True},
                               headers=creator_headers)
    assert platform_only.json()["total"] == 0

def test_seat_list(client, creator_headers):
    resp = client.get(f"{API}/tickets/seats", params={"class_type": "ac_1_tier"}, headers=creator_headers)
    assert resp.status_code == 200
    body = resp.json()
    assert body["total"] == 24
    assert body["seats"][0] == "AC_1_TIER-1"

def test_unknown_ticket_is_404(client, creator_headers):
    assert client.get(f"{API}/tickets/NG-00001", headers=creator_headers).status_code == 404
