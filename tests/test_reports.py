import io
import os
from datetime import datetime, timedelta
from decimal import Decimal
from types import SimpleNamespace
from urllib.parse import quote

import pandas as pd
import pytest

from railadmin.config import settings
from railadmin.auth.schemas import ActingUser, UserRole
from railadmin.models import DailyReport, Station, Ticket, VerificationLog
from railadmin.reports import export
from railadmin.reports.schemas import ReportType
from railadmin.reports.service import ReportService
from railadmin.tickets.issuance_service import TicketIssuanceService
from railadmin.tickets.schemas import PlatformTicketCreate, TicketCreate
from railadmin.tickets.verification_service import VerificationService
from tests.conftest import MONDAY, auth_headers

API = settings.API_V1_STR
SALE_TIME = datetime(2024, 6, 10, 7, 0, 0)
CHECK_TIME = datetime(2024, 6, 10, 9, 0, 0)

@pytest.fixture
def activity(db_session, network, creator_user, tte_user):
    """Two standard tickets, one platform ticket, one verification and one fraud attempt on MONDAY"""
    seller = TicketIssuanceService(db_session, clock=lambda: SALE_TIME)
    sale = dict(
        from_station_id=network.washim.id,
        to_station_id=network.nagpur.id,
        train_id=network.train.id,
        seat_number="GENERAL-1",
        travel_date=MONDAY,
    )
    general = seller.issue_ticket(
        TicketCreate(passenger_name="Asha", passenger_count=2, class_type="general", price=Decimal("50"), **sale),
        creator_user
    )
    sleeper = seller.issue_ticket(
        TicketCreate(passenger_name="Vikram", passenger_count=1, class_type="sleeper", price=Decimal("180"), **sale),
        creator_user
    )
    platform = seller.issue_platform_ticket(PlatformTicketCreate(passenger_name="Meera"), creator_user)

    checker = VerificationService(db_session, clock=lambda: CHECK_TIME)
    checker.verify(general.travel_id, tte_user)
    checker.verify("XX-00000", tte_user)
    return SimpleNamespace(general=general, sleeper=sleeper, platform=platform)

@pytest.fixture
def reports(db_session):
    return ReportService(db_session, clock=lambda: CHECK_TIME)

def test_table_stats(reports, activity):
    stats = reports.table_stats()
    assert stats.stations == 5
    assert stats.trains == 1
    assert stats.train_routes == 4
    assert stats.tickets == 3
    assert stats.verification_logs == 2

def test_today_summary(reports, activity):
    summary = reports.today_summary()
    assert summary.total_tickets == 3
    assert summary.platform_tickets == 1
    assert summary.total_passengers == 4
    assert summary.total_revenue == Decimal("290")
    assert summary.verifications == 2
    assert summary.valid_verifications == 1
    assert summary.fraud_attempts == 1
    assert summary.duplicates == 0

def test_revenue_breakdown(reports, activity):
    report = reports.revenue(MONDAY, MONDAY)
    assert report.total_revenue == Decimal("290")
    by_class = {row.key: row.revenue for row in report.by_class}
    assert by_class == {"general": Decimal("100"), "sleeper": Decimal("180"), "platform": Decimal("10")}
    by_station = {row.key: row.tickets for row in report.by_station}
    assert by_station == {"Washim": 3}

def test_revenue_scoped_to_network(reports, activity):
    assert reports.revenue(MONDAY, MONDAY, working_station="Akola").total_tickets == 0

def test_staff_performance(reports, activity, staff_members):
    report = reports.staff_performance(MONDAY, MONDAY)
    by_id = {entry.staff_id: entry for entry in report.staff}

    creator = by_id["TC001"]
    assert creator.tickets_created == 3
    assert creator.total_revenue == Decimal("290")
    assert creator.active_today

    tte = by_id["TTE001"]
    assert tte.tickets_verified == 1
    assert tte.fraud_caught == 1
    assert tte.last_activity == CHECK_TIME

def test_report_frames_follow_column_layouts(reports, activity):
    tickets = reports.build_report(ReportType.TICKETS, MONDAY, MONDAY)
    assert list(tickets.columns) == export.REPORT_COLUMNS[ReportType.TICKETS]
    assert len(tickets) == 2
    assert set(tickets["Class"]) == {"general", "sleeper"}
    assert tickets.iloc[0]["Train"] == "Washim Nagpur Express (17641)"

    platform = reports.build_report(ReportType.PLATFORM_TICKETS, MONDAY, MONDAY)
    assert list(platform["Travel ID"]) == [activity.platform.travel_id]

    logs = reports.build_report(ReportType.VERIFICATION_LOGS, MONDAY, MONDAY)
    assert list(logs["Fraud Attempt"]) == ["No", "Yes"]

    revenue = reports.build_report(ReportType.REVENUE, MONDAY, MONDAY)
    assert revenue["Amount"].sum() == pytest.approx(290.0)

def test_empty_report_keeps_header():
    df = export.build_frame(ReportType.REVENUE, [])
    csv = export.to_csv_bytes(df).decode()
    assert csv.strip() == "Date,Class,Amount,Passengers,From Station,To Station"

def test_date_workbook(reports, activity):
    content = reports.date_workbook(MONDAY)
    sheets = pd.read_excel(io.BytesIO(content), sheet_name=None)
    assert list(sheets) == ["Tickets", "Verification Logs"]
    assert len(sheets["Tickets"]) == 3
    assert list(sheets["Verification Logs"].columns) == export.DATE_LOG_COLUMNS

def test_date_workbook_without_data(reports):
    with pytest.raises(export.NoDataError, match="No data available for the selected date"):
        reports.date_workbook(MONDAY)

def test_daily_report_job(db_session, reports, activity, tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "REPORTS_DIR", str(tmp_path))

    generated = reports.generate_daily_reports(MONDAY)

    # one network plus the "all" bucket, four report types each
    assert len(generated) == 8
    assert db_session.query(DailyReport).count() == 8
    names = sorted(os.listdir(tmp_path))
    assert "tickets_Washim_2024-06-10.csv" in names
    assert "revenue_all_2024-06-10.csv" in names

    record = next(r for r in generated if r.file_name == "tickets_all_2024-06-10.csv")
    assert record.file_size == os.path.getsize(record.file_path)
    assert len(reports.list_daily_reports(MONDAY, working_station="Washim")) == 4

def test_daily_report_job_defaults_to_yesterday(reports, tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "REPORTS_DIR", str(tmp_path))
    generated = reports.generate_daily_reports()
    assert {r.report_date for r in generated} == {CHECK_TIME.date() - timedelta(days=1)}

def test_purge_date(db_session, reports, activity):
    result = reports.purge_date(MONDAY)
    assert result == {"tickets_deleted": 3, "logs_deleted": 2}
    assert db_session.query(Ticket).count() == 0
    assert db_session.query(VerificationLog).count() == 0

def test_purge_date_keeps_other_days(db_session, reports, activity):
    result = reports.purge_date(MONDAY + timedelta(days=1))
    assert result == {"tickets_deleted": 0, "logs_deleted": 0}
    assert db_session.query(Ticket).count() == 3

def test_purge_all(db_session, reports, activity):
    assert reports.purge_all() == {"tickets_deleted": 3, "logs_deleted": 2}
    assert db_session.query(Ticket).count() == 0

def test_export_endpoint_csv(client, admin_headers, activity):
    resp = client.get(f"{API}/reports/export/tickets", params={
        "start_date": MONDAY.isoformat(), "end_date": MONDAY.isoformat()
    }, headers=admin_headers)
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/csv")
    assert "tickets_Washim_2024-06-10.csv" in resp.headers["content-disposition"]
    lines = resp.text.strip().splitlines()
    assert lines[0] == ",".join(export.REPORT_COLUMNS[ReportType.TICKETS])
    assert len(lines) == 3

def test_export_endpoint_excel(client, admin_headers, activity):
    resp = client.get(f"{API}/reports/export/verification_logs", params={
        "start_date": MONDAY.isoformat(), "format": "excel"
    }, headers=admin_headers)
    assert resp.status_code == 200
    df = pd.read_excel(io.BytesIO(resp.content))
    assert list(df.columns) == export.REPORT_COLUMNS[ReportType.VERIFICATION_LOGS]

def test_export_date_without_data_is_404(client, admin_headers):
    resp = client.get(f"{API}/reports/export-date", params={"date": "2024-06-11"}, headers=admin_headers)
    assert resp.status_code == 404
    assert resp.json()["detail"] == "No data available for the selected date"

def test_purge_endpoints(client, admin_headers, activity):
    resp = client.delete(f"{API}/reports/data/{MONDAY.isoformat()}", headers=admin_headers)
    assert resp.status_code == 200
    assert resp.json()["tickets_deleted"] == 3

    assert client.delete(f"{API}/reports/data", headers=admin_headers).status_code == 400
    assert client.delete(f"{API}/reports/data", params={"confirm": True}, headers=admin_headers).status_code == 200

def test_reports_are_admin_only(client, tte_headers):
    assert client.get(f"{API}/reports/stats", headers=tte_headers).status_code == 403

@pytest.mark.parametrize("network_name", ["वाशिम", "New Delhi"])
def test_export_file_name_survives_free_text_networks(client, network_name):
    admin = ActingUser(username="admin", role=UserRole.ADMIN, working_station=network_name)
    resp = client.get(f"{API}/reports/export/tickets", params={
        "start_date": MONDAY.isoformat(), "end_date": MONDAY.isoformat()
    }, headers=auth_headers(admin))
    assert resp.status_code == 200

    disposition = resp.headers["content-disposition"]
    assert disposition.isascii()
    assert f"filename*=UTF-8''{quote(f'tickets_{network_name}_2024-06-10.csv')}" in disposition
    assert 'filename="tickets_' in disposition
    assert " " not in disposition.split('filename="')[1].split('"')[0]

def test_content_disposition_keeps_plain_names():
    header = export.content_disposition("tickets_Washim_2024-06-10.csv")
    assert header == (
        "attachment; filename=\"tickets_Washim_2024-06-10.csv\"; "
        "filename*=UTF-8''tickets_Washim_2024-06-10.csv"
    )

def test_daily_report_job_keeps_path_characters_out_of_file_names(db_session, reports, tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "REPORTS_DIR", str(tmp_path))
    db_session.add(Station(name="Outpost", code="OP", working_station="../escaped"))
    db_session.commit()

    generated = reports.generate_daily_reports(MONDAY)

    assert len(generated) == 8
    names = os.listdir(tmp_path)
    assert "tickets_.._escaped_2024-06-10.csv" in names
    assert all(os.path.dirname(r.file_path) == str(tmp_path) for r in generated)
    assert {r.working_station for r in generated} == {"../escaped", None}
