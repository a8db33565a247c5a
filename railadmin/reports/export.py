import io
import re
from typing import Dict, Iterable, List, Optional
from urllib.parse import quote

import pandas as pd

from railadmin.models import Ticket, VerificationLog
from railadmin.reports.schemas import ReportType

REPORT_COLUMNS: Dict[ReportType, List[str]] = {
    ReportType.TICKETS: [
        "Travel ID", "Passenger Name", "Passenger Count", "From Station", "To Station",
        "Train", "Class", "Amount", "Travel Date", "Created At", "Verified"
    ],
    ReportType.PLATFORM_TICKETS: [
        "Travel ID", "Passenger Name", "Passenger Count", "Amount", "Travel Date",
        "Created At", "Verified"
    ],
    ReportType.VERIFICATION_LOGS: [
        "Travel ID", "Verified By", "Status", "Verified At", "Fraud Attempt", "Details"
    ],
    ReportType.REVENUE: [
        "Date", "Class", "Amount", "Passengers", "From Station", "To Station"
    ],
}

# Sheets of the single-date workbook
DATE_TICKET_COLUMNS = [
    "Travel ID", "Passenger Name", "From", "To", "Travel Date", "Class", "Price",
    "Created By", "Verified"
]
DATE_LOG_COLUMNS = ["Travel ID", "Status", "Verified By", "Verified At", "Fraud Attempt", "Details"]

CSV_MEDIA_TYPE = "text/csv"
EXCEL_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

class NoDataError(ValueError):
    """Nothing to export"""

def _timestamp(value) -> str:
    return value.strftime("%Y-%m-%d %H:%M:%S") if value else ""

def _yes_no(flag: bool) -> str:
    return "Yes" if flag else "No"

def _train_label(ticket: Ticket) -> str:
    if ticket.train is None:
        return ""
    return f"{ticket.train.name} ({ticket.train.number})"

def ticket_row(ticket: Ticket) -> dict:
    return {
        "Travel ID": ticket.travel_id,
        "Passenger Name": ticket.passenger_name,
        "Passenger Count": ticket.passenger_count,
        "From Station": ticket.from_station_name or "",
        "To Station": ticket.to_station_name or "",
        "Train": _train_label(ticket),
        "Class": ticket.class_type,
        "Amount": float(ticket.total_price),
        "Travel Date": ticket.travel_date.isoformat(),
        "Created At": _timestamp(ticket.created_at),
        "Verified": _yes_no(ticket.is_verified),
    }

def platform_ticket_row(ticket: Ticket) -> dict:
    return {
        "Travel ID": ticket.travel_id,
        "Passenger Name": ticket.passenger_name,
        "Passenger Count": ticket.passenger_count,
        "Amount": float(ticket.total_price),
        "Travel Date": ticket.travel_date.isoformat(),
        "Created At": _timestamp(ticket.created_at),
        "Verified": _yes_no(ticket.is_verified),
    }

def log_row(log: VerificationLog) -> dict:
    return {
        "Travel ID": log.travel_id,
        "Verified By": log.verified_by,
        "Status": log.status,
        "Verified At": _timestamp(log.verified_at),
        "Fraud Attempt": _yes_no(log.fraud_attempt),
        "Details": log.details or "",
    }

def revenue_row(ticket: Ticket) -> dict:
    return {
        "Date": ticket.travel_date.isoformat(),
        "Class": ticket.class_type,
        "Amount": float(ticket.total_price),
        "Passengers": ticket.passenger_count,
        "From Station": ticket.from_station_name or "",
        "To Station": ticket.to_station_name or "",
    }

ROW_BUILDERS = {
    ReportType.TICKETS: ticket_row,
    ReportType.PLATFORM_TICKETS: platform_ticket_row,
    ReportType.VERIFICATION_LOGS: log_row,
    ReportType.REVENUE: revenue_row,
}

def build_frame(report_type: ReportType, records: Iterable) -> pd.DataFrame:
    """Report rows in their fixed column order; an empty report keeps its header"""
    rows = [ROW_BUILDERS[report_type](record) for record in records]
    return pd.DataFrame(rows, columns=REPORT_COLUMNS[report_type])

def to_csv_bytes(df: pd.DataFrame) -> bytes:
    output = io.StringIO()
    df.to_csv(output, index=False)
    return output.getvalue().encode()

def to_excel_bytes(sheets: Dict[str, pd.DataFrame]) -> bytes:
    output = io.BytesIO()
    with pd.ExcelWriter(output, engine='openpyxl') as writer:
        for sheet_name, df in sheets.items():
            df.to_excel(writer, sheet_name=sheet_name, index=False)
    return output.getvalue()

def date_workbook(tickets: List[Ticket], logs: List[VerificationLog]) -> bytes:
    """Workbook of one day's tickets and verification logs; empty sheets are left out"""
    if not tickets and not logs:
        raise NoDataError("No data available for the selected date")

    sheets = {}
    if tickets:
        sheets["Tickets"] = pd.DataFrame([
            {
                "Travel ID": t.travel_id,
                "Passenger Name": t.passenger_name,
                "From": t.from_station_name or "Unknown",
                "To": t.to_station_name or "Unknown",
                "Travel Date": t.travel_date.isoformat(),
                "Class": t.class_type,
                "Price": float(t.total_price),
                "Created By": t.created_by,
                "Verified": _yes_no(t.is_verified),
            } for t in tickets
        ], columns=DATE_TICKET_COLUMNS)
    if logs:
        sheets["Verification Logs"] = pd.DataFrame([
            {
                "Travel ID": log.travel_id,
                "Status": log.status,
                "Verified By": log.verified_by,
                "Verified At": _timestamp(log.verified_at) or "Unknown",
                "Fraud Attempt": _yes_no(log.fraud_attempt),
                "Details": log.details or "None",
            } for log in logs
        ], columns=DATE_LOG_COLUMNS)
    return to_excel_bytes(sheets)

def report_file_name(report_type: ReportType, working_station: Optional[str], start_date, end_date=None) -> str:
    """``tickets_Washim_2024-06-10.csv`` or ``..._2024-06-01_to_2024-06-10.csv``"""
    network = _file_part(working_station) if working_station else "all"
    if end_date is None or end_date == start_date:
        return f"{report_type.value}_{network}_{start_date.isoformat()}.csv"
    return f"{report_type.value}_{network}_{start_date.isoformat()}_to_{end_date.isoformat()}.csv"

# Path separators, reserved and control characters never reach a file name
_UNSAFE_FILE_CHARS = re.compile(r'[\x00-\x1f\\/:*?"<>|]+')

def _file_part(value: str) -> str:
    return _UNSAFE_FILE_CHARS.sub("_", value.strip()) or "_"

def content_disposition(file_name: str) -> str:
    """Attachment header with an ASCII fallback and the UTF-8 name (RFC 6266)"""
    fallback = re.sub(r"[^A-Za-z0-9._-]+", "_", file_name)
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(file_name)}"
