from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime, date
from decimal import Decimal
from enum import Enum

class ReportType(str, Enum):
    TICKETS = "tickets"
    PLATFORM_TICKETS = "platform_tickets"
    VERIFICATION_LOGS = "verification_logs"
    REVENUE = "revenue"

class ExportFormat(str, Enum):
    CSV = "csv"
    EXCEL = "excel"

# Dashboard Models
class TableStats(BaseModel):
    stations: int
    trains: int
    train_routes: int
    train_schedules: int
    tickets: int
    verification_logs: int
    staff: int
    daily_reports: int

class TodaySummary(BaseModel):
    date: date
    total_tickets: int
    platform_tickets: int
    total_passengers: int
    total_revenue: Decimal
    average_ticket_price: Decimal
    verifications: int
    valid_verifications: int
    fraud_attempts: int
    duplicates: int
    expired: int

class RevenueBreakdown(BaseModel):
    key: str
    revenue: Decimal
    passengers: int
    tickets: int

class RevenueReport(BaseModel):
    start_date: date
    end_date: date
    total_revenue: Decimal
    total_passengers: int
    total_tickets: int
    by_class: List[RevenueBreakdown]
    by_station: List[RevenueBreakdown]
    by_day: List[RevenueBreakdown]

class StaffPerformanceEntry(BaseModel):
    staff_id: str
    name: str
    role: str
    working_station: Optional[str] = None
    tickets_created: int
    total_revenue: Decimal
    average_ticket_price: Decimal
    tickets_verified: int
    fraud_caught: int
    last_activity: Optional[datetime] = None
    active_today: bool

class StaffPerformanceReport(BaseModel):
    start_date: date
    end_date: date
    staff: List[StaffPerformanceEntry]
    total: int

# Daily Report Models
class DailyReport(BaseModel):
    id: int
    report_date: date
    report_type: str
    file_name: str
    file_path: str
    file_size: int
    working_station: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class DailyReportList(BaseModel):
    reports: List[DailyReport]
    total: int

class DailyReportRun(BaseModel):
    report_date: date
    generated: int
    failed: int
    reports: List[DailyReport]

# Data Purge Models
class PurgeResult(BaseModel):
    purge_date: Optional[date] = None
    tickets_deleted: int
    logs_deleted: int
