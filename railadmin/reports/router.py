import io
import logging
from fastapi import APIRouter, Depends, HTTPException, status, Query
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session
from typing import Optional
from datetime import date, timedelta

from railadmin.database import get_db
from railadmin.auth.dependencies import require_admin
from railadmin.auth.schemas import ActingUser
from railadmin.reports import export
from railadmin.reports.schemas import (
    DailyReportList, DailyReportRun, ExportFormat, PurgeResult, ReportType, RevenueReport,
    StaffPerformanceReport, TableStats, TodaySummary
)
from railadmin.reports.service import ReportService

logger = logging.getLogger(__name__)

router = APIRouter()

def _date_range(start_date: Optional[date], end_date: Optional[date], default_days: int = 7):
    end_date = end_date or date.today()
    start_date = start_date or (end_date - timedelta(days=default_days - 1))
    if start_date > end_date:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Start date must not be after end date"
        )
    return start_date, end_date

def _network(working_station: Optional[str], all_networks: bool, current_user: ActingUser) -> Optional[str]:
    return None if all_networks else (working_station or current_user.working_station)

@router.get("/stats", response_model=TableStats)
def get_table_stats(
    admin_user: ActingUser = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Row counts per table"""
    return ReportService(db).table_stats()

@router.get("/today", response_model=TodaySummary)
def get_today_summary(
    working_station: Optional[str] = Query(None),
    all_networks: bool = Query(False),
    admin_user: ActingUser = Depends(require_admin),
    db: Session = Depends(get_db)
):
    return ReportService(db).today_summary(_network(working_station, all_networks, admin_user))

@router.get("/revenue", response_model=RevenueReport)
def get_revenue(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    working_station: Optional[str] = Query(None),
    all_networks: bool = Query(False),
    admin_user: ActingUser = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Revenue for a travel date range, last 7 days by default"""
    start_date, end_date = _date_range(start_date, end_date)
    return ReportService(db).revenue(start_date, end_date, _network(working_station, all_networks, admin_user))

@router.get("/staff-performance", response_model=StaffPerformanceReport)
def get_staff_performance(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    working_station: Optional[str] = Query(None),
    all_networks: bool = Query(False),
    admin_user: ActingUser = Depends(require_admin),
    db: Session = Depends(get_db)
):
    start_date, end_date = _date_range(start_date, end_date, default_days=30)
    return ReportService(db).staff_performance(
        start_date, end_date, _network(working_station, all_networks, admin_user)
    )

@router.get("/export/{report_type}")
def export_report(
    report_type: ReportType,
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    format: ExportFormat = Query(ExportFormat.CSV),
    working_station: Optional[str] = Query(None),
    all_networks: bool = Query(False),
    admin_user: ActingUser = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Download a report as CSV or Excel"""
    start_date, end_date = _date_range(start_date, end_date, default_days=1)
    network = _network(working_station, all_networks, admin_user)
    df = ReportService(db).build_report(report_type, start_date, end_date, network)
    file_name = export.report_file_name(report_type, network, start_date, end_date)

    if format == ExportFormat.CSV:
        return StreamingResponse(
            io.BytesIO(export.to_csv_bytes(df)),
            media_type=export.CSV_MEDIA_TYPE,
            headers={"Content-Disposition": export.content_disposition(file_name)}
        )
    else:  # excel
        return StreamingResponse(
            io.BytesIO(export.to_excel_bytes({report_type.value: df})),
            media_type=export.EXCEL_MEDIA_TYPE,
            headers={"Content-Disposition": export.content_disposition(f"{file_name[:-4]}.xlsx")}
        )

@router.get("/export-date")
def export_date(
    report_date: date = Query(..., alias="date"),
    working_station: Optional[str] = Query(None),
    all_networks: bool = Query(False),
    admin_user: ActingUser = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Workbook with one day's tickets and verification logs"""
    try:
        content = ReportService(db).date_workbook(
            report_date, _network(working_station, all_networks, admin_user)
        )
    except export.NoDataError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e)
        )
    return StreamingResponse(
        io.BytesIO(content),
        media_type=export.EXCEL_MEDIA_TYPE,
        headers={"Content-Disposition": export.content_disposition(f"database_data_{report_date.isoformat()}.xlsx")}
    )

@router.post("/daily", response_model=DailyReportRun)
def run_daily_reports(
    report_date: Optional[date] = Query(None, alias="date", description="Defaults to yesterday"),
    admin_user: ActingUser = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Generate the daily report files for every network"""
    service = ReportService(db)
    report_date = report_date or (date.today() - timedelta(days=1))
    reports = service.generate_daily_reports(report_date)
    expected = (len(service.working_stations()) + 1) * len(ReportType)
    return DailyReportRun(
        report_date=report_date,
        generated=len(reports),
        failed=expected - len(reports),
        reports=reports
    )

@router.get("/daily", response_model=DailyReportList)
def get_daily_reports(
    report_date: Optional[date] = Query(None, alias="date"),
    working_station: Optional[str] = Query(None),
    admin_user: ActingUser = Depends(require_admin),
    db: Session = Depends(get_db)
):
    reports = ReportService(db).list_daily_reports(report_date, working_station)
    return DailyReportList(reports=reports, total=len(reports))

@router.delete("/data/{purge_date}", response_model=PurgeResult)
def purge_date_data(
    purge_date: date,
    admin_user: ActingUser = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Delete tickets and verification logs for one date"""
    result = ReportService(db).purge_date(purge_date)
    logger.warning("Data for %s purged by %s", purge_date, admin_user.display_name)
    return PurgeResult(purge_date=purge_date, **result)

@router.delete("/data", response_model=PurgeResult)
def purge_all_data(
    confirm: bool = Query(False, description="Must be true"),
    admin_user: ActingUser = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Delete all tickets and verification logs"""
    if not confirm:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Pass confirm=true to delete all data"
        )
    result = ReportService(db).purge_all()
    logger.warning("All ticket data purged by %s", admin_user.display_name)
    return PurgeResult(**result)
