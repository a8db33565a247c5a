import logging
import os
from collections import OrderedDict
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Callable, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from railadmin.config import settings
from railadmin.models import (
    DailyReport, Staff, Station, Ticket, Train, TrainRoute, TrainSchedule, VerificationLog
)
from railadmin.reports import export
from railadmin.reports.schemas import (
    ReportType, RevenueBreakdown, RevenueReport, StaffPerformanceEntry, StaffPerformanceReport,
    TableStats, TodaySummary
)
from railadmin.tickets.repository import PLATFORM_CLASS

logger = logging.getLogger(__name__)

def _day_bounds(start_date: date, end_date: date):
    return datetime.combine(start_date, time.min), datetime.combine(end_date, time.max)

def _acted_as(recorded: Optional[str], name: str) -> bool:
    """Match a created_by/verified_by value against a staff name"""
    if not recorded:
        return False
    return recorded == name or recorded.startswith(f"{name} (")

class ReportService:
    """Dashboards, report queries, the daily report job and data purges"""

    def __init__(self, db: Session, clock: Callable[[], datetime] = datetime.now):
        self.db = db
        self.clock = clock

    # Report queries

    def tickets_between(
        self,
        start_date: date,
        end_date: date,
        working_station: Optional[str] = None,
        platform: Optional[bool] = None
    ) -> List[Ticket]:
        """Tickets by travel date range"""
        query = self.db.query(Ticket).options(
            joinedload(Ticket.from_station),
            joinedload(Ticket.to_station),
            joinedload(Ticket.train)
        ).filter(
            Ticket.travel_date >= start_date,
            Ticket.travel_date <= end_date
        )
        if working_station:
            query = query.filter(Ticket.working_station == working_station)
        if platform is True:
            query = query.filter(Ticket.class_type == PLATFORM_CLASS)
        elif platform is False:
            query = query.filter(Ticket.class_type != PLATFORM_CLASS)
        return query.order_by(Ticket.travel_date, Ticket.id).all()

    def logs_between(
        self,
        start_date: date,
        end_date: date,
        working_station: Optional[str] = None
    ) -> List[VerificationLog]:
        """Verification logs by verification date range"""
        start, end = _day_bounds(start_date, end_date)
        query = self.db.query(VerificationLog).filter(
            VerificationLog.verified_at >= start,
            VerificationLog.verified_at <= end
        )
        if working_station:
            query = query.filter(VerificationLog.working_station == working_station)
        return query.order_by(VerificationLog.verified_at, VerificationLog.id).all()

    def report_records(
        self,
        report_type: ReportType,
        start_date: date,
        end_date: date,
        working_station: Optional[str] = None
    ) -> list:
        if report_type == ReportType.TICKETS:
            return self.tickets_between(start_date, end_date, working_station, platform=False)
        if report_type == ReportType.PLATFORM_TICKETS:
            return self.tickets_between(start_date, end_date, working_station, platform=True)
        if report_type == ReportType.VERIFICATION_LOGS:
            return self.logs_between(start_date, end_date, working_station)
        return self.tickets_between(start_date, end_date, working_station)

    def build_report(
        self,
        report_type: ReportType,
        start_date: date,
        end_date: date,
        working_station: Optional[str] = None
    ):
        records = self.report_records(report_type, start_date, end_date, working_station)
        return export.build_frame(report_type, records)

    def date_workbook(self, report_date: date, working_station: Optional[str] = None) -> bytes:
        tickets = self.tickets_between(report_date, report_date, working_station)
        logs = self.logs_between(report_date, report_date, working_station)
        return export.date_workbook(tickets, logs)

    # Dashboards

    def table_stats(self) -> TableStats:
        return TableStats(
            stations=self.db.query(Station).count(),
            trains=self.db.query(Train).count(),
            train_routes=self.db.query(TrainRoute).count(),
            train_schedules=self.db.query(TrainSchedule).count(),
            tickets=self.db.query(Ticket).count(),
            verification_logs=self.db.query(VerificationLog).count(),
            staff=self.db.query(Staff).count(),
            daily_reports=self.db.query(DailyReport).count()
        )

    def today_summary(self, working_station: Optional[str] = None) -> TodaySummary:
        """Sales by today's travel date and verifications made today"""
        today = self.clock().date()
        tickets = self.tickets_between(today, today, working_station)
        logs = self.logs_between(today, today, working_station)

        revenue = sum((Decimal(t.total_price) for t in tickets), Decimal('0'))
        average = (revenue / len(tickets)).quantize(Decimal('0.01')) if tickets else Decimal('0')

        return TodaySummary(
            date=today,
            total_tickets=len(tickets),
            platform_tickets=sum(1 for t in tickets if t.class_type == PLATFORM_CLASS),
            total_passengers=sum(t.passenger_count for t in tickets),
            total_revenue=revenue,
            average_ticket_price=average,
            verifications=len(logs),
            valid_verifications=sum(1 for log in logs if log.status == "valid"),
            fraud_attempts=sum(1 for log in logs if log.fraud_attempt),
            duplicates=sum(1 for log in logs if log.status == "duplicate"),
            expired=sum(1 for log in logs if log.status == "expired")
        )

    def revenue(self, start_date: date, end_date: date, working_station: Optional[str] = None) -> RevenueReport:
        """Revenue by class, by origin station and by travel day"""
        tickets = self.tickets_between(start_date, end_date, working_station)

        def breakdown(key_of) -> List[RevenueBreakdown]:
            buckets: Dict[str, dict] = OrderedDict()
            for ticket in tickets:
                key = key_of(ticket)
                bucket = buckets.setdefault(key, {"revenue": Decimal('0'), "passengers": 0, "tickets": 0})
                bucket["revenue"] += Decimal(ticket.total_price)
                bucket["passengers"] += ticket.passenger_count
                bucket["tickets"] += 1
            return [RevenueBreakdown(key=key, **values) for key, values in buckets.items()]

        return RevenueReport(
            start_date=start_date,
            end_date=end_date,
            total_revenue=sum((Decimal(t.total_price) for t in tickets), Decimal('0')),
            total_passengers=sum(t.passenger_count for t in tickets),
            total_tickets=len(tickets),
            by_class=breakdown(lambda t: t.class_type),
            by_station=breakdown(lambda t: t.from_station_name or t.working_station or "Platform"),
            by_day=breakdown(lambda t: t.travel_date.isoformat())
        )

    def staff_performance(
        self,
        start_date: date,
        end_date: date,
        working_station: Optional[str] = None
    ) -> StaffPerformanceReport:
        """Tickets issued and verifications made per active staff member"""
        staff_query = self.db.query(Staff).filter(Staff.is_active == True)
        if working_station:
            staff_query = staff_query.filter(Staff.working_station == working_station)
        members = staff_query.order_by(Staff.name).all()

        start, end = _day_bounds(start_date, end_date)
        tickets = self.db.query(Ticket).filter(
            Ticket.created_at >= start,
            Ticket.created_at <= end
        ).all()
        logs = self.logs_between(start_date, end_date)
        today = self.clock().date()

        entries = []
        for member in members:
            created = [t for t in tickets if _acted_as(t.created_by, member.name)]
            checked = [log for log in logs if _acted_as(log.verified_by, member.name)]
            verified = [log for log in checked if log.status == "valid"]
            revenue = sum((Decimal(t.total_price) for t in created), Decimal('0'))

            activity = [t.created_at for t in created if t.created_at] + [log.verified_at for log in checked]
            last_activity = max(activity) if activity else None

            entries.append(StaffPerformanceEntry(
                staff_id=member.staff_id,
                name=member.name,
                role=member.role,
                working_station=member.working_station,
                tickets_created=len(created),
                total_revenue=revenue,
                average_ticket_price=(revenue / len(created)).quantize(Decimal('0.01')) if created else Decimal('0'),
                tickets_verified=len(verified),
                fraud_caught=sum(1 for log in checked if log.fraud_attempt),
                last_activity=last_activity,
                active_today=bool(last_activity and last_activity.date() == today)
            ))

        return StaffPerformanceReport(
            start_date=start_date,
            end_date=end_date,
            staff=entries,
            total=len(entries)
        )

    # Daily report job

    def working_stations(self) -> List[str]:
        rows = self.db.query(Station.working_station).filter(
            Station.working_station.isnot(None)
        ).distinct().order_by(Station.working_station).all()
        return [row[0] for row in rows]

    def generate_daily_reports(self, report_date: Optional[date] = None) -> List[DailyReport]:
        """Write every report type for each network and for all networks.

        A failing report is logged and skipped; the rest still run.
        """
        report_date = report_date or (self.clock().date() - timedelta(days=1))
        logger.info("Generating daily reports for %s", report_date)

        os.makedirs(settings.REPORTS_DIR, exist_ok=True)
        generated = []
        networks: List[Optional[str]] = self.working_stations() + [None]

        for network in networks:
            for report_type in ReportType:
                try:
                    generated.append(self._write_report(report_type, report_date, network))
                except (SQLAlchemyError, OSError) as e:
                    self.db.rollback()
                    logger.error(
                        "Error generating %s report for %s: %s",
                        report_type.value, network or "all stations", e
                    )

        logger.info("Generated %d daily reports for %s", len(generated), report_date)
        return generated

    def _write_report(self, report_type: ReportType, report_date: date, network: Optional[str]) -> DailyReport:
        df = self.build_report(report_type, report_date, report_date, network)
        content = export.to_csv_bytes(df)
        file_name = export.report_file_name(report_type, network, report_date)
        file_path = os.path.join(settings.REPORTS_DIR, file_name)
        with open(file_path, "wb") as fh:
            fh.write(content)

        record = DailyReport(
            report_date=report_date,
            report_type=report_type.value,
            file_name=file_name,
            file_path=file_path,
            file_size=len(content),
            working_station=network
        )
        self.db.add(record)
        self.db.commit()
        self.db.refresh(record)
        logger.info("Generated %s report for %s", report_type.value, network or "all stations")
        return record

    def list_daily_reports(
        self,
        report_date: Optional[date] = None,
        working_station: Optional[str] = None
    ) -> List[DailyReport]:
        query = self.db.query(DailyReport)
        if report_date:
            query = query.filter(DailyReport.report_date == report_date)
        if working_station:
            query = query.filter(DailyReport.working_station == working_station)
        return query.order_by(DailyReport.report_date.desc(), DailyReport.id).all()

    # Data purge

    def purge_date(self, purge_date: date) -> Dict[str, int]:
        """Delete tickets travelling on a date and logs written on that date"""
        ticket_ids = [
            row[0] for row in
            self.db.query(Ticket.id).filter(Ticket.travel_date == purge_date).all()
        ]
        start, end = _day_bounds(purge_date, purge_date)

        if ticket_ids:
            self.db.query(VerificationLog).filter(
                VerificationLog.ticket_id.in_(ticket_ids)
            ).update({"ticket_id": None}, synchronize_session=False)
        logs_deleted = self.db.query(VerificationLog).filter(
            VerificationLog.verified_at >= start,
            VerificationLog.verified_at <= end
        ).delete(synchronize_session=False)
        tickets_deleted = self.db.query(Ticket).filter(
            Ticket.travel_date == purge_date
        ).delete(synchronize_session=False)
        self.db.commit()

        logger.warning(
            "Purged %d tickets and %d verification logs for %s",
            tickets_deleted, logs_deleted, purge_date
        )
        return {"tickets_deleted": tickets_deleted, "logs_deleted": logs_deleted}

    def purge_all(self) -> Dict[str, int]:
        """Delete every ticket and verification log"""
        logs_deleted = self.db.query(VerificationLog).delete(synchronize_session=False)
        tickets_deleted = self.db.query(Ticket).delete(synchronize_session=False)
        self.db.commit()
        logger.warning("Purged all data: %d tickets, %d verification logs", tickets_deleted, logs_deleted)
        return {"tickets_deleted": tickets_deleted, "logs_deleted": logs_deleted}
