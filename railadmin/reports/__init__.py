"""
Reports Module

Dashboards, CSV/Excel exports, the daily report job and administrative
data purges over tickets and verification logs.
"""

from .router import router
from .service import ReportService
from .schemas import ReportType, ExportFormat

__all__ = [
    "router",
    "ReportService",
    "ReportType",
    "ExportFormat",
]
