"""
Reports Module

Tabular survey report pipeline: filter state, query building, paginated
fetching from the survey backend, CSV export and the web routes that render
the report screen.

Author: Survey Console Team
"""

from .router import router as reports_router, pages_router as report_pages_router
from .filters import build_report_query, query_params
from .models import ReportQuery, ReportResult, ReportRow, ReportState, ReportStatus
from .service import ReportController, ReportWorkspace
from .state import FilterState, FilterStore, TriState
from .export import export_csv

__all__ = [
    "reports_router",
    "report_pages_router",
    "build_report_query",
    "query_params",
    "ReportQuery",
    "ReportResult",
    "ReportRow",
    "ReportState",
    "ReportStatus",
    "ReportController",
    "ReportWorkspace",
    "FilterState",
    "FilterStore",
    "TriState",
    "export_csv",
]
