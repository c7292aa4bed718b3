"""
Report Service

Report fetch controller for the tabular survey report. Owns the loading,
error and result state of the screen, runs at most one backend fetch at a
time and keeps the last good page when a fetch fails.

Author: Survey Console Team
"""

import asyncio
import logging
from typing import Awaitable, Optional, Protocol

from .filters import build_report_query
from .models import (
    ReportError,
    ReportErrorKind,
    ReportQuery,
    ReportResult,
    ReportState,
    ReportStatus,
)
from .notifications import Notifier, ToastNotifier
from .state import FilterStore

logger = logging.getLogger(__name__)

DATE_RANGE_REQUIRED_MESSAGE = "Por favor seleccione un rango de fechas"
REPORT_FAILED_MESSAGE = "Error al generar el reporte"


class ReportFetcher(Protocol):
    def get_report(self, query: ReportQuery) -> Awaitable[ReportResult]: ...


class ReportController:
    """
    Drives report generation and pagination.

    Callers are expected to disable generate/page triggers while a fetch is
    in flight; a request that arrives anyway is ignored and logged.
    """

    def __init__(self, filters: FilterStore, fetcher: ReportFetcher, notifier: Notifier, per_page: int = 50):
        self.filters = filters
        self.fetcher = fetcher
        self.notifier = notifier
        self.per_page = per_page

        self._status = ReportStatus.idle
        self._result: Optional[ReportResult] = None
        self._error: Optional[ReportError] = None
        self._current_page = 1

        filters.on_clear(self.reset)

    @property
    def is_loading(self) -> bool:
        return self._status == ReportStatus.loading

    @property
    def result(self) -> Optional[ReportResult]:
        return self._result

    @property
    def current_page(self) -> int:
        return self._current_page

    @property
    def total_pages(self) -> int:
        return self._result.total_pages if self._result else 0

    def state(self) -> ReportState:
        return ReportState(
            status=self._status,
            current_page=self._current_page,
            per_page=self.per_page,
            result=self._result,
            error=self._error,
        )

    def can_change_page(self, page: int) -> bool:
        """Caller guard for pagination triggers"""
        return not self.is_loading and 1 <= page <= self.total_pages

    async def generate(self, page: int = 1) -> ReportState:
        """
        Fetch one page of the report for the current filters.

        Validation and fetch failures are reported through the notifier and
        recorded on the state; they never propagate.
        """
        if self.is_loading:
            logger.warning(f"Report fetch already in progress, ignoring request for page {page}")
            return self.state()

        filters = self.filters.snapshot()
        if not filters.has_date_range():
            self._error = ReportError(kind=ReportErrorKind.validation, message=DATE_RANGE_REQUIRED_MESSAGE)
            self.notifier.warn(DATE_RANGE_REQUIRED_MESSAGE)
            return self.state()

        query = build_report_query(filters, page=page, per_page=self.per_page)
        previous_status, previous_error = self._status, self._error
        self._status = ReportStatus.loading
        self._error = None
        logger.info(f"Generating report {filters.start_date} -> {filters.end_date}, page {page}")

        try:
            result = await self.fetcher.get_report(query)
        except asyncio.CancelledError:
            logger.warning(f"Report fetch for page {page} was cancelled")
            self._status = previous_status
            self._error = previous_error
            raise
        except Exception as e:
            logger.error(f"Report fetch failed for page {page}: {e}", exc_info=True)
            self._status = ReportStatus.failed
            self._error = ReportError(kind=ReportErrorKind.fetch, message=REPORT_FAILED_MESSAGE)
            self.notifier.report_error(e, REPORT_FAILED_MESSAGE)
            return self.state()

        self._result = result
        self._current_page = page
        self._status = ReportStatus.success
        self.notifier.success(f"Reporte generado: {result.total_items} registros")
        return self.state()

    async def change_page(self, page: int) -> ReportState:
        """Load another page. Out-of-range pages leave the state unchanged."""
        if not 1 <= page <= self.total_pages:
            logger.warning(f"Ignoring page change to {page} (total pages: {self.total_pages})")
            return self.state()
        return await self.generate(page)

    def reset(self):
        """Drop the held result and any error"""
        self._status = ReportStatus.idle
        self._result = None
        self._error = None
        self._current_page = 1
        logger.debug("Report state reset")


class ReportWorkspace:
    """Filter store, notifier and controller backing one report screen"""

    def __init__(self, fetcher: ReportFetcher, notifier: Optional[ToastNotifier] = None, per_page: int = 50):
        self.filters = FilterStore()
        self.notifier = notifier or ToastNotifier()
        self.fetcher = fetcher
        self.controller = ReportController(self.filters, fetcher, self.notifier, per_page=per_page)

    def close(self):
        close = getattr(self.fetcher, "close", None)
        if close:
            close()
