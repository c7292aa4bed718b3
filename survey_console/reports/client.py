"""
Report API Client

HTTP client for the survey backend's paginated report endpoint. The blocking
`requests` call runs in the FastAPI thread pool so the event loop only
suspends at the network boundary.

Author: Survey Console Team
"""

import logging
from typing import Optional

import requests
from fastapi.concurrency import run_in_threadpool
from pydantic import ValidationError

from .filters import query_params
from .models import ReportQuery, ReportResult

logger = logging.getLogger(__name__)


class ReportApiError(Exception):
    """Raised when the backend cannot produce a report page"""

    def __init__(self, message: str, status_code: Optional[int] = None, response: Optional[requests.Response] = None):
        super().__init__(message)
        self.status_code = status_code
        self.response = response


class ReportApiClient:
    """Fetches report pages from the survey backend"""

    def __init__(
        self,
        base_url: str,
        endpoint: str = "/dashboard/002",
        access_token: Optional[str] = None,
        timeout: int = 60,
        session: Optional[requests.Session] = None,
    ):
        self.url = f"{base_url.rstrip('/')}{endpoint}"
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"Accept": "application/json"})
        if access_token:
            self.session.headers["x-access-token"] = access_token

    @classmethod
    def from_config(cls, backend_config) -> "ReportApiClient":
        return cls(
            base_url=backend_config.base_url,
            endpoint=backend_config.report_endpoint,
            access_token=backend_config.access_token,
            timeout=backend_config.timeout_seconds,
        )

    async def get_report(self, query: ReportQuery) -> ReportResult:
        """Fetch one report page. Raises ReportApiError on any failure."""
        return await run_in_threadpool(self.fetch_report, query)

    def fetch_report(self, query: ReportQuery) -> ReportResult:
        params = query_params(query)
        logger.debug(f"Requesting report page {query.page} from {self.url}")

        try:
            response = self.session.get(self.url, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            raise ReportApiError(f"Error de conexión con el servidor: {e}") from e

        if not response.ok:
            message = f"HTTP {response.status_code}: {response.reason}"
            try:
                body = response.json()
                if isinstance(body, dict) and body.get("message"):
                    message = body["message"]
            except ValueError:
                pass
            raise ReportApiError(message, status_code=response.status_code, response=response)

        try:
            body = response.json()
        except ValueError as e:
            raise ReportApiError("Respuesta inválida del servidor") from e

        data = body.get("data", body) if isinstance(body, dict) else None
        if not isinstance(data, dict):
            raise ReportApiError("Respuesta inválida del servidor")

        try:
            return ReportResult.model_validate(data)
        except ValidationError as e:
            raise ReportApiError(f"Respuesta inválida del servidor: {e.error_count()} errores de validación") from e

    def close(self):
        self.session.close()
