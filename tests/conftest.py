"""
================================================================================
Survey Console - Unified Test Configuration and Fixtures
================================================================================
Description:
    Shared pytest configuration and fixtures for all tests (unit, API).
    Provides sample backend payloads, a scripted report fetcher and a
    FastAPI test client wired to an isolated report workspace.

Fixtures:
    - row_payload: Factory for backend survey row dicts
    - result_payload: Factory for backend report page dicts
    - fake_fetcher: Scripted async fetch collaborator
    - notifier: Recording toast notifier
    - workspace: Report workspace using the fake fetcher
    - client: FastAPI test client bound to the workspace
================================================================================
"""
import sys
import pytest
from pathlib import Path

# Add project root to path for all tests
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))


class FakeFetcher:
    """Async fetch collaborator returning scripted results or raising errors"""

    def __init__(self):
        self.queries = []
        self.responses = []
        self.closed = False

    def queue(self, response):
        """Queue a ReportResult (returned) or an exception (raised)"""
        self.responses.append(response)

    async def get_report(self, query):
        self.queries.append(query)
        response = self.responses.pop(0)
        if isinstance(response, BaseException):
            raise response
        return response

    def close(self):
        self.closed = True


@pytest.fixture
def row_payload():
    """Factory for one survey row as sent by the backend"""
    def _make(idx=1, **overrides):
        row = {
            "_id": f"survey-{idx}",
            "fullName": f"Persona {idx}",
            "identification": f"10{idx:04d}",
            "email": f"persona{idx}@example.com",
            "phone": "3001234567",
            "gender": "Femenino",
            "ageRange": "25-34",
            "stratum": 3,
            "department": "Antioquia",
            "city": "Medellín",
            "region": "Andina",
            "neighborhood": "Laureles",
            "surveyStatus": "successful",
            "willingToRespond": True,
            "isPatriaDefender": False,
            "recordingAuthorization": True,
            "createdAt": "2024-01-15T19:30:00.000Z",
            "updatedAt": "2024-01-15T19:35:00.000Z",
            "socializer": {"_id": "soc-1", "fullName": "Carlos Ruiz", "idNumber": "80123456", "phone": "3100000000"},
            "autor": {"_id": "user-1", "email": "admin@example.com", "role": "admin"},
        }
        row.update(overrides)
        return row
    return _make


@pytest.fixture
def result_payload(row_payload):
    """Factory for one report page as sent by the backend"""
    def _make(rows=None, current_page=1, total_items=None, total_pages=None, per_page=50):
        rows = rows if rows is not None else [row_payload(1), row_payload(2)]
        total_items = total_items if total_items is not None else len(rows)
        if total_pages is None:
            total_pages = (total_items + per_page - 1) // per_page
        return {
            "currentPage": current_page,
            "itemsPerPage": per_page,
            "totalItems": total_items,
            "totalPages": total_pages,
            "filters": {},
            "surveys": rows,
        }
    return _make


@pytest.fixture
def fake_fetcher():
    return FakeFetcher()


@pytest.fixture
def notifier():
    from survey_console.reports.notifications import ToastNotifier
    return ToastNotifier()


@pytest.fixture
def workspace(fake_fetcher, notifier):
    from survey_console.reports.service import ReportWorkspace
    return ReportWorkspace(fake_fetcher, notifier=notifier, per_page=50)


@pytest.fixture
def client(workspace):
    """Create a FastAPI test client for API endpoint tests"""
    from fastapi.testclient import TestClient
    from survey_console.app import app, app_state

    app_state["workspace"] = workspace
    yield TestClient(app)
    app_state["workspace"] = None
