"""
================================================================================
Survey Console - Report Notifications Unit Tests
================================================================================
Description:
    Unit tests for toast notifications and user-facing error messages.
================================================================================
"""
import json

import requests

from survey_console.reports.client import ReportApiError
from survey_console.reports.notifications import (
    GENERIC_ERROR_MESSAGE,
    Toast,
    ToastLevel,
    ToastNotifier,
    error_message,
)


def make_response(status_code, body):
    response = requests.Response()
    response.status_code = status_code
    response._content = json.dumps(body).encode("utf-8")
    response.encoding = "utf-8"
    return response


class TestErrorMessage:
    """Test message selection for failed operations"""

    def test_backend_message_preferred(self):
        err = ReportApiError("HTTP 400", status_code=400, response=make_response(400, {"message": "Rango inválido"}))
        assert error_message(err, "fallback") == "Rango inválido"

    def test_backend_error_field(self):
        err = ReportApiError("HTTP 500", status_code=500, response=make_response(500, {"error": "DB caída"}))
        assert error_message(err, "fallback") == "DB caída"

    def test_exception_text(self):
        assert error_message(RuntimeError("timeout"), "fallback") == "timeout"

    def test_fallback(self):
        assert error_message(RuntimeError(), "fallback") == "fallback"
        assert error_message(None) == GENERIC_ERROR_MESSAGE


class TestToastNotifier:
    """Test queued toasts"""

    def test_levels(self):
        notifier = ToastNotifier()
        notifier.warn("w")
        notifier.success("s")
        notifier.report_error(RuntimeError("e"), "fallback")
        assert notifier.pending() == [
            Toast(ToastLevel.WARNING, "w"),
            Toast(ToastLevel.SUCCESS, "s"),
            Toast(ToastLevel.ERROR, "e"),
        ]

    def test_drain_empties_queue(self):
        notifier = ToastNotifier()
        notifier.success("done")
        assert [t.to_dict() for t in notifier.drain()] == [{"level": "success", "message": "done"}]
        assert notifier.drain() == []

    def test_queue_is_bounded(self):
        notifier = ToastNotifier(max_pending=3)
        for i in range(5):
            notifier.warn(str(i))
        assert [t.message for t in notifier.pending()] == ["2", "3", "4"]
