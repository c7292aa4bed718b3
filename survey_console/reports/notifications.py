"""
Report Notifications

Toast-style notifications raised by the report pipeline. The web layer drains
queued toasts into its responses; every message is also written to the log.

Author: Survey Console Team
"""

import logging
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Protocol

import requests

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "Ocurrió un error inesperado"


class ToastLevel(Enum):
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class Toast:
    level: ToastLevel
    message: str

    def to_dict(self) -> dict:
        return {"level": self.level.value, "message": self.message}


class Notifier(Protocol):
    """Fire-and-forget notification sink used by the report pipeline"""

    def warn(self, message: str) -> None: ...

    def success(self, message: str) -> None: ...

    def report_error(self, err: BaseException, fallback_message: str) -> None: ...


def error_message(err: Optional[BaseException], fallback_message: str = GENERIC_ERROR_MESSAGE) -> str:
    """
    Best user-facing message for an error.

    Prefers the backend's JSON `message` or `error` field, then the exception
    text, then the fallback.
    """
    response = getattr(err, "response", None)
    if isinstance(response, requests.Response):
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            for key in ("message", "error"):
                if body.get(key):
                    return str(body[key])

    if err is not None and str(err):
        return str(err)
    return fallback_message


class ToastNotifier:
    """Queues toasts for the UI and mirrors them to the application log"""

    def __init__(self, max_pending: int = 20):
        self._pending = deque(maxlen=max_pending)

    def warn(self, message: str) -> None:
        logger.warning(message)
        self._pending.append(Toast(ToastLevel.WARNING, message))

    def success(self, message: str) -> None:
        logger.info(message)
        self._pending.append(Toast(ToastLevel.SUCCESS, message))

    def report_error(self, err: BaseException, fallback_message: str) -> None:
        message = error_message(err, fallback_message)
        logger.error(f"{fallback_message}: {message}")
        self._pending.append(Toast(ToastLevel.ERROR, message))

    def pending(self) -> List[Toast]:
        return list(self._pending)

    def drain(self) -> List[Toast]:
        """Return and forget all queued toasts"""
        toasts = list(self._pending)
        self._pending.clear()
        return toasts
