"""
Notification capability — ``notify(title, message, severity)``.

The views only depend on the Notifier protocol; the UI shell supplies the
implementation. LogNotifier is the default for headless use.
"""

import logging
from enum import Enum
from typing import Protocol

logger = logging.getLogger(__name__)


class Severity(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    ERROR = "error"


class Notifier(Protocol):
    def notify(self, title: str, message: str, severity: Severity = Severity.INFO) -> None: ...


class LogNotifier:
    """Writes every notification to the log."""

    _levels = {
        Severity.INFO: logging.INFO,
        Severity.SUCCESS: logging.INFO,
        Severity.ERROR: logging.WARNING,
    }

    def notify(self, title: str, message: str, severity: Severity = Severity.INFO) -> None:
        logger.log(self._levels[Severity(severity)], "[%s] %s: %s", Severity(severity).value, title, message)
