import logging
from enum import Enum
from typing import Protocol


class Severity(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class Notifier(Protocol):
    def notify(self, title: str, message: str, severity: Severity = Severity.INFO) -> None:
        ...


class LoggingNotifier:
    """Reports outcomes through the application log."""

    _levels = {
        Severity.INFO: logging.INFO,
        Severity.SUCCESS: logging.INFO,
        Severity.WARNING: logging.WARNING,
        Severity.ERROR: logging.ERROR,
    }

    def __init__(self, logger_name: str = "hostel_admin.notifications"):
        self.logger = logging.getLogger(logger_name)

    def notify(self, title: str, message: str, severity: Severity = Severity.INFO) -> None:
        self.logger.log(self._levels[severity], "%s: %s", title, message)
