"""Routing of view and source failures.

Comparison anomalies arrive here as warnings and source cancellations as
errors.  Every report is logged and published on the :class:`EventBus`;
only errors and critical failures reach the owner callback.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from ..events.bus import Event, EventBus


class ErrorSeverity(Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


OwnerCallback = Callable[[Exception, ErrorSeverity], None]


@dataclass(kw_only=True)
class ErrorOccurredEvent(Event):
    error: Exception
    severity: ErrorSeverity
    # ``repr`` of the reporting view, when a view reported it.
    view: Optional[str] = None
    # Ordering field involved in a comparison anomaly.
    field_path: Optional[str] = None


class ErrorHandler:
    """Route view and source failures to the log, the bus and the view's owner."""

    def __init__(self, logger: logging.Logger, event_bus: EventBus):
        self._logger = logger
        self._events = event_bus
        self._owner_callback: Optional[OwnerCallback] = None

    def register_owner_callback(self, callback: Optional[OwnerCallback]) -> None:
        self._owner_callback = callback

    def handle(
        self,
        error: Exception,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        *,
        view: Optional[str] = None,
        field_path: Optional[str] = None,
    ) -> None:
        log = getattr(self._logger, severity.value, self._logger.error)
        if field_path is None:
            log("%s from %s: %s", type(error).__name__, view or "livelist", error)
        else:
            log(
                "%s on %r from %s: %s",
                type(error).__name__,
                field_path,
                view or "livelist",
                error,
            )

        self._events.publish(
            ErrorOccurredEvent(
                error=error,
                severity=severity,
                view=view,
                field_path=field_path,
            )
        )

        if self._owner_callback is not None and severity in (
            ErrorSeverity.ERROR,
            ErrorSeverity.CRITICAL,
        ):
            self._owner_callback(error, severity)
