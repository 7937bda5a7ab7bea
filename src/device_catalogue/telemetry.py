"""
Telemetry sink interface and a logging-backed default.
"""

import logging
from typing import Any, Mapping, Protocol

logger = logging.getLogger(__name__)


class Telemetry(Protocol):
    """Receives structured events, metrics, exceptions and dependency records."""

    def track_event(self, name: str, properties: Mapping[str, Any] | None = None) -> None: ...

    def track_exception(
        self, exception: BaseException, properties: Mapping[str, Any] | None = None
    ) -> None: ...

    def track_metric(
        self, name: str, value: float, properties: Mapping[str, Any] | None = None
    ) -> None: ...

    def track_dependency(
        self,
        name: str,
        target: str,
        duration_ms: float,
        success: bool,
        status_code: int | None = None,
    ) -> None: ...


class LoggingTelemetry:
    """Writes telemetry records to the standard logger."""

    def __init__(self, log: logging.Logger | None = None):
        self.log = log or logger

    def track_event(self, name: str, properties: Mapping[str, Any] | None = None) -> None:
        self.log.info(f"event {name} {dict(properties or {})}")

    def track_exception(
        self, exception: BaseException, properties: Mapping[str, Any] | None = None
    ) -> None:
        self.log.error(
            f"exception {type(exception).__name__}: {exception} {dict(properties or {})}"
        )

    def track_metric(
        self, name: str, value: float, properties: Mapping[str, Any] | None = None
    ) -> None:
        self.log.info(f"metric {name}={value} {dict(properties or {})}")

    def track_dependency(
        self,
        name: str,
        target: str,
        duration_ms: float,
        success: bool,
        status_code: int | None = None,
    ) -> None:
        self.log.debug(
            f"dependency {name} -> {target} ({duration_ms:.0f}ms, "
            f"success={success}, status={status_code})"
        )
