"""
Retry notifications.

A retry is announced either because the response carried a retryable status
(`StatusRetry`) or because the request raised (`FaultRetry`). Both share the
attempt bookkeeping fields.
"""

from dataclasses import dataclass
from typing import Any, Union


@dataclass(frozen=True)
class _RetryEventBase:
    attempt_number: int  # 1-based index of the retry about to happen
    max_retries: int
    request_url: str
    request_method: str
    delay: float

    def to_properties(self) -> dict[str, Any]:
        """Flatten into telemetry properties."""
        return {
            "method": self.request_method,
            "url": self.request_url,
            "attempt": self.attempt_number,
            "max_retries": self.max_retries,
            "delay_ms": round(self.delay * 1000),
        }


@dataclass(frozen=True)
class StatusRetry(_RetryEventBase):
    """Retry triggered by a retryable response status."""

    response_status: int

    def to_properties(self) -> dict[str, Any]:
        properties = super().to_properties()
        properties["status"] = self.response_status
        return properties


@dataclass(frozen=True)
class FaultRetry(_RetryEventBase):
    """Retry triggered by an exception raised while sending."""

    fault_message: str

    def to_properties(self) -> dict[str, Any]:
        properties = super().to_properties()
        properties["error_message"] = self.fault_message
        return properties


RetryEvent = Union[StatusRetry, FaultRetry]
