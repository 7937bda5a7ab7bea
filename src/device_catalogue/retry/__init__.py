"""
Device Catalogue - Retry Logic.

Bounded retry with exponential backoff for transient HTTP failures.
"""

from .config import DEFAULT_RETRYABLE_STATUS_CODES, RetryPolicy
from .events import FaultRetry, RetryEvent, StatusRetry
from .backoff import (
    RetryingRequestExecutor,
    async_with_retry,
    calculate_backoff,
    describe_request,
)

__all__ = [
    "DEFAULT_RETRYABLE_STATUS_CODES",
    "RetryPolicy",
    "RetryEvent",
    "StatusRetry",
    "FaultRetry",
    "RetryingRequestExecutor",
    "async_with_retry",
    "calculate_backoff",
    "describe_request",
]
