"""
Retry policy definition.
"""

from dataclasses import dataclass, field
from typing import Callable, FrozenSet, TYPE_CHECKING

if TYPE_CHECKING:
    from .events import RetryEvent

DEFAULT_RETRYABLE_STATUS_CODES: FrozenSet[int] = frozenset(
    {408, 429, 500, 502, 503, 504}
)


@dataclass(frozen=True)
class RetryPolicy:
    """
    Configuration for retry behavior.

    Attributes:
        max_retries: Retries on top of the first attempt (default: 1 = 2 attempts)
        initial_delay: Delay before the first retry in seconds (default: 0.3)
        max_delay: Cap on any single delay in seconds (default: 1.5)
        backoff_multiplier: Growth factor per retry (default: 2.0)
        retryable_status_codes: HTTP status codes that trigger retry
        on_retry: Optional callback(event) called before each retry delay
        jitter: Jitter factor as fraction of delay (default: 0 = deterministic)
    """

    max_retries: int = 1
    initial_delay: float = 0.3
    max_delay: float = 1.5
    backoff_multiplier: float = 2.0
    retryable_status_codes: FrozenSet[int] = field(
        default=DEFAULT_RETRYABLE_STATUS_CODES
    )
    on_retry: Callable[["RetryEvent"], None] | None = field(
        default=None, compare=False
    )
    jitter: float = 0.0

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            raise ValueError(f"max_retries must be >= 0, got {self.max_retries}")
        if self.initial_delay < 0 or self.max_delay < 0:
            raise ValueError("Retry delays must be non-negative")
        if self.backoff_multiplier < 1:
            raise ValueError(
                f"backoff_multiplier must be >= 1, got {self.backoff_multiplier}"
            )
        if not 0 <= self.jitter <= 1:
            raise ValueError(f"jitter must be within [0, 1], got {self.jitter}")
        # Accept any iterable of codes but store an immutable set
        object.__setattr__(
            self, "retryable_status_codes", frozenset(self.retryable_status_codes)
        )

    def should_retry(self, status_code: int) -> bool:
        """Check if the given status code should trigger a retry."""
        return status_code in self.retryable_status_codes

    @classmethod
    def aggressive(cls) -> "RetryPolicy":
        """Preset for aggressive retry (more attempts, longer delays)."""
        return cls(
            max_retries=5,
            initial_delay=0.5,
            max_delay=10.0,
        )

    @classmethod
    def conservative(cls) -> "RetryPolicy":
        """Preset used by the catalogue reads: one retry, short delays."""
        return cls(
            max_retries=1,
            initial_delay=0.3,
            max_delay=1.2,
        )

    @classmethod
    def no_retry(cls) -> "RetryPolicy":
        """Preset for no retry (single attempt only)."""
        return cls(max_retries=0)
