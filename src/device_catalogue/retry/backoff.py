"""
Backoff calculation and the retrying request executor.
"""

import asyncio
import functools
import logging
import random
from typing import Any, Awaitable, Callable, Generic, Protocol, TypeVar

from .config import RetryPolicy
from .events import FaultRetry, RetryEvent, StatusRetry

logger = logging.getLogger(__name__)


class HasStatusCode(Protocol):
    status_code: int


RequestT = TypeVar("RequestT")
ResponseT = TypeVar("ResponseT", bound=HasStatusCode)


def calculate_backoff(attempt: int, policy: RetryPolicy) -> float:
    """
    Calculate backoff delay for a given attempt.

    Args:
        attempt: Zero-based index of the attempt that just failed
        policy: Retry policy

    Returns:
        Delay in seconds, capped at policy.max_delay
    """
    try:
        delay = policy.initial_delay * (policy.backoff_multiplier**attempt)
    except OverflowError:
        # Growth past float range; only a zero initial delay stays below the cap
        delay = policy.max_delay if policy.initial_delay > 0 else 0.0

    # Apply max delay cap
    delay = min(delay, policy.max_delay)

    # Apply jitter (±jitter%)
    if policy.jitter > 0:
        jitter_amount = delay * policy.jitter * (2 * random.random() - 1)
        delay = min(delay + jitter_amount, policy.max_delay)

    return max(0.0, delay)


def describe_request(request: Any) -> tuple[str, str]:
    """Return (url, method) of a request description for logging and events."""
    url = getattr(request, "url", None)
    if url is not None:
        method = getattr(request, "method", None) or "GET"
        return str(url), str(method).upper()
    return str(request), "GET"


def _noop(event: RetryEvent) -> None:
    return None


class RetryingRequestExecutor(Generic[RequestT, ResponseT]):
    """
    Wraps a single-attempt request function with bounded retry.

    Retries happen when `send` raises or returns a response whose status is in
    the policy's retryable set. The outcome of the last attempt is handed back
    untouched: a final retryable response is returned, a final exception is
    re-raised.

    The executor is method agnostic. Do not wrap non-idempotent requests whose
    failure may have partially succeeded server-side.
    """

    def __init__(
        self,
        send: Callable[[RequestT], Awaitable[ResponseT]],
        policy: RetryPolicy | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        """
        Initialize the executor.

        Args:
            send: Async function performing exactly one attempt
            policy: Retry policy (default: RetryPolicy())
            sleep: Async timer used between attempts
        """
        self.send = send
        self.policy = policy or RetryPolicy()
        self._sleep = sleep
        self._on_retry = self.policy.on_retry or _noop

    def _notify(self, event: RetryEvent) -> None:
        try:
            self._on_retry(event)
        except Exception:
            logger.exception(
                f"on_retry callback failed for {event.request_method} {event.request_url}"
            )

    async def execute(self, request: RequestT) -> ResponseT:
        """
        Send the request, retrying transient failures.

        Args:
            request: Request description, passed to `send` unchanged on every attempt

        Returns:
            The response of the last attempt
        """
        policy = self.policy
        url, method = describe_request(request)

        attempt = 0
        while True:
            try:
                response = await self.send(request)
            except Exception as e:
                if attempt >= policy.max_retries:
                    if policy.max_retries > 0:
                        logger.error(
                            f"{method} {url} failed after {attempt + 1} attempts: {e}"
                        )
                    raise
                delay = calculate_backoff(attempt, policy)
                event: RetryEvent = FaultRetry(
                    attempt_number=attempt + 1,
                    max_retries=policy.max_retries,
                    request_url=url,
                    request_method=method,
                    delay=delay,
                    fault_message=str(e) or type(e).__name__,
                )
                logger.warning(
                    f"Retry {attempt + 1}/{policy.max_retries} for {method} {url}: "
                    f"{event.fault_message}, waiting {delay:.2f}s"
                )
            else:
                if not policy.should_retry(response.status_code):
                    return response
                if attempt >= policy.max_retries:
                    if policy.max_retries > 0:
                        logger.error(
                            f"{method} {url} still {response.status_code} "
                            f"after {attempt + 1} attempts"
                        )
                    return response
                delay = calculate_backoff(attempt, policy)
                event = StatusRetry(
                    attempt_number=attempt + 1,
                    max_retries=policy.max_retries,
                    request_url=url,
                    request_method=method,
                    delay=delay,
                    response_status=response.status_code,
                )
                logger.warning(
                    f"Retry {attempt + 1}/{policy.max_retries} for {method} {url}: "
                    f"status {response.status_code}, waiting {delay:.2f}s"
                )

            self._notify(event)
            await self._sleep(delay)
            attempt += 1

    __call__ = execute


def async_with_retry(
    policy: RetryPolicy | None = None,
) -> Callable[
    [Callable[[RequestT], Awaitable[ResponseT]]],
    Callable[[RequestT], Awaitable[ResponseT]],
]:
    """
    Decorator adding retry to an async single-attempt request function.

    Args:
        policy: Retry policy (default: RetryPolicy())

    Returns:
        Decorator producing a function with the same signature
    """

    def decorator(
        send: Callable[[RequestT], Awaitable[ResponseT]],
    ) -> Callable[[RequestT], Awaitable[ResponseT]]:
        executor: RetryingRequestExecutor[RequestT, ResponseT] = RetryingRequestExecutor(
            send, policy
        )

        @functools.wraps(send)
        async def wrapper(request: RequestT) -> ResponseT:
            return await executor.execute(request)

        return wrapper

    return decorator
