"""Tests for retry module - behavior focused."""

import asyncio

import httpx
import pytest

from device_catalogue.retry import (
    FaultRetry,
    RetryingRequestExecutor,
    RetryPolicy,
    StatusRetry,
    async_with_retry,
    calculate_backoff,
)

URL = "http://test-api.com/api/catalogue"


# --- Helpers ---


class Recorder:
    """Collects sleeps and retry events in the order they happen."""

    def __init__(self):
        self.timeline: list[tuple[str, object]] = []

    @property
    def delays(self) -> list[float]:
        return [value for kind, value in self.timeline if kind == "sleep"]

    @property
    def events(self) -> list:
        return [value for kind, value in self.timeline if kind == "event"]

    async def sleep(self, delay: float) -> None:
        self.timeline.append(("sleep", delay))

    def on_retry(self, event) -> None:
        self.timeline.append(("event", event))


def scripted_send(outcomes: list):
    """Async send function replaying responses/exceptions, last one repeating."""
    calls = []

    async def send(request):
        calls.append(request)
        outcome = outcomes[min(len(calls) - 1, len(outcomes) - 1)]
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    send.calls = calls
    return send


def make_executor(send, recorder: Recorder, **policy_kwargs) -> RetryingRequestExecutor:
    policy = RetryPolicy(on_retry=recorder.on_retry, **policy_kwargs)
    return RetryingRequestExecutor(send, policy, sleep=recorder.sleep)


def get_request() -> httpx.Request:
    return httpx.Request("GET", URL)


class TestCalculateBackoff:
    """Test backoff calculation behavior."""

    def test_first_retry_uses_initial_delay(self):
        """Attempt 0 waits exactly initial_delay."""
        policy = RetryPolicy(initial_delay=0.3, max_delay=10.0)

        assert calculate_backoff(0, policy) == pytest.approx(0.3)

    def test_delay_sequence_is_capped(self):
        """300ms, 600ms, then capped at 1200ms."""
        policy = RetryPolicy(initial_delay=0.3, backoff_multiplier=2, max_delay=1.2)

        delays = [calculate_backoff(a, policy) for a in range(4)]

        assert delays == pytest.approx([0.3, 0.6, 1.2, 1.2])

    def test_backoff_respects_max_delay(self):
        """Delay never exceeds max_delay."""
        policy = RetryPolicy(initial_delay=1.0, max_delay=5.0)

        assert calculate_backoff(100, policy) <= policy.max_delay

    @pytest.mark.parametrize("multiplier", [2.0, 10.0])
    def test_huge_attempt_index_is_capped(self, multiplier):
        """Exponent beyond float range still yields max_delay."""
        policy = RetryPolicy(initial_delay=0.3, backoff_multiplier=multiplier, max_delay=1.2)

        assert calculate_backoff(5000, policy) == 1.2

    def test_huge_attempt_index_with_zero_initial_delay(self):
        policy = RetryPolicy(initial_delay=0.0, max_delay=1.0)

        assert calculate_backoff(5000, policy) == 0.0

    def test_multiplier_of_one_is_constant(self):
        """backoff_multiplier=1 keeps the delay flat."""
        policy = RetryPolicy(initial_delay=0.5, backoff_multiplier=1.0, max_delay=5.0)

        assert calculate_backoff(0, policy) == calculate_backoff(7, policy) == 0.5

    def test_backoff_with_jitter_stays_in_bounds(self):
        """Jitter varies the delay but never above max_delay or below zero."""
        policy = RetryPolicy(initial_delay=1.0, max_delay=2.0, jitter=0.5)

        delays = [calculate_backoff(3, policy) for _ in range(50)]

        assert all(0 <= d <= 2.0 for d in delays)
        assert len(set(delays)) > 1


class TestRetryPolicy:
    """Test RetryPolicy behavior."""

    def test_default_retryable_statuses(self):
        """Timeouts, rate limits and gateway/server errors are retryable."""
        policy = RetryPolicy()

        for status in (408, 429, 500, 502, 503, 504):
            assert policy.should_retry(status) is True

    def test_should_not_retry_permanent_statuses(self):
        """Success and client errors are not retryable."""
        policy = RetryPolicy()

        for status in (200, 201, 400, 401, 403, 404, 422):
            assert policy.should_retry(status) is False

    def test_custom_status_set_is_frozen(self):
        """A list of codes is stored as an immutable set."""
        policy = RetryPolicy(retryable_status_codes=[503])

        assert policy.retryable_status_codes == frozenset({503})
        assert policy.should_retry(500) is False

    def test_default_allows_two_attempts(self):
        """Default is one retry on top of the first attempt."""
        assert RetryPolicy().max_retries == 1

    def test_no_retry_preset_has_zero_retries(self):
        assert RetryPolicy.no_retry().max_retries == 0

    def test_aggressive_preset_has_more_retries(self):
        assert RetryPolicy.aggressive().max_retries > RetryPolicy().max_retries

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"max_retries": -1},
            {"initial_delay": -0.1},
            {"max_delay": -1},
            {"backoff_multiplier": 0.5},
            {"jitter": 1.5},
        ],
    )
    def test_rejects_invalid_values(self, kwargs):
        with pytest.raises(ValueError):
            RetryPolicy(**kwargs)


class TestExecutorFaults:
    """Test retry on exceptions raised by the send function."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("max_retries", [0, 1, 3])
    async def test_always_failing_send_is_called_n_plus_one_times(self, max_retries):
        """The final exception propagates unchanged after N+1 attempts."""
        recorder = Recorder()
        error = httpx.ConnectError("Connection refused")
        send = scripted_send([error])
        executor = make_executor(send, recorder, max_retries=max_retries)

        with pytest.raises(httpx.ConnectError) as exc_info:
            await executor.execute(get_request())

        assert exc_info.value is error
        assert len(send.calls) == max_retries + 1
        assert len(recorder.events) == max_retries

    @pytest.mark.asyncio
    async def test_long_retry_budget_propagates_original_fault(self):
        """Many retries never surface an arithmetic error from the backoff."""
        recorder = Recorder()
        error = ConnectionError("down")
        send = scripted_send([error])
        executor = make_executor(
            send, recorder, max_retries=1100, initial_delay=0.0, max_delay=1.0
        )

        with pytest.raises(ConnectionError) as exc_info:
            await executor.execute(get_request())

        assert exc_info.value is error
        assert len(send.calls) == 1101
        assert all(delay == 0.0 for delay in recorder.delays)

    @pytest.mark.asyncio
    async def test_fault_then_success_returns_response(self):
        recorder = Recorder()
        ok = httpx.Response(200)
        send = scripted_send([httpx.ReadTimeout("timed out"), ok])
        executor = make_executor(send, recorder, max_retries=2)

        result = await executor.execute(get_request())

        assert result is ok
        assert len(send.calls) == 2

    @pytest.mark.asyncio
    async def test_fault_event_carries_message_not_status(self):
        recorder = Recorder()
        send = scripted_send([RuntimeError("socket closed"), httpx.Response(200)])
        executor = make_executor(send, recorder, max_retries=1, initial_delay=0.3)

        await executor.execute(get_request())

        (event,) = recorder.events
        assert isinstance(event, FaultRetry)
        assert event.fault_message == "socket closed"
        assert not hasattr(event, "response_status")
        assert event.attempt_number == 1
        assert event.request_method == "GET"
        assert event.request_url == URL
        assert event.delay == pytest.approx(0.3)

    @pytest.mark.asyncio
    async def test_empty_fault_message_falls_back_to_type_name(self):
        recorder = Recorder()
        send = scripted_send([ConnectionResetError(), httpx.Response(200)])
        executor = make_executor(send, recorder, max_retries=1)

        await executor.execute(get_request())

        assert recorder.events[0].fault_message == "ConnectionResetError"

    @pytest.mark.asyncio
    async def test_cancellation_is_not_retried(self):
        """CancelledError is not a fault and escapes on the first attempt."""
        recorder = Recorder()
        send = scripted_send([asyncio.CancelledError()])
        executor = make_executor(send, recorder, max_retries=3)

        with pytest.raises(asyncio.CancelledError):
            await executor.execute(get_request())

        assert len(send.calls) == 1
        assert recorder.events == []


class TestExecutorStatuses:
    """Test retry on retryable response statuses."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("max_retries", [0, 1, 4])
    async def test_always_retryable_status_returns_last_response(self, max_retries):
        """After N+1 attempts the last response is returned, not raised."""
        recorder = Recorder()
        responses = [httpx.Response(503) for _ in range(max_retries + 1)]
        send = scripted_send(responses)
        executor = make_executor(send, recorder, max_retries=max_retries)

        result = await executor.execute(get_request())

        assert result is responses[-1]
        assert result.status_code == 503
        assert len(send.calls) == max_retries + 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [200, 400, 401, 404, 422])
    async def test_non_retryable_status_returns_after_one_call(self, status):
        recorder = Recorder()
        response = httpx.Response(status)
        send = scripted_send([response])
        executor = make_executor(send, recorder, max_retries=3)

        result = await executor.execute(get_request())

        assert result is response
        assert len(send.calls) == 1
        assert recorder.timeline == []

    @pytest.mark.asyncio
    async def test_transient_503_then_200(self):
        """Fails once with 503, succeeds on the second call."""
        recorder = Recorder()
        ok = httpx.Response(200)
        send = scripted_send([httpx.Response(503), ok])
        executor = make_executor(send, recorder, max_retries=1)

        result = await executor.execute(get_request())

        assert result is ok
        assert len(send.calls) == 2
        (event,) = recorder.events
        assert isinstance(event, StatusRetry)
        assert event.response_status == 503
        assert not hasattr(event, "fault_message")

    @pytest.mark.asyncio
    async def test_max_retries_zero_returns_retryable_response(self):
        recorder = Recorder()
        response = httpx.Response(500)
        send = scripted_send([response])
        executor = make_executor(send, recorder, max_retries=0)

        result = await executor.execute(get_request())

        assert result is response
        assert recorder.timeline == []

    @pytest.mark.asyncio
    async def test_same_request_sent_every_attempt(self):
        recorder = Recorder()
        send = scripted_send([httpx.Response(502), httpx.Response(502), httpx.Response(200)])
        executor = make_executor(send, recorder, max_retries=2)
        request = get_request()

        await executor.execute(request)

        assert all(sent is request for sent in send.calls)


class TestRetryNotifications:
    """Test on_retry ordering and contents."""

    @pytest.mark.asyncio
    async def test_events_precede_their_delay(self):
        """Each event is emitted before the sleep it announces."""
        recorder = Recorder()
        send = scripted_send([httpx.Response(429)])
        executor = make_executor(
            send, recorder, max_retries=4, initial_delay=0.3, max_delay=1.2
        )

        await executor.execute(get_request())

        kinds = [kind for kind, _ in recorder.timeline]
        assert kinds == ["event", "sleep"] * 4
        assert [e.attempt_number for e in recorder.events] == [1, 2, 3, 4]
        assert recorder.delays == pytest.approx([0.3, 0.6, 1.2, 1.2])
        assert [e.delay for e in recorder.events] == recorder.delays

    @pytest.mark.asyncio
    async def test_event_reports_request_method(self):
        recorder = Recorder()
        send = scripted_send([httpx.Response(503), httpx.Response(200)])
        executor = make_executor(send, recorder, max_retries=1)

        await executor.execute(httpx.Request("delete", URL))

        assert recorder.events[0].request_method == "DELETE"
        assert recorder.events[0].max_retries == 1

    @pytest.mark.asyncio
    async def test_string_request_is_reported_as_get(self):
        recorder = Recorder()
        send = scripted_send([httpx.Response(504), httpx.Response(200)])
        executor = make_executor(send, recorder, max_retries=1)

        await executor.execute(URL)

        assert recorder.events[0].request_url == URL
        assert recorder.events[0].request_method == "GET"

    @pytest.mark.asyncio
    async def test_failing_callback_does_not_change_outcome(self):
        def explode(event):
            raise RuntimeError("telemetry down")

        recorder = Recorder()
        ok = httpx.Response(200)
        send = scripted_send([httpx.Response(503), ok])
        executor = RetryingRequestExecutor(
            send, RetryPolicy(max_retries=1, on_retry=explode), sleep=recorder.sleep
        )

        result = await executor.execute(get_request())

        assert result is ok
        assert len(send.calls) == 2

    @pytest.mark.asyncio
    async def test_runs_without_callback(self):
        recorder = Recorder()
        send = scripted_send([httpx.Response(503), httpx.Response(200)])
        executor = RetryingRequestExecutor(
            send, RetryPolicy(max_retries=1), sleep=recorder.sleep
        )

        result = await executor.execute(get_request())

        assert result.status_code == 200

    def test_event_properties_for_telemetry(self):
        event = StatusRetry(
            attempt_number=1,
            max_retries=1,
            request_url=URL,
            request_method="GET",
            delay=0.3,
            response_status=503,
        )

        assert event.to_properties() == {
            "method": "GET",
            "url": URL,
            "attempt": 1,
            "max_retries": 1,
            "delay_ms": 300,
            "status": 503,
        }


class TestAsyncWithRetry:
    """Test the decorator form."""

    @pytest.mark.asyncio
    async def test_decorated_function_retries(self):
        calls = []

        @async_with_retry(RetryPolicy(max_retries=2, initial_delay=0.0))
        async def send(request):
            """Send once."""
            calls.append(request)
            return httpx.Response(200 if len(calls) == 3 else 500)

        result = await send(get_request())

        assert result.status_code == 200
        assert len(calls) == 3
        assert send.__name__ == "send"
        assert send.__doc__ == "Send once."

    @pytest.mark.asyncio
    async def test_concurrent_calls_are_independent(self):
        """Separate executions do not share attempt counters."""
        counts: dict[str, int] = {}

        @async_with_retry(RetryPolicy(max_retries=1, initial_delay=0.0))
        async def send(request):
            counts[request] = counts.get(request, 0) + 1
            await asyncio.sleep(0)
            return httpx.Response(503 if counts[request] == 1 else 200)

        results = await asyncio.gather(send("a"), send("b"), send("c"))

        assert [r.status_code for r in results] == [200, 200, 200]
        assert counts == {"a": 2, "b": 2, "c": 2}
