"""
Base API client.

Holds the state every operation exposes to the UI (`loading`, `error`) and the
plumbing shared by the catalogue and reservations clients.
"""

import time
from dataclasses import replace
from typing import Any

import httpx

from ..auth import AuthProvider
from ..config import AppConfig, normalize_base_url
from ..exceptions import CatalogueClientError
from ..retry import RetryEvent, RetryingRequestExecutor, RetryPolicy
from ..telemetry import LoggingTelemetry, Telemetry


def safe_json(response: httpx.Response) -> Any:
    """Decode the body, or None when it is not JSON."""
    try:
        return response.json()
    except ValueError:
        return None


def error_message(exc: BaseException) -> str:
    """User-facing text for a failed operation."""
    if isinstance(exc, CatalogueClientError):
        return exc.message
    return str(exc) or "Unexpected error"


class BaseApiClient:
    """
    Base class for catalogue API clients.

    Each public operation opens its own `httpx.AsyncClient`, catches failures
    at its boundary and records them in `error`.
    """

    def __init__(
        self,
        base_url: str,
        auth: AuthProvider,
        telemetry: Telemetry | None = None,
        retry_policy: RetryPolicy | None = None,
        audience: str | None = None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialize the client.

        Args:
            base_url: API root the routes are resolved against
            auth: Token provider for the signed-in user
            telemetry: Telemetry sink (default: LoggingTelemetry)
            retry_policy: Retry policy for idempotent reads
            audience: Audience requested with access tokens
            timeout: Request timeout in seconds
            transport: Optional httpx transport (tests, proxies)
        """
        self.base_url = normalize_base_url(base_url)
        self.auth = auth
        self.telemetry = telemetry or LoggingTelemetry()
        self.retry_policy = retry_policy or RetryPolicy.conservative()
        self.audience = audience
        self.timeout = timeout
        self.transport = transport

        self.loading = False
        self.error: str | None = None

    @classmethod
    def from_config(
        cls,
        config: AppConfig,
        auth: AuthProvider,
        telemetry: Telemetry | None = None,
        **kwargs: Any,
    ):
        """Build a client against the API root it talks to."""
        return cls(
            base_url=cls._base_url_from(config),
            auth=auth,
            telemetry=telemetry,
            retry_policy=config.retry_policy,
            audience=config.auth_audience,
            timeout=config.timeout,
            **kwargs,
        )

    @staticmethod
    def _base_url_from(config: AppConfig) -> str:
        return config.api_base_url

    @property
    def is_authenticated(self) -> bool:
        return self.auth.is_authenticated

    def _url(self, route: str) -> str:
        return str(httpx.URL(self.base_url).join(route))

    def _make_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self.transport)

    async def _bearer(self, scope: str | None) -> str:
        token = await self.auth.get_access_token(audience=self.audience, scope=scope)
        return f"Bearer {token}"

    def _retrying(self, client: httpx.AsyncClient, route: str) -> RetryingRequestExecutor:
        """Executor over `client.send` reporting each retry as an HttpRetry event."""
        user_callback = self.retry_policy.on_retry

        def on_retry(event: RetryEvent) -> None:
            self.telemetry.track_event("HttpRetry", {"route": route, **event.to_properties()})
            if user_callback is not None:
                user_callback(event)

        return RetryingRequestExecutor(client.send, replace(self.retry_policy, on_retry=on_retry))

    def _track_dependency(
        self,
        name: str,
        target: str,
        started: float,
        success: bool,
        status_code: int | None,
    ) -> None:
        duration_ms = (time.monotonic() - started) * 1000
        self.telemetry.track_dependency(name, target, duration_ms, success, status_code)
