"""
Application configuration.
"""

import os
from dataclasses import dataclass, field
from typing import Callable, Mapping, TypeVar

from .exceptions import ConfigurationError
from .retry import RetryPolicy

T = TypeVar("T")


def normalize_base_url(url: str) -> str:
    """Ensure a trailing slash so routes resolve below the base path."""
    return url if url.endswith("/") else f"{url}/"


def _parse(environ: Mapping[str, str], key: str, cast: Callable[[str], T], default: T) -> T:
    raw = environ.get(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        return cast(raw)
    except ValueError as e:
        raise ConfigurationError(f"{key} has an invalid value: {raw!r}") from e


@dataclass
class AppConfig:
    """
    Endpoints and transport settings for the catalogue clients.

    Attributes:
        api_base_url: Catalogue API root
        reservations_api_base_url: Reservations API root
        auth_audience: Audience requested with every access token
        timeout: Request timeout in seconds
        retry_policy: Policy applied to idempotent reads
    """

    api_base_url: str
    reservations_api_base_url: str | None = None
    auth_audience: str | None = None
    timeout: float = 30.0
    retry_policy: RetryPolicy = field(default_factory=RetryPolicy.conservative)

    def __post_init__(self) -> None:
        if not self.api_base_url:
            raise ConfigurationError("api_base_url is required")
        self.api_base_url = normalize_base_url(self.api_base_url)
        self.reservations_api_base_url = normalize_base_url(
            self.reservations_api_base_url or self.api_base_url
        )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "AppConfig":
        """Build configuration from environment variables."""
        env = os.environ if environ is None else environ

        api_base_url = env.get("CATALOGUE_API_BASE_URL", "")
        if not api_base_url:
            raise ConfigurationError("CATALOGUE_API_BASE_URL must be set")

        defaults = RetryPolicy.conservative()
        try:
            retry_policy = RetryPolicy(
                max_retries=_parse(env, "HTTP_MAX_RETRIES", int, defaults.max_retries),
                initial_delay=_parse(
                    env, "HTTP_RETRY_INITIAL_DELAY", float, defaults.initial_delay
                ),
                max_delay=_parse(env, "HTTP_RETRY_MAX_DELAY", float, defaults.max_delay),
                backoff_multiplier=_parse(
                    env,
                    "HTTP_RETRY_BACKOFF_MULTIPLIER",
                    float,
                    defaults.backoff_multiplier,
                ),
            )
        except ValueError as e:
            raise ConfigurationError(f"Invalid retry settings: {e}") from e

        return cls(
            api_base_url=api_base_url,
            reservations_api_base_url=env.get("RESERVATIONS_API_BASE_URL") or None,
            auth_audience=env.get("AUTH_AUDIENCE") or None,
            timeout=_parse(env, "HTTP_TIMEOUT", float, 30.0),
            retry_policy=retry_policy,
        )
