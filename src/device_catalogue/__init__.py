"""
Device Catalogue - catalogue and reservation API client.

Device listings, device reservations and a retrying HTTP request executor.
"""

from .auth import AuthProvider, StaticTokenAuth
from .clients import (
    AddReservationClient,
    BaseApiClient,
    CancelReservationClient,
    DeviceAddClient,
    DevicesClient,
    DeviceUpsertClient,
    ReservationsClient,
)
from .config import AppConfig
from .exceptions import (
    CatalogueClientError,
    AuthenticationRequiredError,
    InvalidRequestError,
    ValidationError,
    ApiError,
    ConfigurationError,
)
from .models import (
    AddDeviceCommand,
    AddReservationCommand,
    DeviceModel,
    DeviceStatus,
    ReservationDto,
    ReservationStatus,
    UpsertDeviceCommand,
)
from .retry import (
    FaultRetry,
    RetryEvent,
    RetryingRequestExecutor,
    RetryPolicy,
    StatusRetry,
    async_with_retry,
    calculate_backoff,
)
from .telemetry import LoggingTelemetry, Telemetry

__version__ = "0.1.0"

__all__ = [
    # Version
    "__version__",
    # Retry
    "RetryPolicy",
    "RetryEvent",
    "StatusRetry",
    "FaultRetry",
    "RetryingRequestExecutor",
    "async_with_retry",
    "calculate_backoff",
    # Clients
    "BaseApiClient",
    "DevicesClient",
    "DeviceUpsertClient",
    "DeviceAddClient",
    "ReservationsClient",
    "AddReservationClient",
    "CancelReservationClient",
    # Models
    "DeviceModel",
    "DeviceStatus",
    "UpsertDeviceCommand",
    "AddDeviceCommand",
    "ReservationDto",
    "ReservationStatus",
    "AddReservationCommand",
    # Collaborators
    "AppConfig",
    "AuthProvider",
    "StaticTokenAuth",
    "Telemetry",
    "LoggingTelemetry",
    # Exceptions
    "CatalogueClientError",
    "AuthenticationRequiredError",
    "InvalidRequestError",
    "ValidationError",
    "ApiError",
    "ConfigurationError",
]
