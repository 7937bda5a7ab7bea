"""
Base exception classes for catalogue and reservation operations.

The retry executor never raises these: they are produced by the client
operations when turning a final response into a failure.
"""


class CatalogueClientError(Exception):
    """Base exception for all catalogue client errors."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        route: str | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.route = route

    def __str__(self) -> str:
        parts = [self.message]
        if self.route:
            parts.insert(0, f"[{self.route}]")
        if self.status_code:
            parts.append(f"(status: {self.status_code})")
        return " ".join(parts)


class AuthenticationRequiredError(CatalogueClientError):
    """Raised when an operation needs a signed-in user."""

    def __init__(self, message: str = "You must be signed in", **kwargs):
        super().__init__(message, **kwargs)


class InvalidRequestError(CatalogueClientError):
    """Raised when caller input is rejected before any request is sent."""

    def __init__(self, message: str = "Invalid request", **kwargs):
        super().__init__(message, **kwargs)


class ValidationError(CatalogueClientError):
    """Raised when the API rejects a payload with a VALIDATION_ERROR body."""

    def __init__(self, message: str = "Validation failed", **kwargs):
        super().__init__(message, **kwargs)


class ApiError(CatalogueClientError):
    """Raised when the API answers with a non-success status."""

    def __init__(self, message: str = "API request failed", **kwargs):
        super().__init__(message, **kwargs)


class ConfigurationError(CatalogueClientError):
    """Raised when client configuration is missing or malformed."""

    def __init__(self, message: str = "Invalid configuration", **kwargs):
        super().__init__(message, **kwargs)
