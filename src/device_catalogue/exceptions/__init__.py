"""
Device Catalogue - Exception Hierarchy.
"""

from .base import (
    CatalogueClientError,
    AuthenticationRequiredError,
    InvalidRequestError,
    ValidationError,
    ApiError,
    ConfigurationError,
)

__all__ = [
    "CatalogueClientError",
    "AuthenticationRequiredError",
    "InvalidRequestError",
    "ValidationError",
    "ApiError",
    "ConfigurationError",
]
