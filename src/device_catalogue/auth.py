"""
Access token provider interface.
"""

from typing import Protocol, runtime_checkable

READ_DEVICES = "read:devices"
WRITE_DEVICES = "write:devices"
READ_RESERVATIONS = "read:reservations"
WRITE_RESERVATIONS = "write:reservations"


@runtime_checkable
class AuthProvider(Protocol):
    """Supplies bearer tokens for the signed-in user."""

    @property
    def is_authenticated(self) -> bool: ...

    async def get_access_token(
        self, audience: str | None = None, scope: str | None = None
    ) -> str: ...


class StaticTokenAuth:
    """Hands out a fixed token; unauthenticated when the token is empty."""

    def __init__(self, token: str | None = None):
        self.token = token

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    async def get_access_token(
        self, audience: str | None = None, scope: str | None = None
    ) -> str:
        if not self.token:
            raise RuntimeError("No access token configured")
        return self.token
