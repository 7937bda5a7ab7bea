"""
Device Catalogue - API Clients.

Catalogue and reservation operations built on the retrying request executor.
"""

from .base import BaseApiClient
from .devices import DeviceAddClient, DevicesClient, DeviceUpsertClient
from .reservations import (
    AddReservationClient,
    CancelReservationClient,
    ReservationsClient,
)

__all__ = [
    "BaseApiClient",
    "DevicesClient",
    "DeviceUpsertClient",
    "DeviceAddClient",
    "ReservationsClient",
    "AddReservationClient",
    "CancelReservationClient",
]
