"""
View models and commands exchanged with the catalogue and reservations APIs.

The APIs speak camelCase JSON; the dataclasses here use Python names and
convert at the boundary.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any


def is_number(value: Any) -> bool:
    """True for JSON numbers (bool excluded)."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class DeviceStatus(str, Enum):
    """Lifecycle status of a physical device."""

    AVAILABLE = "available"
    RESERVED = "reserved"
    LOANED = "loaned"
    RETIRED = "retired"


class ReservationStatus(str, Enum):
    """Reservation states reported by the API."""

    RESERVED = "reserved"
    CANCELLED = "cancelled"


@dataclass
class DeviceModel:
    """A catalogue entry as shown to the user."""

    model_id: str
    brand: str
    model: str
    category: str
    description: str | None = None
    price: float | None = None  # only on the authenticated availability endpoint
    available_count: int | float | None = None

    @classmethod
    def from_public(cls, data: dict[str, Any]) -> "DeviceModel":
        """Map an item of the anonymous `catalogue` listing."""
        return cls(
            model_id=data.get("modelId", ""),
            brand=data.get("brand", ""),
            model=data.get("model", ""),
            category=data.get("category", ""),
            description=data.get("description"),
        )

    @classmethod
    def from_availability(cls, data: dict[str, Any]) -> "DeviceModel":
        """Map an item of `catalogue/availability`, which reports stock as `count`."""
        available = data.get("availableCount")
        if not is_number(available):
            count = data.get("count")
            available = count if is_number(count) else 0
        return cls(
            model_id=data.get("modelId", ""),
            brand=data.get("brand", ""),
            model=data.get("model", ""),
            category=data.get("category", ""),
            description=data.get("description"),
            price=data.get("price"),
            available_count=available,
        )


@dataclass
class UpsertDeviceCommand:
    """Create or update a device in the catalogue."""

    id: str
    brand: str
    model: str
    category: str
    price: float
    description: str
    status: DeviceStatus = DeviceStatus.AVAILABLE

    def to_dict(self) -> dict:
        """Convert to dictionary format for API requests."""
        return {
            "id": self.id,
            "brand": self.brand,
            "model": self.model,
            "category": self.category,
            "price": self.price,
            "description": self.description,
            "status": DeviceStatus(self.status).value,
        }


AddDeviceCommand = UpsertDeviceCommand


@dataclass
class ReservationDto:
    """A reservation held by the signed-in user."""

    id: str
    user_id: str
    device_model_id: str
    held_device_id: str | None
    status: ReservationStatus | str | None  # unknown statuses are kept as sent
    reserved_at: str  # ISO 8601, as sent by the API

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ReservationDto":
        return cls(
            id=data.get("id", ""),
            user_id=data.get("userId", ""),
            device_model_id=data.get("deviceModelId", ""),
            held_device_id=data.get("heldDeviceId"),
            status=_reservation_status(data.get("status")),
            reserved_at=data.get("reservedAt", ""),
        )


def _reservation_status(value: Any) -> ReservationStatus | str | None:
    try:
        return ReservationStatus(value)
    except ValueError:
        return value


@dataclass
class AddReservationCommand:
    """Reserve one device of the given model."""

    device_model_id: str

    def to_dict(self) -> dict:
        """Convert to dictionary format for API requests."""
        return {"deviceModelId": self.device_model_id}
