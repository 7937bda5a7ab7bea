"""
Catalogue clients: device listing and device maintenance.
"""

import logging
import time

import httpx

from .base import BaseApiClient, error_message, safe_json
from ..auth import READ_DEVICES, WRITE_DEVICES
from ..exceptions import ApiError, ValidationError
from ..models import DeviceModel, UpsertDeviceCommand

logger = logging.getLogger(__name__)


def _device_write_error(response: httpx.Response, route: str) -> Exception:
    """Turn a rejected device write into an exception carrying the API message."""
    data = safe_json(response)
    error = data.get("error") if isinstance(data, dict) else None
    if isinstance(error, dict):
        if error.get("code") == "VALIDATION_ERROR":
            return ValidationError(
                error.get("message") or "Validation failed",
                status_code=response.status_code,
                route=route,
            )
        if error.get("message"):
            return ApiError(error["message"], status_code=response.status_code, route=route)
    return ApiError(
        f"Failed to add device (HTTP {response.status_code})",
        status_code=response.status_code,
        route=route,
    )


class DevicesClient(BaseApiClient):
    """
    Lists catalogue devices.

    Anonymous users get the public catalogue; signed-in users get the
    availability listing, which adds price and stock.
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.devices: list[DeviceModel] = []

    async def fetch_devices(self, force: bool = False) -> None:
        """Load the device list into `devices`, ignoring overlapping calls unless forced."""
        if self.loading and not force:
            return

        self.loading = True
        self.error = None

        started = time.monotonic()
        ok = False
        status_code: int | None = None

        authenticated = self.is_authenticated
        route = "catalogue/availability" if authenticated else "catalogue"

        try:
            headers = {"Accept": "application/json"}

            self.telemetry.track_event(
                "FetchDevices",
                {"force": force, "authenticated": authenticated, "route": route},
            )

            if authenticated:
                headers["Authorization"] = await self._bearer(READ_DEVICES)

            async with self._make_client() as client:
                request = client.build_request("GET", self._url(route), headers=headers)
                response = await self._retrying(client, route).execute(request)
            status_code = response.status_code

            if not response.is_success:
                raise ApiError(
                    f"Failed to fetch devices: {response.status_code} {response.reason_phrase}",
                    status_code=response.status_code,
                    route=route,
                )

            raw = safe_json(response)
            if not isinstance(raw, list):
                self.devices = []
                ok = True
                return

            items = [item for item in raw if isinstance(item, dict)]
            if authenticated:
                self.devices = [DeviceModel.from_availability(item) for item in items]
            else:
                self.devices = [DeviceModel.from_public(item) for item in items]

            ok = True

            self.telemetry.track_metric(
                "DevicesCount",
                len(self.devices),
                {"authenticated": authenticated, "route": route},
            )

        except Exception as e:
            self.error = error_message(e)
            logger.warning(f"[{route}] fetch_devices failed: {self.error}")
            self.telemetry.track_exception(e, {"context": "fetchDevices", "route": route})

        finally:
            self.loading = False
            self._track_dependency(
                f"GET /{route}", self._url(route), started, ok, status_code
            )


class DeviceUpsertClient(BaseApiClient):
    """Creates or updates catalogue devices."""

    route = "catalogue"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.success = False

    async def upsert_device(self, command: UpsertDeviceCommand) -> None:
        """POST the device; never retried."""
        self.loading = True
        self.error = None
        self.success = False

        started = time.monotonic()
        ok = False
        status_code: int | None = None
        url = self._url(self.route)

        try:
            headers = {
                "Content-Type": "application/json",
                "Accept": "application/json",
            }

            self.telemetry.track_event(
                "UpsertDeviceAttempt",
                {"authenticated": self.is_authenticated, "has_id": bool(command.id)},
            )

            if self.is_authenticated:
                headers["Authorization"] = await self._bearer(WRITE_DEVICES)

            async with self._make_client() as client:
                response = await client.post(url, headers=headers, json=command.to_dict())
            status_code = response.status_code

            if not response.is_success:
                raise _device_write_error(response, self.route)

            ok = True
            self.success = True
            self.telemetry.track_event("UpsertDeviceSuccess", {"status_code": status_code})

        except Exception as e:
            self.error = error_message(e)
            logger.warning(f"[{self.route}] upsert_device failed: {self.error}")
            self.telemetry.track_exception(e, {"context": "upsertDevice"})

        finally:
            self.loading = False
            self._track_dependency("POST /catalogue", url, started, ok, status_code)


class DeviceAddClient(BaseApiClient):
    """
    Legacy add-device endpoint.

    The token is attached when it can be obtained; otherwise the request goes
    out anonymously and the API decides.
    """

    route = "catalogue/add"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.success = False

    async def add_device(self, command: UpsertDeviceCommand) -> None:
        self.loading = True
        self.error = None
        self.success = False

        try:
            headers = {
                "Content-Type": "application/json",
                "Accept": "application/json",
            }

            if self.is_authenticated:
                try:
                    token = await self.auth.get_access_token(audience=self.audience)
                    if token:
                        headers["Authorization"] = f"Bearer {token}"
                except Exception as e:
                    logger.warning(f"[{self.route}] Could not obtain access token: {e}")

            async with self._make_client() as client:
                response = await client.post(
                    self._url(self.route), headers=headers, json=command.to_dict()
                )

            if not response.is_success:
                raise _device_write_error(response, self.route)

            self.success = True

        except Exception as e:
            self.error = error_message(e)
            logger.warning(f"[{self.route}] add_device failed: {self.error}")

        finally:
            self.loading = False
