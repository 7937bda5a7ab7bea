"""
Reservation clients.

Every reservation endpoint requires a signed-in user. Only the listing goes
through the retry executor; creating and cancelling are sent once.
"""

import logging
import time
from urllib.parse import quote

from .base import BaseApiClient, error_message, safe_json
from ..auth import READ_RESERVATIONS, WRITE_RESERVATIONS
from ..config import AppConfig
from ..exceptions import ApiError, AuthenticationRequiredError, InvalidRequestError
from ..models import AddReservationCommand, ReservationDto, is_number

logger = logging.getLogger(__name__)


class _ReservationsApiClient(BaseApiClient):
    """Resolves routes against the reservations API root."""

    @staticmethod
    def _base_url_from(config: AppConfig) -> str:
        return config.reservations_api_base_url or config.api_base_url


class ReservationsClient(_ReservationsApiClient):
    """Lists the signed-in user's reservations."""

    route = "reservations"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.reservations: list[ReservationDto] = []
        self.total_count = 0

    async def fetch_my_reservations(self, force: bool = False) -> None:
        if self.loading and not force:
            return
        self.loading = True
        self.error = None

        started = time.monotonic()
        ok = False
        status_code: int | None = None
        url = self._url(self.route)

        try:
            if not self.is_authenticated:
                self.reservations = []
                self.total_count = 0
                raise AuthenticationRequiredError(
                    "You must be signed in to view your reservations.",
                    route=self.route,
                )

            headers = {
                "Accept": "application/json",
                "Authorization": await self._bearer(READ_RESERVATIONS),
            }

            async with self._make_client() as client:
                request = client.build_request("GET", url, headers=headers)
                response = await self._retrying(client, self.route).execute(request)
            status_code = response.status_code

            body = safe_json(response)

            if not response.is_success:
                message = body.get("message") if isinstance(body, dict) else None
                raise ApiError(
                    message or f"Failed to fetch reservations (HTTP {response.status_code})",
                    status_code=response.status_code,
                    route=self.route,
                )

            data = body.get("data") if isinstance(body, dict) else None
            data = data if isinstance(data, dict) else {}

            items = data.get("reservations")
            self.reservations = (
                [ReservationDto.from_dict(item) for item in items if isinstance(item, dict)]
                if isinstance(items, list)
                else []
            )
            total = data.get("totalCount")
            self.total_count = total if is_number(total) else 0

            ok = True

        except Exception as e:
            self.error = error_message(e)
            logger.warning(f"[{self.route}] fetch_my_reservations failed: {self.error}")
            self.telemetry.track_exception(e, {"context": "fetchMyReservations"})

        finally:
            self.loading = False
            self._track_dependency("GET /reservations", url, started, ok, status_code)


class AddReservationClient(_ReservationsApiClient):
    """Reserves a device model for the signed-in user."""

    route = "reservations"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.success = False

    async def add_reservation(self, command: AddReservationCommand) -> ReservationDto | None:
        """
        Create a reservation.

        Args:
            command: Device model to reserve

        Returns:
            The created reservation, or None when the request failed (see `error`)
        """
        self.loading = True
        self.error = None
        self.success = False

        started = time.monotonic()
        ok = False
        status_code: int | None = None
        url = self._url(self.route)

        try:
            if not self.is_authenticated:
                raise AuthenticationRequiredError(
                    "You must be signed in to reserve a device.", route=self.route
                )

            headers = {
                "Content-Type": "application/json",
                "Accept": "application/json",
                "Authorization": await self._bearer(WRITE_RESERVATIONS),
            }

            async with self._make_client() as client:
                response = await client.post(url, headers=headers, json=command.to_dict())
            status_code = response.status_code

            body = safe_json(response)

            if not response.is_success:
                body = body if isinstance(body, dict) else {}
                message = (
                    body.get("message")
                    or f"Failed to add reservation (HTTP {response.status_code})"
                )
                errors = body.get("errors") or []
                if errors:
                    message = f"{message}: {', '.join(str(err) for err in errors)}"
                raise ApiError(message, status_code=status_code, route=self.route)

            reservation = ReservationDto.from_dict(body) if isinstance(body, dict) else None

            self.success = True
            ok = True

            self.telemetry.track_event("AddReservationSuccess", {"status_code": status_code})
            return reservation

        except Exception as e:
            self.error = error_message(e)
            self.telemetry.track_exception(e, {"context": "addReservation"})
            self.telemetry.track_event("AddReservationFail", {"message": self.error})
            return None

        finally:
            self.loading = False
            self._track_dependency("POST /reservations", url, started, ok, status_code)


class CancelReservationClient(_ReservationsApiClient):
    """Cancels one of the signed-in user's reservations."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.success = False

    async def cancel_reservation(self, reservation_id: str) -> bool:
        """Cancel a reservation; returns True on success."""
        self.loading = True
        self.error = None
        self.success = False

        started = time.monotonic()
        ok = False
        status_code: int | None = None
        route = f"reservations/{quote(reservation_id or '', safe='')}"

        try:
            if not self.is_authenticated:
                raise AuthenticationRequiredError(
                    "You must be signed in to cancel a reservation.", route=route
                )
            if not reservation_id or not reservation_id.strip():
                raise InvalidRequestError("reservationId is required.", route=route)

            headers = {
                "Accept": "application/json",
                "Authorization": await self._bearer(WRITE_RESERVATIONS),
            }

            async with self._make_client() as client:
                response = await client.delete(self._url(route), headers=headers)
            status_code = response.status_code

            if not response.is_success:
                body = safe_json(response)
                message = body.get("message") if isinstance(body, dict) else None
                raise ApiError(
                    message or f"Failed to cancel reservation (HTTP {response.status_code})",
                    status_code=status_code,
                    route=route,
                )

            self.success = True
            ok = True
            self.telemetry.track_event("CancelReservationSuccess", {"status_code": status_code})
            return True

        except Exception as e:
            self.error = error_message(e)
            self.telemetry.track_exception(e, {"context": "cancelReservation"})
            self.telemetry.track_event("CancelReservationFail", {"message": self.error})
            return False

        finally:
            self.loading = False
            self._track_dependency(
                "DELETE /reservations/{id}", self._url(route), started, ok, status_code
            )
