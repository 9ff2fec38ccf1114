"""Async REST client for the booking provider."""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

import httpx

from ..errors import ProviderExecutionError, SlotUnavailable
from ..timeutils import format_utc
from .models import Availability, Booking, BookingWindow

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.cal.com/v1"


class BookingProviderClient:
    """Client for the booking provider, keyed by API credential and caller id."""

    def __init__(
        self,
        api_key: str,
        user_id: int,
        base_url: str = DEFAULT_BASE_URL,
        event_type_id: Optional[int] = None,
        timeout: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the provider client.

        Args:
            api_key: Provider API key, sent as the apiKey query parameter
            user_id: Provider id of the calling user
            base_url: Provider API root
            event_type_id: Event type used for new bookings
            timeout: Per-request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self.api_key = api_key
        self.user_id = user_id
        self.base_url = base_url.rstrip("/")
        self.event_type_id = event_type_id
        self.timeout = timeout
        self.transport = transport

    async def _request(
        self,
        method: str,
        path: str,
        operation: str,
        params: Optional[Dict[str, Any]] = None,
        json_body: Optional[Dict[str, Any]] = None,
    ) -> httpx.Response:
        query = {"apiKey": self.api_key}
        if params:
            query.update(params)

        logger.debug(f"Provider request - {method} {path} ({operation})")
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url, timeout=self.timeout, transport=self.transport
            ) as client:
                resp = await client.request(method, path, params=query, json=json_body)
        except httpx.RequestError as exc:
            raise ProviderExecutionError(operation, f"network error: {exc}") from exc

        logger.debug(f"Provider response - {method} {path}: {resp.status_code}")
        return resp

    @staticmethod
    def _body(resp: httpx.Response, operation: str) -> Any:
        if not resp.is_success:
            logger.warning(f"Provider {operation} returned {resp.status_code}: {resp.text[:500]}")
            raise ProviderExecutionError(
                operation,
                f"provider returned {resp.status_code}",
                status_code=resp.status_code,
            )
        try:
            return resp.json()
        except ValueError as exc:
            raise ProviderExecutionError(
                operation, "provider returned a non-JSON body", status_code=resp.status_code
            ) from exc

    async def get_availability(self, date_from: datetime, date_to: datetime) -> Availability:
        """Free/busy windows for the caller between two instants."""
        resp = await self._request(
            "GET",
            "/availability",
            "getAvailability",
            params={
                "userId": self.user_id,
                "dateFrom": format_utc(date_from),
                "dateTo": format_utc(date_to),
            },
        )
        return Availability.from_provider(self._body(resp, "getAvailability"))

    async def list_bookings(self, start: datetime, end: datetime) -> List[Booking]:
        """Bookings of the caller overlapping [start, end)."""
        resp = await self._request(
            "GET", "/bookings", "getBookings", params={"userId": self.user_id}
        )
        body = self._body(resp, "getBookings")
        window = BookingWindow(start=start, end=end)
        bookings = [Booking.from_provider(item) for item in body.get("bookings", [])]
        return sorted(
            (b for b in bookings if b.window.overlaps(window)),
            key=lambda b: b.window.start,
        )

    async def get_booking(self, booking_id: str) -> Booking:
        resp = await self._request("GET", f"/bookings/{booking_id}", "getBooking")
        body = self._body(resp, "getBooking")
        return Booking.from_provider(body.get("booking", body))

    async def create_booking(
        self,
        window: BookingWindow,
        name: str,
        email: str,
        time_zone: str,
        title: Optional[str] = None,
    ) -> Booking:
        """
        Create a booking.

        Raises:
            SlotUnavailable: The provider reports the slot as taken
            ProviderExecutionError: Any other provider failure
        """
        payload: Dict[str, Any] = {
            "start": format_utc(window.start),
            "end": format_utc(window.end),
            "responses": {"name": name, "email": email},
            "timeZone": time_zone,
            "language": "en",
            "metadata": {},
        }
        if self.event_type_id is not None:
            payload["eventTypeId"] = self.event_type_id
        if title:
            payload["title"] = title

        resp = await self._request(
            "POST", "/bookings", "createBookingIfAvailable", json_body=payload
        )
        if resp.status_code == 409:
            raise SlotUnavailable("The provider reports the slot as already booked")
        body = self._body(resp, "createBookingIfAvailable")
        return Booking.from_provider(body.get("booking", body))

    async def update_booking(
        self,
        booking_id: str,
        window: Optional[BookingWindow] = None,
        name: Optional[str] = None,
        email: Optional[str] = None,
    ) -> Booking:
        """Partial update; only the given fields are sent."""
        payload: Dict[str, Any] = {}
        if window is not None:
            payload["startTime"] = format_utc(window.start)
            payload["endTime"] = format_utc(window.end)
        responses = {k: v for k, v in (("name", name), ("email", email)) if v}
        if responses:
            payload["responses"] = responses

        resp = await self._request(
            "PATCH", f"/bookings/{booking_id}", "updateBooking", json_body=payload
        )
        body = self._body(resp, "updateBooking")
        return Booking.from_provider(body.get("booking", body))

    async def cancel_booking(self, booking_id: str) -> bool:
        """
        Cancel a booking.

        Returns:
            True if the booking was cancelled now, False if it was already gone
        """
        resp = await self._request(
            "DELETE", f"/bookings/{booking_id}/cancel", "deleteBooking"
        )
        if resp.status_code in (404, 410):
            return False
        self._body(resp, "deleteBooking")
        return True
