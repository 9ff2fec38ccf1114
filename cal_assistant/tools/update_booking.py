"""updateBooking tool."""

import logging
from typing import Any, Dict

from .base import BaseTool, ToolName, ToolResult
from .formatting import CUSTOMER_DETAILS_SCHEMA, describe_booking, identity_error, resolve_attendee
from ..booking.client import BookingProviderClient
from ..booking.models import BookingWindow
from ..context.models import RequestContext
from ..errors import IdentityAmbiguous, IdentityNotFound, ProviderExecutionError
from ..timeutils import parse_utc

logger = logging.getLogger(__name__)


class UpdateBookingTool(BaseTool):
    """Tool for changing the time or attendee of an existing booking."""

    def __init__(self, client: BookingProviderClient):
        super().__init__(
            name=ToolName.UPDATE_BOOKING,
            description="Update the details of an existing booking. Fields that are not given stay unchanged.",
        )
        self.client = client

    async def execute(
        self, context: RequestContext, **kwargs
    ) -> ToolResult:
        """
        Apply a partial update.

        Args:
            context: Request context
            **kwargs: Must contain:
                - 'bookingId' (str)
                - 'updatedDetails' (dict): optional 'dateTime' (UTC) and
                  'customerDetails' ({'name', 'email'})

        Returns:
            ToolResult with the updated booking
        """
        zone = context.caller.time_zone
        booking_id = kwargs["bookingId"]
        updated = kwargs["updatedDetails"]
        customer = updated.get("customerDetails") or {}

        if not updated.get("dateTime") and not customer:
            return ToolResult(
                success=False,
                data=None,
                error="Nothing to update: give a new dateTime or customerDetails.",
            )

        name = customer.get("name")
        email = None
        if customer.get("email"):
            try:
                name, email = resolve_attendee(customer["email"], name, context)
            except (IdentityAmbiguous, IdentityNotFound) as e:
                return identity_error(e)

        try:
            window = None
            if updated.get("dateTime"):
                # Keep the booking's length when moving it.
                current = await self.client.get_booking(booking_id)
                start = parse_utc(updated["dateTime"])
                window = BookingWindow(start=start, end=start + current.window.duration)

            booking = await self.client.update_booking(
                booking_id, window=window, name=name, email=email
            )
        except ProviderExecutionError as e:
            if e.status_code == 404:
                return ToolResult(
                    success=False,
                    data={"outcome": "not_found"},
                    error=f"I couldn't find booking {booking_id}.",
                )
            logger.warning(f"Booking update failed: {e}")
            return ToolResult(
                success=False,
                data=None,
                error=f"{e.describe().capitalize()} while I was updating booking {booking_id}.",
            )

        return ToolResult(
            success=True,
            data=booking.model_dump(mode="json"),
            message=f"Booking updated: {describe_booking(booking, zone)}",
        )

    def get_schema(self) -> Dict[str, Any]:
        """Get tool schema."""
        return {
            "name": self.name,
            "description": self.description,
            "parameters": {
                "type": "object",
                "properties": {
                    "bookingId": {
                        "type": "string",
                        "description": "The unique identifier for the booking",
                    },
                    "updatedDetails": {
                        "type": "object",
                        "properties": {
                            "dateTime": {
                                "type": "string",
                                "format": "date-time",
                                "description": "New start time in UTC",
                            },
                            "customerDetails": CUSTOMER_DETAILS_SCHEMA,
                        },
                    },
                },
                "required": ["bookingId", "updatedDetails"],
            },
        }
