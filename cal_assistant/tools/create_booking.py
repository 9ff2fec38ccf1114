"""createBookingIfAvailable tool."""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List

from .base import BaseTool, ToolName, ToolResult
from .formatting import (
    CUSTOMER_DETAILS_SCHEMA,
    describe_window,
    identity_error,
    resolve_attendee,
)
from ..booking.client import BookingProviderClient
from ..booking.models import Availability, BookingWindow
from ..context.models import RequestContext
from ..errors import (
    IdentityAmbiguous,
    IdentityNotFound,
    ProviderExecutionError,
    SlotUnavailable,
)
from ..timeutils import local_date, local_day_bounds, parse_utc, to_local

logger = logging.getLogger(__name__)


class CreateBookingTool(BaseTool):
    """Tool for booking a slot after re-checking it is still free."""

    def __init__(
        self,
        client: BookingProviderClient,
        default_duration_minutes: int = 30,
        alternatives_count: int = 3,
    ):
        """
        Initialize createBookingIfAvailable tool.

        Args:
            client: Booking provider client bound to the caller's credentials
            default_duration_minutes: Length of a booking when none is given
            alternatives_count: How many alternative slots to offer on conflict
        """
        super().__init__(
            name=ToolName.CREATE_BOOKING_IF_AVAILABLE,
            description="Create a booking if the time slot is available.",
        )
        self.client = client
        self.default_duration_minutes = default_duration_minutes
        self.alternatives_count = alternatives_count

    def _unavailable(
        self,
        window: BookingWindow,
        alternatives: List[BookingWindow],
        zone: str,
        reason: str,
    ) -> ToolResult:
        text = f"{to_local(window.start, zone)} is not available ({reason})."
        if alternatives:
            text += " Some nearby times that are free:\n" + "\n".join(
                f"- {describe_window(w, zone)}" for w in alternatives
            )
        else:
            text += " I couldn't find another free slot that day."
        return ToolResult(
            success=False,
            data={
                "outcome": "not_available",
                "alternatives": [w.model_dump(mode="json") for w in alternatives],
            },
            error=text,
        )

    async def execute(
        self, context: RequestContext, **kwargs
    ) -> ToolResult:
        """
        Create a booking if the slot is free right now.

        Args:
            context: Request context
            **kwargs: Must contain:
                - 'dateTime' (str): Start time, UTC ISO-8601
                - 'customerDetails' (dict): 'name' and 'email' (email or @username)
              Optional:
                - 'durationMinutes' (int)
                - 'title' (str)

        Returns:
            ToolResult with the created booking, or a "not_available" failure
            listing alternatives
        """
        zone = context.caller.time_zone
        details = kwargs["customerDetails"]
        duration = kwargs.get("durationMinutes") or self.default_duration_minutes
        title = kwargs.get("title")

        try:
            name, email = resolve_attendee(details.get("email", ""), details.get("name"), context)
        except (IdentityAmbiguous, IdentityNotFound) as e:
            return identity_error(e)

        window = BookingWindow.starting_at(parse_utc(kwargs["dateTime"]), duration)
        if window.start < datetime.now(timezone.utc):
            return ToolResult(
                success=False,
                data={"outcome": "in_the_past"},
                error=f"{to_local(window.start, zone)} is in the past.",
            )

        day_start, day_end = local_day_bounds(local_date(window.start, zone), zone)
        search_range = BookingWindow(start=day_start, end=day_end)
        availability = Availability()

        try:
            availability = await self.client.get_availability(day_start, day_end)
            if not availability.is_free(window):
                raise SlotUnavailable("the slot is already taken")

            booking = await self.client.create_booking(
                window, name=name, email=email, time_zone=zone, title=title
            )
        except SlotUnavailable as e:
            logger.info(f"Slot {window.start.isoformat()} unavailable: {e}")
            alternatives = availability.suggest_alternatives(
                window, self.alternatives_count, search_range
            )
            return self._unavailable(window, alternatives, zone, e.reason)
        except ProviderExecutionError as e:
            logger.warning(f"Booking creation failed: {e}")
            return ToolResult(
                success=False,
                data=None,
                error=f"{e.describe().capitalize()} while I was creating the booking.",
            )

        return ToolResult(
            success=True,
            data=booking.model_dump(mode="json"),
            message=(
                f"I have booked {title or 'your meeting'} with {name} for "
                f"{to_local(booking.window.start, zone)} (booking {booking.id}). "
                "Please let me know if you need to reschedule."
            ),
        )

    def get_schema(self) -> Dict[str, Any]:
        """Get tool schema."""
        return {
            "name": self.name,
            "description": self.description,
            "parameters": {
                "type": "object",
                "properties": {
                    "dateTime": {
                        "type": "string",
                        "format": "date-time",
                        "description": "The date and time for the booking in UTC",
                    },
                    "customerDetails": {
                        **CUSTOMER_DETAILS_SCHEMA,
                        "required": ["name", "email"],
                    },
                    "durationMinutes": {
                        "type": "integer",
                        "minimum": 5,
                        "maximum": 480,
                        "description": "Length of the booking in minutes (optional)",
                    },
                    "title": {
                        "type": "string",
                        "description": "Title of the booking (optional)",
                    },
                },
                "required": ["dateTime", "customerDetails"],
            },
        }
