"""getBookings tool."""

import logging
from typing import Any, Dict

from .base import BaseTool, ToolName, ToolResult
from .formatting import describe_booking
from ..booking.client import BookingProviderClient
from ..context.models import RequestContext
from ..errors import ProviderExecutionError
from ..timeutils import parse_utc, to_local

logger = logging.getLogger(__name__)


class GetBookingsTool(BaseTool):
    """Tool for listing the caller's bookings in a date range."""

    def __init__(self, client: BookingProviderClient):
        super().__init__(
            name=ToolName.GET_BOOKINGS,
            description="Retrieve a list of all bookings between two dates.",
        )
        self.client = client

    async def execute(
        self, context: RequestContext, **kwargs
    ) -> ToolResult:
        """
        List bookings.

        Args:
            context: Request context
            **kwargs: Must contain 'startDate' and 'endDate' (UTC ISO-8601)

        Returns:
            ToolResult with bookings rendered in the caller's zone
        """
        zone = context.caller.time_zone
        start = parse_utc(kwargs["startDate"])
        end = parse_utc(kwargs["endDate"])

        if end <= start:
            return ToolResult(
                success=False,
                data=None,
                error="endDate must be after startDate",
            )

        try:
            bookings = await self.client.list_bookings(start, end)
        except ProviderExecutionError as e:
            logger.warning(f"Booking lookup failed: {e}")
            return ToolResult(
                success=False,
                data=None,
                error=f"{e.describe().capitalize()} while I was fetching your bookings.",
            )

        if not bookings:
            message = (
                f"You have no bookings between {to_local(start, zone)} "
                f"and {to_local(end, zone)}."
            )
        else:
            message = "Here are your bookings:\n" + "\n".join(
                f"- {describe_booking(b, zone)}" for b in bookings
            )

        return ToolResult(
            success=True,
            data=[b.model_dump(mode="json") for b in bookings],
            message=message,
        )

    def get_schema(self) -> Dict[str, Any]:
        """Get tool schema."""
        return {
            "name": self.name,
            "description": self.description,
            "parameters": {
                "type": "object",
                "properties": {
                    "startDate": {
                        "type": "string",
                        "format": "date-time",
                        "description": "The start date for the range of bookings to retrieve (UTC)",
                    },
                    "endDate": {
                        "type": "string",
                        "format": "date-time",
                        "description": "The end date for the range of bookings to retrieve (UTC)",
                    },
                },
                "required": ["startDate", "endDate"],
            },
        }
