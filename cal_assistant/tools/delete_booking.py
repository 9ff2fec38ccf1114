"""deleteBooking tool."""

import logging
from typing import Any, Dict

from .base import BaseTool, ToolName, ToolResult
from ..booking.client import BookingProviderClient
from ..context.models import RequestContext
from ..errors import ProviderExecutionError

logger = logging.getLogger(__name__)


class DeleteBookingTool(BaseTool):
    """Tool for cancelling a booking. Cancelling twice is not an error."""

    def __init__(self, client: BookingProviderClient):
        super().__init__(
            name=ToolName.DELETE_BOOKING,
            description="Delete an existing booking.",
        )
        self.client = client

    async def execute(
        self, context: RequestContext, **kwargs
    ) -> ToolResult:
        booking_id = kwargs["bookingId"]

        try:
            cancelled = await self.client.cancel_booking(booking_id)
        except ProviderExecutionError as e:
            logger.warning(f"Cancelling booking {booking_id} failed: {e}")
            return ToolResult(
                success=False,
                data=None,
                error=f"{e.describe().capitalize()} while I was cancelling booking {booking_id}.",
            )

        if not cancelled:
            return ToolResult(
                success=True,
                data={"outcome": "already_deleted", "bookingId": booking_id},
                message=f"Booking {booking_id} was already deleted or could not be found.",
            )

        return ToolResult(
            success=True,
            data={"outcome": "cancelled", "bookingId": booking_id},
            message=f"Booking {booking_id} has been cancelled.",
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
                        "description": "The unique identifier for the booking to delete",
                    },
                },
                "required": ["bookingId"],
            },
        }
