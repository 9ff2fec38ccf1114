"""getAvailability tool."""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

from .base import BaseTool, ToolName, ToolResult
from .formatting import describe_window
from ..booking.client import BookingProviderClient
from ..context.models import RequestContext
from ..errors import ProviderExecutionError
from ..timeutils import local_date, local_day_bounds, parse_utc, to_local

logger = logging.getLogger(__name__)


class GetAvailabilityTool(BaseTool):
    """Tool for listing the caller's free time."""

    def __init__(self, client: BookingProviderClient, default_days: int = 7):
        """
        Initialize getAvailability tool.

        Args:
            client: Booking provider client bound to the caller's credentials
            default_days: Length of the range when no end is given
        """
        super().__init__(
            name=ToolName.GET_AVAILABILITY,
            description="Get the times that the user is available.",
        )
        self.client = client
        self.default_days = default_days

    async def execute(
        self, context: RequestContext, **kwargs
    ) -> ToolResult:
        """
        List free windows for the caller.

        Args:
            context: Request context
            **kwargs: Optional parameters:
                - 'dateFrom' (str): Range start, UTC ISO-8601 (default: start of the caller's day)
                - 'dateTo' (str): Range end, UTC ISO-8601 (default: dateFrom + default_days)

        Returns:
            ToolResult with the open windows rendered in the caller's zone
        """
        zone = context.caller.time_zone

        if kwargs.get("dateFrom"):
            date_from = parse_utc(kwargs["dateFrom"])
        else:
            today = local_date(datetime.now(timezone.utc), zone)
            date_from, _ = local_day_bounds(today, zone)

        if kwargs.get("dateTo"):
            date_to = parse_utc(kwargs["dateTo"])
        else:
            date_to = date_from + timedelta(days=self.default_days)

        if date_to <= date_from:
            return ToolResult(
                success=False,
                data=None,
                error="dateTo must be after dateFrom",
            )

        try:
            availability = await self.client.get_availability(date_from, date_to)
        except ProviderExecutionError as e:
            logger.warning(f"Availability lookup failed: {e}")
            return ToolResult(
                success=False,
                data=None,
                error=f"{e.describe().capitalize()} while I was fetching your availability.",
            )

        range_text = f"{to_local(date_from, zone)} and {to_local(date_to, zone)}"

        if availability.free:
            windows = availability.open_windows()
            if not windows:
                message = f"You have no free time between {range_text}."
            else:
                lines = [describe_window(w, zone) for w in windows]
                message = "Here are the times you are available:\n" + "\n".join(
                    f"- {line}" for line in lines
                )
        else:
            windows = []
            if availability.busy:
                lines = [describe_window(w, zone) for w in availability.busy]
                message = (
                    f"Between {range_text} you are busy at these times, "
                    "and free otherwise:\n" + "\n".join(f"- {line}" for line in lines)
                )
            else:
                message = f"You have nothing booked between {range_text}."

        return ToolResult(
            success=True,
            data={
                "open": [w.model_dump(mode="json") for w in windows],
                "busy": [w.model_dump(mode="json") for w in availability.busy],
            },
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
                    "dateFrom": {
                        "type": "string",
                        "format": "date-time",
                        "description": "Start of the range in UTC (optional, defaults to the start of today)",
                    },
                    "dateTo": {
                        "type": "string",
                        "format": "date-time",
                        "description": "End of the range in UTC (optional)",
                    },
                },
                "required": [],
            },
        }
