"""sendBookingEmail tool."""

import logging
from typing import Any, Dict

from .base import BaseTool, ToolName, ToolResult
from .formatting import identity_error, resolve_attendee
from ..booking.client import BookingProviderClient
from ..booking.email_client import SendGridEmailClient
from ..context.models import RequestContext
from ..errors import IdentityAmbiguous, IdentityNotFound, ProviderExecutionError
from ..timeutils import to_local

logger = logging.getLogger(__name__)


class SendBookingEmailTool(BaseTool):
    """Tool for emailing a booking confirmation.

    A failed delivery never touches the booking itself.
    """

    def __init__(
        self,
        client: BookingProviderClient,
        email_client: SendGridEmailClient,
        assistant_name: str = "Cal.ai",
    ):
        super().__init__(
            name=ToolName.SEND_BOOKING_EMAIL,
            description="Send an email confirmation for a booking.",
        )
        self.client = client
        self.email_client = email_client
        self.assistant_name = assistant_name

    def _compose(self, context: RequestContext, booking, recipient_name: str, zone: str) -> str:
        minutes = int(booking.window.duration.total_seconds() // 60)
        organizer = context.caller.name or f"@{context.caller.username}"
        return (
            f"Hi {recipient_name},\n\n"
            f"This confirms {booking.title or 'your booking'} with {organizer} on "
            f"{to_local(booking.window.start, zone)} ({minutes} minutes).\n"
            f"Booking reference: {booking.id}\n\n"
            f"- {self.assistant_name}, scheduling on behalf of {organizer}"
        )

    async def execute(
        self, context: RequestContext, **kwargs
    ) -> ToolResult:
        """
        Send a confirmation.

        Args:
            context: Request context
            **kwargs: Must contain 'bookingId' and 'email' (email or @username)

        Returns:
            ToolResult; a failure states that the booking is unaffected
        """
        booking_id = kwargs["bookingId"]

        try:
            name, recipient = resolve_attendee(kwargs["email"], None, context)
        except (IdentityAmbiguous, IdentityNotFound) as e:
            return identity_error(e)

        try:
            booking = await self.client.get_booking(booking_id)
        except ProviderExecutionError as e:
            logger.warning(f"Loading booking {booking_id} failed: {e}")
            return ToolResult(
                success=False,
                data=None,
                error=f"{e.describe().capitalize()} while I was loading booking {booking_id} to confirm it.",
            )

        zone = context.time_zone_for(recipient)
        try:
            await self.email_client.send(
                recipient,
                subject=f"Booking confirmation: {booking.title or booking.id}",
                body=self._compose(context, booking, name, zone),
            )
        except ProviderExecutionError as e:
            logger.warning(f"Confirmation email for booking {booking_id} failed: {e}")
            return ToolResult(
                success=False,
                data={"outcome": "email_failed", "bookingId": booking_id},
                error=(
                    f"The confirmation email to {recipient} could not be sent because {e.describe()}. "
                    f"Booking {booking_id} itself is unaffected."
                ),
            )

        return ToolResult(
            success=True,
            data={"outcome": "sent", "bookingId": booking_id, "recipient": recipient},
            message=f"I sent a confirmation for booking {booking_id} to {recipient}.",
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
                    "email": {
                        "type": "string",
                        "description": "Email address (or @username) to send the confirmation to",
                    },
                },
                "required": ["bookingId", "email"],
            },
        }
