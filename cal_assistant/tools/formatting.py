"""Shared helpers for booking tools: attendee lookup and time rendering."""

from typing import Optional, Tuple, Union

from ..booking.models import Booking, BookingWindow
from ..context.models import RequestContext
from ..errors import IdentityAmbiguous, IdentityNotFound
from ..identity import ResolutionStatus, looks_like_email, require_user, resolve
from ..timeutils import local_date, to_local, uses_twelve_hour_clock
from .base import ToolResult


def describe_window(window: BookingWindow, zone_id: str) -> str:
    """Start and end in ``zone_id``; the end omits the date when it is the same day."""
    start = to_local(window.start, zone_id)
    end = to_local(window.end, zone_id)
    if local_date(window.start, zone_id) == local_date(window.end, zone_id):
        keep = 3 if uses_twelve_hour_clock(zone_id) else 2
        end = " ".join(end.split(" ")[-keep:])
    return f"{start} - {end}"


def describe_booking(booking: Booking, zone_id: str) -> str:
    title = booking.title or "Booking"
    who = ""
    if booking.customer_name or booking.customer_email:
        who = f" with {booking.customer_name or booking.customer_email}"
    return f"[{booking.id}] {title}{who}: {describe_window(booking.window, zone_id)}"


def resolve_attendee(
    value: str,
    name: Optional[str],
    context: RequestContext,
) -> Tuple[str, str]:
    """
    Turn an email address or user reference into (name, email).

    An email address that belongs to nobody on the roster is treated as a
    guest. A @username, id or display name must resolve to a known person.

    Raises:
        IdentityNotFound: The reference matches nobody, or matches someone
            whose email is not known
        IdentityAmbiguous: The reference matches several people or is a
            display name without a single match
    """
    roster = context.roster
    if looks_like_email(value):
        if resolve(value, roster).status == ResolutionStatus.NOT_FOUND:
            return name or value.split("@")[0], value
    entry = require_user(value, roster)

    if not entry.email:
        raise IdentityNotFound(value)
    display = name or entry.name or entry.username or entry.email
    return display, entry.email


CUSTOMER_DETAILS_SCHEMA = {
    "type": "object",
    "properties": {
        "name": {"type": "string", "description": "Attendee name"},
        "email": {
            "type": "string",
            "description": "Attendee email address, or the @username of a referenced user",
        },
    },
}


def identity_error(e: Union[IdentityAmbiguous, IdentityNotFound]) -> ToolResult:
    """Failed result asking the caller to identify a person more precisely."""
    if isinstance(e, IdentityAmbiguous):
        reason = f"I couldn't tell who '{e.query}' refers to."
    else:
        reason = f"I couldn't find a user matching '{e.query}'."
    return ToolResult(
        success=False,
        data={"outcome": "identity_unresolved", "query": e.query},
        error=(
            f"{reason} Please reply with their email address or their username "
            "in the @username format."
        ),
    )
