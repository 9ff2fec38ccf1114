"""Booking provider and email boundary module."""

from .client import BookingProviderClient
from .email_client import SendGridEmailClient
from .models import Availability, Booking, BookingWindow

__all__ = [
    "BookingProviderClient",
    "SendGridEmailClient",
    "Availability",
    "Booking",
    "BookingWindow",
]
