"""Tests for the booking provider and email clients."""

import json
from datetime import datetime, timezone

import httpx
import pytest

from cal_assistant.booking.client import BookingProviderClient
from cal_assistant.booking.email_client import SendGridEmailClient
from cal_assistant.booking.models import Availability, BookingWindow
from cal_assistant.errors import ProviderExecutionError, SlotUnavailable

from conftest import API_KEY


def utc(*args):
    return datetime(*args, tzinfo=timezone.utc)


@pytest.mark.asyncio
async def test_get_availability_sends_credentials_and_range(booking_client, provider):
    """Test the availability query and response parsing."""
    provider.date_ranges = [{"start": "2030-01-16T14:00:00Z", "end": "2030-01-16T22:00:00Z"}]
    provider.busy = [{"start": "2030-01-16T15:00:00Z", "end": "2030-01-16T16:00:00Z"}]

    availability = await booking_client.get_availability(utc(2030, 1, 16, 5), utc(2030, 1, 17, 5))

    request = provider.requests[0]
    assert request.url.path == "/v1/availability"
    assert request.url.params["apiKey"] == API_KEY
    assert request.url.params["userId"] == "1"
    assert request.url.params["dateFrom"] == "2030-01-16T05:00:00Z"
    assert request.url.params["dateTo"] == "2030-01-17T05:00:00Z"

    assert availability.time_zone == "America/New_York"
    assert [w.start for w in availability.open_windows()] == [utc(2030, 1, 16, 14), utc(2030, 1, 16, 16)]


@pytest.mark.asyncio
async def test_list_bookings_filters_and_sorts(booking_client, provider):
    provider.add_booking("2", "2030-01-16T18:00:00Z", "2030-01-16T18:30:00Z")
    provider.add_booking("1", "2030-01-16T15:00:00Z", "2030-01-16T15:30:00Z")
    provider.add_booking("3", "2030-02-01T15:00:00Z", "2030-02-01T15:30:00Z")

    bookings = await booking_client.list_bookings(utc(2030, 1, 16), utc(2030, 1, 17))

    assert [b.id for b in bookings] == ["1", "2"]
    assert bookings[0].customer_email == "bob@example.com"


@pytest.mark.asyncio
async def test_create_booking_payload(booking_client, provider):
    window = BookingWindow(start="2030-01-16T15:00:00Z", end="2030-01-16T15:30:00Z")

    booking = await booking_client.create_booking(
        window, name="Onboarding", email="onboarding@gmail.com", time_zone="America/New_York", title="Intro"
    )

    body = json.loads(provider.requests[0].content)
    assert body["start"] == "2030-01-16T15:00:00Z"
    assert body["end"] == "2030-01-16T15:30:00Z"
    assert body["responses"] == {"name": "Onboarding", "email": "onboarding@gmail.com"}
    assert body["timeZone"] == "America/New_York"
    assert booking.id == "100"
    assert booking.customer_email == "onboarding@gmail.com"
    assert booking.title == "Intro"


@pytest.mark.asyncio
async def test_create_booking_conflict_raises_slot_unavailable(booking_client, provider):
    provider.create_status = 409
    window = BookingWindow(start="2030-01-16T15:00:00Z", end="2030-01-16T15:30:00Z")

    with pytest.raises(SlotUnavailable) as exc_info:
        await booking_client.create_booking(window, name="Bob", email="bob@example.com", time_zone="UTC")
    assert exc_info.value.status_code == 409


@pytest.mark.asyncio
async def test_provider_error_status(booking_client, provider):
    provider.create_status = 500
    window = BookingWindow(start="2030-01-16T15:00:00Z", end="2030-01-16T15:30:00Z")

    with pytest.raises(ProviderExecutionError) as exc_info:
        await booking_client.create_booking(window, name="Bob", email="bob@example.com", time_zone="UTC")
    assert exc_info.value.status_code == 500
    assert not isinstance(exc_info.value, SlotUnavailable)
    assert "slot taken" not in str(exc_info.value)
    assert exc_info.value.describe() == "the booking service had an internal problem"


@pytest.mark.asyncio
async def test_update_booking_sends_only_given_fields(booking_client, provider):
    provider.add_booking("7", "2030-01-16T15:00:00Z", "2030-01-16T16:00:00Z")
    window = BookingWindow(start="2030-01-17T15:00:00Z", end="2030-01-17T16:00:00Z")

    booking = await booking_client.update_booking("7", window=window)

    assert booking.window.start == utc(2030, 1, 17, 15)
    assert b"responses" not in provider.requests[0].content


@pytest.mark.asyncio
async def test_cancel_booking_twice(booking_client, provider):
    """Test that cancelling a missing booking reports it as already gone."""
    provider.add_booking("7", "2030-01-16T15:00:00Z", "2030-01-16T16:00:00Z")

    assert await booking_client.cancel_booking("7") is True
    assert await booking_client.cancel_booking("7") is False


@pytest.mark.asyncio
async def test_network_error_wrapped():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    client = BookingProviderClient(api_key=API_KEY, user_id=1, transport=httpx.MockTransport(handler))

    with pytest.raises(ProviderExecutionError, match="network error"):
        await client.get_booking("1")


@pytest.mark.asyncio
async def test_send_email_payload(email_client, provider):
    """Test the SendGrid request."""
    result = await email_client.send("bob@example.com", subject="Booking confirmation", body="Hi Bob")

    assert result["status"] == 202
    request = provider.requests[0]
    assert request.headers["Authorization"] == "Bearer SG.test"
    message = provider.sent_emails[0]
    assert message["personalizations"][0]["to"][0]["email"] == "bob@example.com"
    assert message["from"]["email"] == "assistant@cal.ai"
    assert message["content"][0]["value"] == "Hi Bob"


@pytest.mark.asyncio
async def test_send_email_failure(email_client, provider):
    provider.email_status = 500

    with pytest.raises(ProviderExecutionError) as exc_info:
        await email_client.send("bob@example.com", subject="s", body="b")
    assert exc_info.value.operation == "sendBookingEmail"


@pytest.mark.asyncio
async def test_send_email_without_api_key(transport):
    client = SendGridEmailClient(api_key="", sender_email="assistant@cal.ai", transport=transport)

    with pytest.raises(ProviderExecutionError, match="without API key"):
        await client.send("bob@example.com", subject="s", body="b")


def test_window_rejects_reversed_interval():
    with pytest.raises(ValueError):
        BookingWindow(start="2030-01-16T16:00:00Z", end="2030-01-16T15:00:00Z")


def test_window_overlap_is_half_open():
    first = BookingWindow(start="2030-01-16T15:00:00Z", end="2030-01-16T16:00:00Z")
    after = BookingWindow(start="2030-01-16T16:00:00Z", end="2030-01-16T16:30:00Z")
    inside = BookingWindow(start="2030-01-16T15:30:00Z", end="2030-01-16T15:45:00Z")

    assert not first.overlaps(after)
    assert first.overlaps(inside)
    assert first.contains(inside)


def test_suggest_alternatives_closest_first_then_chronological():
    """Test that suggestions are the nearest free slots, listed in time order."""
    availability = Availability(
        busy=[BookingWindow(start="2030-01-16T15:00:00Z", end="2030-01-16T16:00:00Z")]
    )
    requested = BookingWindow(start="2030-01-16T15:00:00Z", end="2030-01-16T15:30:00Z")
    day = BookingWindow(start="2030-01-16T05:00:00Z", end="2030-01-17T05:00:00Z")

    alternatives = availability.suggest_alternatives(requested, 3, day)

    assert [w.start for w in alternatives] == [
        utc(2030, 1, 16, 14, 0),
        utc(2030, 1, 16, 14, 30),
        utc(2030, 1, 16, 16, 0),
    ]


def test_suggest_alternatives_respects_free_ranges():
    availability = Availability(
        free=[BookingWindow(start="2030-01-16T14:00:00Z", end="2030-01-16T15:30:00Z")],
        busy=[BookingWindow(start="2030-01-16T14:00:00Z", end="2030-01-16T15:00:00Z")],
    )
    requested = BookingWindow(start="2030-01-16T14:00:00Z", end="2030-01-16T14:30:00Z")
    day = BookingWindow(start="2030-01-16T05:00:00Z", end="2030-01-17T05:00:00Z")

    alternatives = availability.suggest_alternatives(requested, 3, day)

    assert [w.start for w in alternatives] == [utc(2030, 1, 16, 15, 0)]


@pytest.mark.parametrize(
    "operation, reason, status_code, expected",
    [
        ("getBookings", "network error: refused", None, "the booking service could not be reached"),
        ("getBookings", "provider returned 401", 401, "the booking service did not accept our credentials"),
        ("updateBooking", "provider returned 404", 404, "the booking service could not find what I asked for"),
        ("getAvailability", "provider returned 429", 429, "the booking service is too busy right now"),
        ("sendBookingEmail", "SendGrid returned 503", 503, "the email service had an internal problem"),
        ("sendBookingEmail", "email client configured without API key", None, "the email service is not set up correctly"),
        ("createBookingIfAvailable", "provider returned 422", 422, "the booking service turned the request down"),
    ],
)
def test_provider_error_explanations(operation, reason, status_code, expected):
    """Test that provider failures are explained without codes or response bodies."""
    assert ProviderExecutionError(operation, reason, status_code=status_code).describe() == expected
