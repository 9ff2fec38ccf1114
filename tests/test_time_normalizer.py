"""Tests for the time normalizer."""

from datetime import date, datetime, timezone

import pytest

from cal_assistant.timeutils import (
    current_local_time,
    format_utc,
    local_date,
    local_day_bounds,
    parse_utc,
    to_local,
    to_utc,
    uses_twelve_hour_clock,
)


def test_to_utc_naive_string_in_zone():
    """Test that a wall-clock time is interpreted in the given zone."""
    result = to_utc("2030-01-16T10:00:00", "America/New_York")
    assert result == datetime(2030, 1, 16, 15, 0, tzinfo=timezone.utc)


def test_to_utc_keeps_explicit_offset():
    """Test that an offset in the input wins over the zone argument."""
    result = to_utc("2030-01-16T10:00:00+01:00", "America/New_York")
    assert result == datetime(2030, 1, 16, 9, 0, tzinfo=timezone.utc)


def test_to_utc_accepts_z_suffix():
    result = to_utc("2030-01-16T15:00:00Z", "UTC")
    assert result == datetime(2030, 1, 16, 15, 0, tzinfo=timezone.utc)


def test_to_utc_repeated_hour_picks_earlier_instant():
    """Test that 01:30 on the fall-back day resolves to the EDT reading."""
    result = to_utc("2030-11-03T01:30:00", "America/New_York")
    assert result == datetime(2030, 11, 3, 5, 30, tzinfo=timezone.utc)


def test_to_utc_skipped_hour_uses_offset_before_transition():
    """Test that 02:30 on the spring-forward day is read with the EST offset."""
    result = to_utc("2030-03-10T02:30:00", "America/New_York")
    assert result == datetime(2030, 3, 10, 7, 30, tzinfo=timezone.utc)


def test_to_utc_invalid_zone():
    with pytest.raises(ValueError, match="Invalid timezone"):
        to_utc("2030-01-16T10:00:00", "Mars/Olympus_Mons")


def test_to_utc_invalid_time():
    with pytest.raises(ValueError, match="Invalid time"):
        to_utc("next tuesday-ish", "UTC")


def test_to_local_twelve_hour_zone():
    """Test rendering in a zone that uses a 12-hour clock."""
    utc = datetime(2030, 1, 16, 20, 0, tzinfo=timezone.utc)
    assert to_local(utc, "America/New_York") == "Wednesday, January 16, 2030 3:00 PM EST"


def test_to_local_twenty_four_hour_zone():
    """Test rendering in a zone that uses a 24-hour clock."""
    utc = datetime(2030, 1, 16, 14, 0, tzinfo=timezone.utc)
    assert to_local(utc, "Europe/Berlin") == "Wednesday, 16 January 2030 15:00 CET"


def test_to_local_midnight_and_noon():
    assert to_local("2030-01-16T05:00:00Z", "America/New_York").endswith("12:00 AM EST")
    assert to_local("2030-01-16T17:00:00Z", "America/New_York").endswith("12:00 PM EST")


@pytest.mark.parametrize(
    "zone",
    ["America/New_York", "Europe/Berlin", "Asia/Tokyo", "Australia/Sydney", "UTC"],
)
def test_display_string_round_trips(zone):
    """Test that to_utc(to_local(t)) returns t for minute-aligned instants."""
    instant = datetime(2030, 7, 4, 18, 45, tzinfo=timezone.utc)
    assert to_utc(to_local(instant, zone), zone) == instant


def test_round_trip_across_dst_boundary():
    """Test round trips on both sides of a daylight-saving change."""
    for instant in (
        datetime(2030, 3, 10, 6, 59, tzinfo=timezone.utc),
        datetime(2030, 3, 10, 7, 0, tzinfo=timezone.utc),
        datetime(2030, 11, 3, 4, 30, tzinfo=timezone.utc),
    ):
        assert to_utc(to_local(instant, "America/New_York"), "America/New_York") == instant


def test_uses_twelve_hour_clock():
    assert uses_twelve_hour_clock("America/Chicago")
    assert uses_twelve_hour_clock("Asia/Kolkata")
    assert not uses_twelve_hour_clock("Europe/Paris")
    assert not uses_twelve_hour_clock("UTC")


def test_local_day_bounds():
    """Test that a local calendar day maps to the right UTC interval."""
    start, end = local_day_bounds(date(2030, 1, 16), "America/New_York")
    assert start == datetime(2030, 1, 16, 5, 0, tzinfo=timezone.utc)
    assert end == datetime(2030, 1, 17, 5, 0, tzinfo=timezone.utc)


def test_local_day_bounds_on_short_day():
    """Test that the spring-forward day is 23 hours long."""
    start, end = local_day_bounds(date(2030, 3, 10), "America/New_York")
    assert (end - start).total_seconds() == 23 * 3600


def test_local_date_crosses_midnight():
    assert local_date("2030-01-17T03:00:00Z", "America/New_York") == date(2030, 1, 16)
    assert local_date("2030-01-17T03:00:00Z", "Asia/Tokyo") == date(2030, 1, 17)


def test_format_utc():
    instant = datetime(2030, 1, 16, 10, 0, 30, 123456, tzinfo=timezone.utc)
    assert format_utc(instant) == "2030-01-16T10:00:30Z"


def test_current_local_time_uses_given_clock():
    now = datetime(2030, 1, 16, 20, 0, tzinfo=timezone.utc)
    assert current_local_time("America/New_York", now) == "Wednesday, January 16, 2030 3:00 PM EST"


def test_parse_utc_reads_iso():
    assert parse_utc("2030-01-16T15:00:00Z") == datetime(2030, 1, 16, 15, 0, tzinfo=timezone.utc)
    assert parse_utc("2030-01-16T10:00:00-05:00") == datetime(2030, 1, 16, 15, 0, tzinfo=timezone.utc)


def test_parse_utc_naive_is_utc():
    assert parse_utc("2030-01-16T15:00:00") == datetime(2030, 1, 16, 15, 0, tzinfo=timezone.utc)
    assert parse_utc(datetime(2030, 1, 16, 15, 0)).tzinfo == timezone.utc


def test_parse_utc_rejects_display_strings():
    """Test that a rendered local time never passes as a UTC timestamp."""
    with pytest.raises(ValueError, match="Invalid time"):
        parse_utc("Wednesday, January 16, 2030 3:00 PM EST")
