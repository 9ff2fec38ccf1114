"""Conversion between a user's wall-clock time and canonical UTC instants.

Tool arguments always carry UTC. Anything shown to a person is rendered in
that person's own zone using the zone's usual clock convention.
"""

import logging
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional, Tuple, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)

TimeInput = Union[datetime, str]

# Zones whose everyday clock is 12-hour. Everything else renders 24-hour.
TWELVE_HOUR_PREFIXES = ("America/", "US/", "Canada/", "Australia/")
TWELVE_HOUR_ZONES = {
    "EST",
    "MST",
    "HST",
    "EST5EDT",
    "CST6CDT",
    "MST7MDT",
    "PST8PDT",
    "Pacific/Auckland",
    "Pacific/Honolulu",
    "Asia/Kolkata",
    "Asia/Calcutta",
    "Asia/Manila",
    "Asia/Karachi",
    "NZ",
}

TWELVE_HOUR_PARSE = "%A, %B %d, %Y %I:%M %p"
TWENTY_FOUR_HOUR_PARSE = "%A, %d %B %Y %H:%M"


def get_zone(zone_id: str) -> ZoneInfo:
    """Look up an IANA zone, raising ValueError for unknown names."""
    try:
        return ZoneInfo(zone_id)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValueError(
            f"Invalid timezone: '{zone_id}'. "
            f"Must be a valid IANA timezone (e.g., 'America/New_York', 'UTC', 'Asia/Tokyo')"
        )


def uses_twelve_hour_clock(zone_id: str) -> bool:
    """Whether times in this zone are conventionally shown on a 12-hour clock."""
    return zone_id in TWELVE_HOUR_ZONES or zone_id.startswith(TWELVE_HOUR_PREFIXES)


def _parse_display(value: str) -> Optional[datetime]:
    """Parse the output of to_local back into a naive wall-clock datetime."""
    head, _, _abbreviation = value.strip().rpartition(" ")
    for pattern in (TWELVE_HOUR_PARSE, TWENTY_FOUR_HOUR_PARSE):
        try:
            return datetime.strptime(head, pattern)
        except ValueError:
            continue
    return None


def _parse_iso(value: str) -> Optional[datetime]:
    try:
        return datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return None


def _invalid(value: TimeInput) -> ValueError:
    return ValueError(f"Invalid time '{value}'. Use ISO format (e.g., 2024-01-01T10:00:00Z)")


def parse_utc(value: TimeInput) -> datetime:
    """
    Read a timestamp from a tool argument or a provider payload.

    Only ISO-8601 is accepted; a time without an offset is UTC. Display
    strings produced by to_local are rejected here.

    Raises:
        ValueError: The value is not ISO-8601
    """
    instant = value if isinstance(value, datetime) else _parse_iso(value)
    if instant is None:
        raise _invalid(value)
    if instant.tzinfo is None or instant.utcoffset() is None:
        instant = instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(timezone.utc)


def to_utc(local_time: TimeInput, zone_id: str) -> datetime:
    """
    Convert a wall-clock time in ``zone_id`` to an aware UTC datetime.

    A time that already carries an offset is converted as-is. A naive time is
    interpreted in the zone using the rules in force at that instant; a
    repeated hour resolves to the earlier instant and a skipped hour is read
    with the offset in force before the transition.

    Args:
        local_time: datetime, ISO-8601 string, or a string produced by to_local
        zone_id: IANA zone of the wall clock

    Returns:
        Timezone-aware datetime in UTC
    """
    if isinstance(local_time, datetime):
        parsed = local_time
    else:
        parsed = _parse_iso(local_time) or _parse_display(local_time)
    if parsed is None:
        raise _invalid(local_time)
    if parsed.tzinfo is not None and parsed.utcoffset() is not None:
        return parsed.astimezone(timezone.utc)

    localized = parsed.replace(tzinfo=get_zone(zone_id), fold=0)
    return localized.astimezone(timezone.utc)


def to_local(utc_instant: TimeInput, zone_id: str) -> str:
    """
    Render a UTC instant as a display string in ``zone_id``.

    Examples:
        "Wednesday, December 20, 2023 3:00 PM EST" (12-hour zones)
        "Wednesday, 20 December 2023 15:00 CET" (24-hour zones)
    """
    local = parse_utc(utc_instant).astimezone(get_zone(zone_id))
    abbreviation = local.tzname() or zone_id

    if uses_twelve_hour_clock(zone_id):
        hour = local.hour % 12 or 12
        return (
            f"{local:%A}, {local:%B} {local.day}, {local.year} "
            f"{hour}:{local:%M} {local:%p} {abbreviation}"
        )
    return (
        f"{local:%A}, {local.day} {local:%B} {local.year} "
        f"{local:%H:%M} {abbreviation}"
    )


def current_local_time(zone_id: str, now: Optional[datetime] = None) -> str:
    """Current time rendered for a user in ``zone_id``."""
    return to_local(now or datetime.now(timezone.utc), zone_id)


def local_day_bounds(day: date, zone_id: str) -> Tuple[datetime, datetime]:
    """UTC start and end of a calendar day as lived in ``zone_id``."""
    start = to_utc(datetime.combine(day, time.min), zone_id)
    end = to_utc(datetime.combine(day + timedelta(days=1), time.min), zone_id)
    return start, end


def local_date(utc_instant: TimeInput, zone_id: str) -> date:
    """Calendar date of a UTC instant in ``zone_id``."""
    return parse_utc(utc_instant).astimezone(get_zone(zone_id)).date()


def format_utc(instant: datetime) -> str:
    """ISO-8601 UTC string with a trailing Z, as sent to the booking provider."""
    utc = instant.astimezone(timezone.utc).replace(microsecond=0)
    return utc.strftime("%Y-%m-%dT%H:%M:%SZ")
