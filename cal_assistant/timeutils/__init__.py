"""Time normalization module."""

from .normalizer import (
    current_local_time,
    format_utc,
    get_zone,
    local_date,
    local_day_bounds,
    parse_utc,
    to_local,
    to_utc,
    uses_twelve_hour_clock,
)

__all__ = [
    "current_local_time",
    "format_utc",
    "get_zone",
    "local_date",
    "local_day_bounds",
    "parse_utc",
    "to_local",
    "to_utc",
    "uses_twelve_hour_clock",
]
