"""Booking data owned by the external booking provider."""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from ..timeutils import parse_utc

ALTERNATIVE_STEP = timedelta(minutes=30)


class BookingWindow(BaseModel):
    """A half-open UTC interval [start, end)."""

    start: datetime
    end: datetime

    @field_validator("start", "end", mode="before")
    @classmethod
    def normalize_utc(cls, v: Any) -> datetime:
        return parse_utc(v)

    @model_validator(mode="after")
    def check_order(self) -> "BookingWindow":
        if self.start >= self.end:
            raise ValueError("Booking window start must be before its end")
        return self

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    def overlaps(self, other: "BookingWindow") -> bool:
        return self.start < other.end and other.start < self.end

    def contains(self, other: "BookingWindow") -> bool:
        return self.start <= other.start and other.end <= self.end

    @classmethod
    def starting_at(cls, start: datetime, minutes: int) -> "BookingWindow":
        return cls(start=start, end=start + timedelta(minutes=minutes))


class Booking(BaseModel):
    """A booking as reported by the provider."""

    id: str
    window: BookingWindow
    customer_name: str = ""
    customer_email: str = ""
    title: Optional[str] = None
    status: Optional[str] = None

    @classmethod
    def from_provider(cls, payload: Dict[str, Any]) -> "Booking":
        """Build from a provider booking object."""
        attendees = payload.get("attendees") or []
        attendee = attendees[0] if attendees else payload.get("responses") or {}
        return cls(
            id=str(payload["id"]),
            window=BookingWindow(
                start=payload.get("startTime") or payload["start"],
                end=payload.get("endTime") or payload["end"],
            ),
            customer_name=attendee.get("name") or "",
            customer_email=attendee.get("email") or "",
            title=payload.get("title"),
            status=payload.get("status"),
        )


class Availability(BaseModel):
    """Free and busy windows for a user over a date range."""

    busy: List[BookingWindow] = Field(default_factory=list)
    free: List[BookingWindow] = Field(default_factory=list)
    time_zone: Optional[str] = None

    @classmethod
    def from_provider(cls, payload: Dict[str, Any]) -> "Availability":
        return cls(
            busy=[BookingWindow(start=b["start"], end=b["end"]) for b in payload.get("busy") or []],
            free=[
                BookingWindow(start=r["start"], end=r["end"])
                for r in payload.get("dateRanges") or []
            ],
            time_zone=payload.get("timeZone"),
        )

    def is_free(self, window: BookingWindow) -> bool:
        """Inside a free range (when the provider reports ranges) and clear of busy time."""
        if self.free and not any(r.contains(window) for r in self.free):
            return False
        return not any(b.overlaps(window) for b in self.busy)

    def open_windows(self) -> List[BookingWindow]:
        """Free ranges with busy time cut out, in chronological order."""
        windows: List[BookingWindow] = []
        busy = sorted(self.busy, key=lambda b: b.start)
        for free_range in sorted(self.free, key=lambda r: r.start):
            cursor = free_range.start
            for block in busy:
                if block.end <= cursor or block.start >= free_range.end:
                    continue
                if block.start > cursor:
                    windows.append(BookingWindow(start=cursor, end=block.start))
                cursor = max(cursor, block.end)
            if cursor < free_range.end:
                windows.append(BookingWindow(start=cursor, end=free_range.end))
        return windows

    def suggest_alternatives(
        self,
        requested: BookingWindow,
        count: int,
        search_range: BookingWindow,
    ) -> List[BookingWindow]:
        """
        Free windows of the requested length closest to the requested start.

        Candidates start on half-hour boundaries inside the provider's free
        ranges, or inside ``search_range`` when no ranges were reported.

        Returns:
            Up to ``count`` windows in chronological order
        """
        ranges = self.free or [search_range]
        candidates: Dict[datetime, BookingWindow] = {}

        for free_range in ranges:
            start = _ceil_to_step(max(free_range.start, search_range.start))
            while start + requested.duration <= min(free_range.end, search_range.end):
                candidate = BookingWindow(start=start, end=start + requested.duration)
                if candidate.start != requested.start and self.is_free(candidate):
                    candidates.setdefault(candidate.start, candidate)
                start += ALTERNATIVE_STEP

        closest = sorted(
            candidates.values(),
            key=lambda w: abs((w.start - requested.start).total_seconds()),
        )
        return sorted(closest[:count], key=lambda w: w.start)


def _ceil_to_step(instant: datetime) -> datetime:
    epoch = datetime(1970, 1, 1, tzinfo=timezone.utc)
    step = ALTERNATIVE_STEP.total_seconds()
    elapsed = (instant - epoch).total_seconds()
    remainder = elapsed % step
    if remainder:
        instant += timedelta(seconds=step - remainder)
    return instant
