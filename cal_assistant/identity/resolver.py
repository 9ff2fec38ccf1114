"""Resolve loosely specified person references against a known roster."""

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence, Union

from ..errors import IdentityAmbiguous, IdentityNotFound
from .models import ReferenceType, UserRecord, UserReference

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

RosterEntry = Union[UserRecord, UserReference]
Reference = Union[UserReference, str, int]


class ResolutionStatus(Enum):
    """Outcome class of a lookup."""

    FOUND = "found"
    NOT_FOUND = "not_found"
    AMBIGUOUS = "ambiguous"


@dataclass
class Resolution:
    """Result of resolving one reference."""

    status: ResolutionStatus
    query: str
    user: Optional[RosterEntry] = None
    candidates: List[RosterEntry] = field(default_factory=list)

    @property
    def found(self) -> bool:
        return self.status == ResolutionStatus.FOUND


def looks_like_email(value: str) -> bool:
    """Bare string with an @ and a domain-like suffix."""
    return bool(EMAIL_PATTERN.match(value.strip()))


def match_attribute(
    roster: Sequence[RosterEntry],
    attribute: str,
    value: str,
    query: str,
    empty_status: ResolutionStatus = ResolutionStatus.NOT_FOUND,
) -> Resolution:
    """Exact-case match first, then a single case-insensitive match."""
    exact = [entry for entry in roster if getattr(entry, attribute, None) == value]
    if len(exact) == 1:
        return Resolution(ResolutionStatus.FOUND, query, user=exact[0])

    folded = value.casefold()
    loose = [
        entry
        for entry in roster
        if getattr(entry, attribute, None)
        and getattr(entry, attribute).casefold() == folded
    ]
    if len(loose) == 1:
        return Resolution(ResolutionStatus.FOUND, query, user=loose[0])
    if loose:
        return Resolution(ResolutionStatus.AMBIGUOUS, query, candidates=loose)
    return Resolution(empty_status, query)


def _match_id(roster: Sequence[RosterEntry], user_id: int, query: str) -> Resolution:
    matches = [entry for entry in roster if entry.id == user_id]
    if len(matches) == 1:
        return Resolution(ResolutionStatus.FOUND, query, user=matches[0])
    if matches:
        return Resolution(ResolutionStatus.AMBIGUOUS, query, candidates=matches)
    return Resolution(ResolutionStatus.NOT_FOUND, query)


def _resolve_text(text: str, roster: Sequence[RosterEntry]) -> Resolution:
    value = text.strip()
    if value.isdigit():
        return _match_id(roster, int(value), value)
    if value.startswith("@"):
        return match_attribute(roster, "username", value[1:], value)
    if looks_like_email(value):
        return match_attribute(roster, "email", value, value)

    # Free-text names only resolve when exactly one entry carries the name.
    return match_attribute(
        roster, "name", value, value, empty_status=ResolutionStatus.AMBIGUOUS
    )


def resolve(reference: Reference, roster: Sequence[RosterEntry]) -> Resolution:
    """
    Resolve a person reference to at most one roster entry.

    Args:
        reference: numeric id, "@username", email address, display name, or
            a UserReference from the message context
        roster: Known users for this request

    Returns:
        Resolution with status FOUND, NOT_FOUND or AMBIGUOUS
    """
    if isinstance(reference, bool):
        raise TypeError("A boolean is not a user reference")
    if isinstance(reference, int):
        return _match_id(roster, reference, str(reference))
    if isinstance(reference, str):
        return _resolve_text(reference, roster)

    if reference.id is not None:
        return _match_id(roster, reference.id, str(reference.id))
    if reference.username and (
        reference.type == ReferenceType.FROM_USERNAME or not reference.email
    ):
        return match_attribute(
            roster, "username", reference.username, f"@{reference.username}"
        )
    return match_attribute(roster, "email", reference.email, reference.email)


def require_user(reference: Reference, roster: Sequence[RosterEntry]) -> RosterEntry:
    """
    Resolve a reference or raise.

    Raises:
        IdentityNotFound: Nobody matched
        IdentityAmbiguous: Zero or several entries share a display name, or
            several entries matched case-insensitively
    """
    resolution = resolve(reference, roster)
    if resolution.status == ResolutionStatus.FOUND:
        return resolution.user

    logger.info(f"Could not resolve user reference {resolution.query!r}: {resolution.status.value}")
    if resolution.status == ResolutionStatus.AMBIGUOUS:
        raise IdentityAmbiguous(resolution.query, resolution.candidates)
    raise IdentityNotFound(resolution.query)
