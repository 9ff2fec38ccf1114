"""Privacy projection of user references for the oracle directive.

A person first mentioned by email must not have their username revealed, and
a person mentioned by @username must not have their email revealed, even when
both are known.
"""

from dataclasses import dataclass
from typing import Optional, Sequence

from .models import ReferenceType, UserReference

REDACTED = "REDACTED"


@dataclass(frozen=True)
class ReferenceView:
    """What the oracle is allowed to see about one referenced person."""

    id: Optional[int]
    username: Optional[str]
    email: Optional[str]
    has_username: bool
    has_email: bool

    def render(self) -> str:
        parts = [f"id: {self.id}" if self.id is not None else "id: (non user)"]

        if not self.has_username:
            parts.append("(no username)")
        else:
            parts.append(f"username: @{self.username}" if self.username else f"username: {REDACTED}")

        if not self.has_email:
            parts.append("(no email)")
        else:
            parts.append(f"email: {self.email}" if self.email else f"email: {REDACTED}")

        return ", ".join(parts)


def project_reference(reference: UserReference) -> ReferenceView:
    """Keep only the identifier matching the channel the person came in through."""
    return ReferenceView(
        id=reference.id,
        username=reference.username if reference.type == ReferenceType.FROM_USERNAME else None,
        email=reference.email if reference.type == ReferenceType.FROM_EMAIL else None,
        has_username=bool(reference.username),
        has_email=bool(reference.email),
    )


def render_references(references: Sequence[UserReference]) -> str:
    """One projected line per referenced person."""
    return "\n".join(f"{project_reference(ref).render()};" for ref in references)
