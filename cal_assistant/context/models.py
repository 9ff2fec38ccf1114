"""Per-request context for one orchestration invocation."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..identity.models import UserRecord, UserReference


@dataclass(frozen=True)
class ProviderCredentials:
    """Booking-provider credential of the caller. Never shown to the oracle."""

    api_key: str
    user_id: int

    def __repr__(self) -> str:
        return f"ProviderCredentials(api_key='***', user_id={self.user_id})"


@dataclass
class RequestContext:
    """Caller identity, roster and credentials for a single request."""

    caller: UserRecord
    credentials: ProviderCredentials
    references: List[UserReference] = field(default_factory=list)
    users: List[UserRecord] = field(default_factory=list)
    sender_email: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def roster(self) -> List[Any]:
        """Everyone a tool may resolve a reference against, caller first."""
        entries: List[Any] = [self.caller]
        known_ids = {self.caller.id}
        for user in self.users:
            if user.id not in known_ids:
                entries.append(user)
                known_ids.add(user.id)
        for reference in self.references:
            if reference.id is None or reference.id not in known_ids:
                entries.append(reference)
                if reference.id is not None:
                    known_ids.add(reference.id)
        return entries

    def time_zone_for(self, email: str) -> str:
        """Zone of a known user with this email, else the caller's zone."""
        folded = email.casefold()
        for user in [self.caller, *self.users]:
            if user.email.casefold() == folded:
                return user.time_zone
        return self.caller.time_zone
