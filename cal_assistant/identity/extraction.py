"""Find @usernames and email addresses mentioned in a message."""

import re
from typing import Dict, List, Optional, Sequence

from .models import ReferenceType, UserRecord, UserReference
from .resolver import ResolutionStatus, match_attribute

MENTION_PATTERN = re.compile(
    r"(?P<email>[\w.+-]+@[\w-]+(?:\.[\w-]+)+)"
    r"|(?<![\w@])@(?P<username>[A-Za-z0-9_][A-Za-z0-9_.-]*)"
)


def extract_references(
    text: str,
    users: Sequence[UserRecord],
    sender_email: Optional[str] = None,
) -> List[UserReference]:
    """
    Build the list of people a message refers to.

    Each mention is matched against the known users. Known users keep the
    channel they were mentioned through as their reference type; unknown
    email addresses become non-user references. The sender is skipped and a
    person mentioned twice is kept once, under the first mention.

    Args:
        text: Message body
        users: Known users
        sender_email: Address the message came from

    Returns:
        References in order of first appearance
    """
    references: Dict[str, UserReference] = {}
    sender = sender_email.casefold() if sender_email else None

    for match in MENTION_PATTERN.finditer(text):
        email = match.group("email")
        if email:
            email = email.rstrip(".")
            if email.casefold() == sender:
                continue
            resolution = match_attribute(users, "email", email, email)
            if resolution.status == ResolutionStatus.FOUND:
                reference = UserReference.from_user(resolution.user, ReferenceType.FROM_EMAIL)
            else:
                reference = UserReference(email=email, type=ReferenceType.FROM_EMAIL)
        else:
            username = match.group("username").rstrip(".")
            resolution = match_attribute(users, "username", username, f"@{username}")
            if resolution.status == ResolutionStatus.FOUND:
                reference = UserReference.from_user(resolution.user, ReferenceType.FROM_USERNAME)
            else:
                reference = UserReference(username=username, type=ReferenceType.FROM_USERNAME)

        if reference.id is not None:
            key = f"id:{reference.id}"
        else:
            key = (reference.email or f"@{reference.username}").casefold()
        references.setdefault(key, reference)

    return list(references.values())
