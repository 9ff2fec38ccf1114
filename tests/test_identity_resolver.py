"""Tests for user reference resolution."""

import pytest

from cal_assistant.errors import IdentityAmbiguous, IdentityNotFound
from cal_assistant.identity import (
    ReferenceType,
    ResolutionStatus,
    UserRecord,
    UserReference,
    looks_like_email,
    require_user,
    resolve,
)


@pytest.fixture
def roster(alice, onboarding, bob):
    return [alice, onboarding, bob]


def test_resolve_by_username(roster, onboarding):
    """Test resolving an @username."""
    resolution = resolve("@onboarding", roster)
    assert resolution.found
    assert resolution.user == onboarding


def test_resolve_by_email_case_insensitive(roster, bob):
    """Test that email lookup falls back to a case-insensitive match."""
    resolution = resolve("Bob@Example.COM", roster)
    assert resolution.status == ResolutionStatus.FOUND
    assert resolution.user == bob


def test_resolve_by_numeric_id(roster, bob):
    assert resolve(3, roster).user == bob
    assert resolve("3", roster).user == bob


def test_resolve_unknown_username(roster):
    resolution = resolve("@carol", roster)
    assert resolution.status == ResolutionStatus.NOT_FOUND
    assert resolution.user is None


def test_resolve_is_deterministic(roster):
    """Test that the same input always gives the same answer."""
    results = {resolve("@bob", roster).user.id for _ in range(5)}
    assert results == {3}


def test_display_name_with_single_match(roster, alice):
    assert resolve("Alice", roster).user == alice


def test_display_name_without_match_is_ambiguous(roster):
    """Test that an unmatched free-text name is never guessed."""
    assert resolve("the marketing lead", roster).status == ResolutionStatus.AMBIGUOUS


def test_display_name_shared_by_two_users_is_ambiguous(roster):
    twin = UserRecord(id=9, username="alice2", email="alice2@example.com", name="alice")
    resolution = resolve("Alice", [*roster, twin])
    # Exact-case "Alice" still matches a single record
    assert resolution.found

    resolution = resolve("ALICE", [*roster, twin])
    assert resolution.status == ResolutionStatus.AMBIGUOUS
    assert len(resolution.candidates) == 2


def test_resolve_reference_from_username(roster, onboarding):
    reference = UserReference(username="onboarding", type=ReferenceType.FROM_USERNAME)
    assert resolve(reference, roster).user == onboarding


def test_resolve_reference_from_email_uses_email(roster, bob):
    """Test that an email reference is matched by its email, not its username."""
    reference = UserReference(username="someone-else", email="bob@example.com", type=ReferenceType.FROM_EMAIL)
    assert resolve(reference, roster).user == bob


def test_resolve_rejects_bool(roster):
    with pytest.raises(TypeError):
        resolve(True, roster)


def test_require_user_raises_not_found(roster):
    with pytest.raises(IdentityNotFound) as exc_info:
        require_user("carol@example.com", roster)
    assert exc_info.value.query == "carol@example.com"


def test_require_user_raises_ambiguous(roster):
    with pytest.raises(IdentityAmbiguous):
        require_user("someone from sales", roster)


def test_looks_like_email():
    assert looks_like_email("alice@example.com")
    assert not looks_like_email("@alice")
    assert not looks_like_email("alice")


def test_user_record_strips_sigil_and_validates_zone():
    user = UserRecord(id=5, username="@dana", email="dana@example.com")
    assert user.username == "dana"
    assert user.time_zone == "UTC"

    with pytest.raises(ValueError):
        UserRecord(id=6, username="eve", email="eve@example.com", timeZone="Nowhere/City")


def test_user_reference_requires_identifier():
    with pytest.raises(ValueError):
        UserReference(type=ReferenceType.OTHER)
