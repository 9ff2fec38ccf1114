"""User identity models."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..timeutils import get_zone


class ReferenceType(str, Enum):
    """Channel through which a person entered the conversation."""

    FROM_USERNAME = "fromUsername"
    FROM_EMAIL = "fromEmail"
    OTHER = "other"


class UserRecord(BaseModel):
    """Canonical user known to the booking provider."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: int = Field(..., description="Provider user id")
    username: str = Field(..., description="Username, without the @ sigil")
    email: str = Field(..., description="Primary email address")
    time_zone: str = Field(default="UTC", alias="timeZone", description="IANA time zone")
    name: Optional[str] = Field(default=None, description="Display name")

    @field_validator("time_zone")
    @classmethod
    def validate_time_zone(cls, v: str) -> str:
        """Validate timezone string using zoneinfo."""
        get_zone(v)
        return v

    @field_validator("username")
    @classmethod
    def strip_sigil(cls, v: str) -> str:
        return v.lstrip("@")


class UserReference(BaseModel):
    """A person mentioned in a message, who may or may not be a known user."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: Optional[int] = None
    username: Optional[str] = None
    email: Optional[str] = None
    type: ReferenceType = ReferenceType.OTHER
    name: Optional[str] = None

    @field_validator("username")
    @classmethod
    def strip_sigil(cls, v: Optional[str]) -> Optional[str]:
        return v.lstrip("@") if v else v

    @model_validator(mode="after")
    def require_identifier(self) -> "UserReference":
        """At least one of id, username or email must be present."""
        if self.id is None and not self.username and not self.email:
            raise ValueError("A user reference needs an id, a username or an email")
        return self

    @classmethod
    def from_user(cls, user: UserRecord, reference_type: ReferenceType) -> "UserReference":
        """Build a reference to a known user."""
        return cls(
            id=user.id,
            username=user.username,
            email=user.email,
            type=reference_type,
            name=user.name,
        )
