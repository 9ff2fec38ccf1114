"""User identity module."""

from .extraction import extract_references
from .models import ReferenceType, UserRecord, UserReference
from .redaction import ReferenceView, project_reference, render_references
from .resolver import Resolution, ResolutionStatus, looks_like_email, require_user, resolve

__all__ = [
    "extract_references",
    "ReferenceType",
    "UserRecord",
    "UserReference",
    "ReferenceView",
    "project_reference",
    "render_references",
    "Resolution",
    "ResolutionStatus",
    "looks_like_email",
    "require_user",
    "resolve",
]
