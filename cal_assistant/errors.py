"""Error taxonomy for the scheduling assistant.

Every error here is recoverable at the conversation level: the agent turns
it into a text reply instead of letting it escape ``SchedulingAgent.run``.
"""

from typing import Any, List, Optional


class AssistantError(Exception):
    """Base class for all assistant errors."""


class ToolSelectionError(AssistantError):
    """The oracle produced unparsable output or named an unknown tool."""

    def __init__(self, message: str, raw_output: Optional[str] = None):
        super().__init__(message)
        self.raw_output = raw_output


class SchemaViolation(AssistantError):
    """Tool arguments do not satisfy the declared parameter schema."""

    def __init__(self, tool_name: str, field: str, reason: str):
        super().__init__(f"{tool_name}: '{field}' {reason}")
        self.tool_name = tool_name
        self.field = field
        self.reason = reason


class IdentityNotFound(AssistantError):
    """A user reference matched nobody in the roster."""

    def __init__(self, query: str):
        super().__init__(f"No user found for '{query}'")
        self.query = query


class IdentityAmbiguous(AssistantError):
    """A user reference could not be pinned down to exactly one roster entry."""

    def __init__(self, query: str, candidates: Optional[List[Any]] = None):
        super().__init__(f"Reference '{query}' is ambiguous")
        self.query = query
        self.candidates = candidates or []


class ProviderExecutionError(AssistantError):
    """A downstream booking or email call failed.

    The message carries provider details for the logs; ``describe()`` is
    what the person who asked gets to see.
    """

    def __init__(
        self,
        operation: str,
        message: str,
        status_code: Optional[int] = None,
    ):
        super().__init__(f"{operation} failed: {message}")
        self.operation = operation
        self.reason = message
        self.status_code = status_code

    @property
    def service(self) -> str:
        return "email service" if self.operation == "sendBookingEmail" else "booking service"

    def describe(self) -> str:
        """Plain explanation without status codes or response bodies."""
        code = self.status_code
        if code is None:
            if self.reason.startswith("network error"):
                return f"the {self.service} could not be reached"
            return f"the {self.service} is not set up correctly"
        if 200 <= code < 300:
            return f"the {self.service} sent a reply I could not read"
        if code in (401, 403):
            return f"the {self.service} did not accept our credentials"
        if code == 404:
            return f"the {self.service} could not find what I asked for"
        if code == 429:
            return f"the {self.service} is too busy right now"
        if code >= 500:
            return f"the {self.service} had an internal problem"
        return f"the {self.service} turned the request down"


class SlotUnavailable(ProviderExecutionError):
    """The requested slot is not free at execution time."""

    def __init__(self, message: str):
        super().__init__("createBookingIfAvailable", message, status_code=409)


class OrchestrationTimeout(AssistantError):
    """The oracle or a tool executor exceeded the configured deadline."""

    def __init__(self, stage: str, timeout_seconds: float):
        super().__init__(f"{stage} did not respond within {timeout_seconds:g}s")
        self.stage = stage
        self.timeout_seconds = timeout_seconds
