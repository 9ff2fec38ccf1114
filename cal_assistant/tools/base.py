"""Base tool interface."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from ..context.models import RequestContext


class ToolName(str, Enum):
    """The closed set of operations the assistant can invoke."""

    GET_AVAILABILITY = "getAvailability"
    GET_BOOKINGS = "getBookings"
    CREATE_BOOKING_IF_AVAILABLE = "createBookingIfAvailable"
    UPDATE_BOOKING = "updateBooking"
    DELETE_BOOKING = "deleteBooking"
    SEND_BOOKING_EMAIL = "sendBookingEmail"

    @classmethod
    def parse(cls, name: str) -> Optional["ToolName"]:
        """Member for a tool name, or None if the name is not in the catalog."""
        try:
            return cls(name)
        except ValueError:
            return None


@dataclass(frozen=True)
class ToolSpec:
    """Name, description and parameter contract of a tool."""

    name: str
    description: str
    parameters: Dict[str, Any]

    def to_schema(self) -> Dict[str, Any]:
        """Function-calling definition handed to the oracle."""
        return {
            "name": self.name,
            "description": self.description,
            "parameters": self.parameters,
        }


@dataclass
class ToolResult:
    """Result from tool execution."""

    success: bool
    data: Any
    error: Optional[str] = None
    message: Optional[str] = None


class BaseTool(ABC):
    """Abstract base class for all tools."""

    def __init__(self, name: ToolName, description: str):
        """
        Initialize tool.

        Args:
            name: Catalog name (used for registration)
            description: Tool description shown to the oracle
        """
        self.name = name.value
        self.description = description

    @abstractmethod
    async def execute(
        self, context: RequestContext, **kwargs
    ) -> ToolResult:
        """
        Execute the tool for one request.

        Args:
            context: Request context with caller, roster and metadata
            **kwargs: Arguments already validated against get_schema()

        Returns:
            ToolResult with execution result
        """
        pass

    @abstractmethod
    def get_schema(self) -> Dict[str, Any]:
        """
        Get tool schema.

        Returns:
            Dictionary with name, description and JSON-schema parameters
        """
        pass

    def get_spec(self) -> ToolSpec:
        schema = self.get_schema()
        return ToolSpec(
            name=schema["name"],
            description=schema["description"],
            parameters=schema["parameters"],
        )

    def get_name(self) -> str:
        """Get tool name."""
        return self.name
