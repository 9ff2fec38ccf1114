"""Centralized tool registry."""

import logging
from typing import Any, Dict, List, Optional, Tuple

from .base import BaseTool, ToolName, ToolSpec
from .validation import validate_arguments
from ..booking.client import BookingProviderClient
from ..booking.email_client import SendGridEmailClient
from ..config.config_schema import AppConfig
from ..context.models import RequestContext
from ..errors import ToolSelectionError
from ..llm.base import ToolCall

logger = logging.getLogger(__name__)


class ToolRegistry:
    """Registry of the assistant's closed tool catalog, in registration order."""

    def __init__(self):
        """Initialize empty tool registry."""
        self._tools: Dict[str, BaseTool] = {}

    def register_tool(self, tool: BaseTool) -> None:
        """
        Register a tool in the registry.

        Args:
            tool: Tool instance to register

        Raises:
            ValueError: If the name is outside the catalog or already registered
        """
        name = tool.get_name()
        if ToolName.parse(name) is None:
            raise ValueError(f"'{name}' is not part of the tool catalog")
        if name in self._tools:
            raise ValueError(f"Tool '{name}' is already registered")
        self._tools[name] = tool

    def get_tool(self, name: str) -> Optional[BaseTool]:
        """
        Get a tool by name.

        Args:
            name: Tool name

        Returns:
            Tool instance or None if not found
        """
        return self._tools.get(name)

    def get_all_tools(self) -> List[BaseTool]:
        """
        Get all registered tools.

        Returns:
            List of all registered tools, in registration order
        """
        return list(self._tools.values())

    def list_specs(self) -> List[ToolSpec]:
        """Specs of all registered tools, in registration order."""
        return [tool.get_spec() for tool in self._tools.values()]

    def get_schemas(self) -> List[Dict[str, Any]]:
        """Function-calling definitions for the oracle."""
        return [spec.to_schema() for spec in self.list_specs()]

    def validate_call(self, call: ToolCall) -> Tuple[BaseTool, Dict[str, Any]]:
        """
        Check a proposed call before anything executes.

        Returns:
            The tool and its validated arguments

        Raises:
            ToolSelectionError: The tool is not registered
            SchemaViolation: The arguments do not satisfy the tool's schema
        """
        tool = self.get_tool(call.name)
        if tool is None:
            raise ToolSelectionError(f"Unknown tool: '{call.name}'")
        arguments = validate_arguments(tool.get_spec(), call.arguments)
        return tool, arguments

    def initialize_tools(
        self,
        config: AppConfig,
        client: BookingProviderClient,
        email_client: SendGridEmailClient,
    ) -> None:
        """
        Register the full catalog, each tool bound to the request's clients.

        Args:
            config: Application configuration
            client: Booking provider client carrying the caller's credentials
            email_client: Confirmation email client
        """
        from .create_booking import CreateBookingTool
        from .delete_booking import DeleteBookingTool
        from .get_availability import GetAvailabilityTool
        from .get_bookings import GetBookingsTool
        from .send_booking_email import SendBookingEmailTool
        from .update_booking import UpdateBookingTool

        self.register_tool(GetAvailabilityTool(client, default_days=config.agent.availability_days))
        self.register_tool(GetBookingsTool(client))
        self.register_tool(
            CreateBookingTool(
                client,
                default_duration_minutes=config.booking.default_duration_minutes,
                alternatives_count=config.agent.alternatives_count,
            )
        )
        self.register_tool(UpdateBookingTool(client))
        self.register_tool(DeleteBookingTool(client))
        self.register_tool(
            SendBookingEmailTool(
                client, email_client, assistant_name=config.email.assistant_name
            )
        )
        logger.debug(f"Registered tools: {', '.join(self._tools)}")

    @classmethod
    def for_request(
        cls,
        config: AppConfig,
        context: RequestContext,
        transport=None,
    ) -> "ToolRegistry":
        """
        Build a registry whose tools are bound to one request's credentials.

        Args:
            config: Application configuration
            context: Request context carrying the caller's credentials
            transport: Optional httpx transport shared by both clients (tests)
        """
        client = BookingProviderClient(
            api_key=context.credentials.api_key,
            user_id=context.credentials.user_id,
            base_url=config.booking.base_url,
            event_type_id=config.booking.event_type_id,
            timeout=config.booking.request_timeout_seconds,
            transport=transport,
        )
        email_client = SendGridEmailClient(
            api_key=config.email.api_key or "",
            sender_email=config.email.agent_email,
            transport=transport,
        )
        registry = cls()
        registry.initialize_tools(config, client, email_client)
        return registry
