"""Tests for tool registry."""

import pytest

from cal_assistant.errors import SchemaViolation, ToolSelectionError
from cal_assistant.llm.base import ToolCall
from cal_assistant.tools.base import BaseTool, ToolName, ToolResult
from cal_assistant.tools.delete_booking import DeleteBookingTool
from cal_assistant.tools.registry import ToolRegistry

CATALOG = [
    "getAvailability",
    "getBookings",
    "createBookingIfAvailable",
    "updateBooking",
    "deleteBooking",
    "sendBookingEmail",
]


class MockTool(BaseTool):
    """Mock tool for testing."""

    def __init__(self, name: ToolName = ToolName.GET_BOOKINGS):
        super().__init__(name=name, description="A mock tool for testing")

    async def execute(self, context, **kwargs):
        return ToolResult(success=True, data=None)

    def get_schema(self):
        return {
            "name": self.name,
            "description": self.description,
            "parameters": {"type": "object", "properties": {}},
        }


@pytest.fixture
def registry(app_config, make_context, transport):
    return ToolRegistry.for_request(app_config, make_context(), transport)


def test_register_tool():
    """Test registering a tool."""
    registry = ToolRegistry()
    tool = MockTool()

    registry.register_tool(tool)

    assert registry.get_tool("getBookings") == tool
    assert len(registry.get_all_tools()) == 1


def test_register_duplicate_rejected():
    registry = ToolRegistry()
    registry.register_tool(MockTool())

    with pytest.raises(ValueError, match="already registered"):
        registry.register_tool(MockTool())


def test_register_outside_catalog_rejected():
    """Test that the catalog is closed."""
    tool = MockTool()
    tool.name = "sendSms"

    with pytest.raises(ValueError, match="not part of the tool catalog"):
        ToolRegistry().register_tool(tool)


def test_get_tool_not_found():
    """Test getting a non-existent tool."""
    registry = ToolRegistry()
    assert registry.get_tool("nonexistent") is None


def test_for_request_registers_catalog_in_order(registry):
    """Test that the full catalog is registered in its fixed order."""
    assert [spec.name for spec in registry.list_specs()] == CATALOG
    assert [schema["name"] for schema in registry.get_schemas()] == CATALOG


def test_tools_bound_to_request_credentials(registry):
    tool = registry.get_tool("deleteBooking")
    assert isinstance(tool, DeleteBookingTool)
    assert tool.client.user_id == 1


def test_schemas_do_not_expose_credentials(registry):
    """Test that no schema mentions the caller's API key."""
    rendered = repr(registry.get_schemas())
    assert "cal_live_" not in rendered
    assert "apiKey" not in rendered


def test_validate_call_unknown_tool(registry):
    with pytest.raises(ToolSelectionError, match="Unknown tool"):
        registry.validate_call(ToolCall(id="1", name="bookEverything", arguments={}))


def test_validate_call_schema_violation(registry):
    call = ToolCall(id="1", name="getBookings", arguments={"startDate": "2030-01-01T00:00:00Z"})

    with pytest.raises(SchemaViolation) as exc_info:
        registry.validate_call(call)
    assert exc_info.value.field == "endDate"


def test_validate_call_returns_tool_and_arguments(registry):
    call = ToolCall(id="1", name="deleteBooking", arguments={"bookingId": "42"})
    tool, arguments = registry.validate_call(call)

    assert tool.get_name() == "deleteBooking"
    assert arguments == {"bookingId": "42"}


def test_tool_name_parse():
    assert ToolName.parse("updateBooking") == ToolName.UPDATE_BOOKING
    assert ToolName.parse("update_booking") is None
