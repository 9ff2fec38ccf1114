"""Tool system module."""

from .base import BaseTool, ToolName, ToolResult, ToolSpec
from .registry import ToolRegistry
from .validation import validate_arguments

__all__ = [
    "BaseTool",
    "ToolName",
    "ToolResult",
    "ToolSpec",
    "ToolRegistry",
    "validate_arguments",
]
