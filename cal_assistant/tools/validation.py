"""Check tool-call arguments against a tool's declared parameter schema."""

from typing import Any, Dict

from ..errors import SchemaViolation
from ..timeutils import parse_utc
from .base import ToolSpec

JSON_TYPES = {
    "string": (str,),
    "integer": (int,),
    "number": (int, float),
    "boolean": (bool,),
    "object": (dict,),
    "array": (list,),
}


def _type_matches(expected: str, value: Any) -> bool:
    if expected in ("integer", "number") and isinstance(value, bool):
        return False
    return isinstance(value, JSON_TYPES.get(expected, (object,)))


def _check(tool_name: str, schema: Dict[str, Any], value: Any, path: str) -> None:
    expected = schema.get("type")
    if expected and not _type_matches(expected, value):
        raise SchemaViolation(tool_name, path, f"must be of type {expected}")

    if "enum" in schema and value not in schema["enum"]:
        allowed = ", ".join(str(v) for v in schema["enum"])
        raise SchemaViolation(tool_name, path, f"must be one of: {allowed}")

    if expected == "string" and schema.get("format") == "date-time":
        try:
            parse_utc(value)
        except ValueError:
            raise SchemaViolation(
                tool_name, path, "must be an ISO-8601 date-time (e.g., 2024-01-01T10:00:00Z)"
            )

    if expected in ("integer", "number"):
        if "minimum" in schema and value < schema["minimum"]:
            raise SchemaViolation(tool_name, path, f"must be at least {schema['minimum']}")
        if "maximum" in schema and value > schema["maximum"]:
            raise SchemaViolation(tool_name, path, f"must be at most {schema['maximum']}")

    if expected == "object":
        _check_object(tool_name, schema, value, path)
    elif expected == "array" and "items" in schema:
        for index, item in enumerate(value):
            _check(tool_name, schema["items"], item, f"{path}[{index}]")


def _check_object(tool_name: str, schema: Dict[str, Any], value: Dict[str, Any], path: str) -> None:
    properties = schema.get("properties", {})
    prefix = f"{path}." if path else ""

    for key in schema.get("required", []):
        if key not in value:
            raise SchemaViolation(tool_name, f"{prefix}{key}", "is required but missing")

    for key, item in value.items():
        if key not in properties:
            if schema.get("additionalProperties") is True:
                continue
            raise SchemaViolation(tool_name, f"{prefix}{key}", "is not a recognised parameter")
        _check(tool_name, properties[key], item, f"{prefix}{key}")


def validate_arguments(spec: ToolSpec, arguments: Any) -> Dict[str, Any]:
    """
    Validate arguments for a call to ``spec``.

    Every required key must be present, every present value must match its
    declared type, enum and format, and keys the schema does not declare are
    rejected.

    Returns:
        The arguments, unchanged

    Raises:
        SchemaViolation: Naming the first offending field
    """
    if arguments is None:
        arguments = {}
    if not isinstance(arguments, dict):
        raise SchemaViolation(spec.name, "tool_input", "must be a JSON object")

    _check_object(spec.name, spec.parameters, arguments, "")
    return arguments
