"""Turn the oracle's output into exactly one tool call or a plain-text answer."""

import json
import logging
import re
import uuid
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Union

from ..errors import ToolSelectionError
from ..llm.base import BaseLLM, LLMResponse, ToolCall

if TYPE_CHECKING:
    from ..debug.trace import RequestTrace

logger = logging.getLogger(__name__)

CODE_FENCE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL)


@dataclass
class PlainText:
    """The oracle answered in prose instead of calling a tool."""

    text: str


Proposal = Union[ToolCall, PlainText]


def _decode_tool_input(value: Any) -> Any:
    # Some models send the arguments as a JSON string.
    if isinstance(value, str):
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            return value
    return {} if value is None else value


def parse_tool_call_text(text: str) -> Optional[ToolCall]:
    """
    Parse ``{"tool": <name>, "tool_input": <args>}`` from oracle text.

    Returns:
        ToolCall, or None if the text is prose with no JSON object in it

    Raises:
        ToolSelectionError: The text holds JSON that is malformed or not of
            the tool-call shape
    """
    candidate = text.strip()
    fenced = CODE_FENCE.match(candidate)
    if fenced:
        candidate = fenced.group(1)

    start, end = candidate.find("{"), candidate.rfind("}")
    if start == -1:
        return None
    if end < start:
        raise ToolSelectionError("Tool call JSON is incomplete", raw_output=text)

    try:
        data = json.loads(candidate[start:end + 1])
    except json.JSONDecodeError as e:
        raise ToolSelectionError(f"Tool call is not valid JSON: {e}", raw_output=text)

    if not isinstance(data, dict) or not isinstance(data.get("tool"), str):
        raise ToolSelectionError(
            'Expected a JSON object of the form {"tool": ..., "tool_input": ...}',
            raw_output=text,
        )

    return ToolCall(
        id=str(uuid.uuid4()),
        name=data["tool"],
        arguments=_decode_tool_input(data.get("tool_input")),
    )


def parse_proposal(response: LLMResponse) -> Proposal:
    """
    Reduce an oracle response to one tool call or a plain-text answer.

    Native function calls take precedence over text. More than one call is
    rejected, as is empty output.

    Raises:
        ToolSelectionError: The output cannot be read as a single tool call
    """
    if response.tool_calls:
        if len(response.tool_calls) > 1:
            names = ", ".join(tc.name for tc in response.tool_calls)
            raise ToolSelectionError(f"Expected exactly one tool call, got: {names}")
        call = response.tool_calls[0]
        return ToolCall(id=call.id, name=call.name, arguments=_decode_tool_input(call.arguments))

    text = (response.text or "").strip()
    if not text:
        raise ToolSelectionError("The oracle returned no output")

    call = parse_tool_call_text(text)
    if call is None:
        return PlainText(text=text)
    return call


class LanguageOracle:
    """Narrow boundary around the LLM: directive and input in, one proposal out."""

    def __init__(self, llm: BaseLLM):
        self.llm = llm

    async def propose(
        self,
        directive: str,
        message: str,
        tools: Optional[List[Dict[str, Any]]] = None,
        trace: Optional["RequestTrace"] = None,
    ) -> Proposal:
        response = await self.llm.generate(
            message, system_prompt=directive, tools=tools, trace=trace, source="oracle"
        )
        logger.debug(f"Oracle output - text: {response.text!r}, tool calls: {len(response.tool_calls)}")
        return parse_proposal(response)
