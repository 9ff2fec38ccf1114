"""Orchestration loop: message in, one validated tool call, reply out."""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic_ai import Agent, Tool
from pydantic_ai.exceptions import UnexpectedModelBehavior, UsageLimitExceeded
from pydantic_ai.usage import UsageLimits

from ..config.config_schema import AppConfig
from ..context.models import RequestContext
from ..debug import RequestTrace, TraceEventType
from ..errors import OrchestrationTimeout, SchemaViolation, ToolSelectionError
from ..llm.base import BaseLLM, ToolCall
from ..tools.base import ToolResult
from ..tools.registry import ToolRegistry
from .oracle import LanguageOracle, PlainText
from .prompts import build_directive
from .pydantic_adapter import PydanticAIModelAdapter

logger = logging.getLogger(__name__)

SELECTION_REPLY = (
    "I'm sorry, I couldn't work out what you would like me to do. Could you "
    "rephrase your request, for example \"What times am I free tomorrow?\" or "
    "\"Book a chat with @username at 3pm on Wednesday\"?"
)
FAILURE_REPLY = (
    "I'm having trouble processing your request right now. Please try again later."
)
TIMEOUT_REPLY = (
    "I'm sorry, the scheduling service took too long to respond. "
    "Please try again in a moment."
)


class InvocationState(Enum):
    """States of one invocation."""

    AWAITING_TOOL_SELECTION = "awaiting_tool_selection"
    VALIDATING = "validating"
    EXECUTING = "executing"
    SELECTION_INVALID = "selection_invalid"
    SCHEMA_INVALID = "schema_invalid"
    DONE = "done"


class Outcome(str, Enum):
    """What the reply reports."""

    COMPLETED = "completed"
    PLAIN_TEXT = "plain_text"
    SELECTION_INVALID = "selection_invalid"
    SCHEMA_INVALID = "schema_invalid"
    IDENTITY_UNRESOLVED = "identity_unresolved"
    EXECUTION_FAILED = "execution_failed"
    TIMEOUT = "timeout"


CLARIFICATION_OUTCOMES = {
    Outcome.PLAIN_TEXT,
    Outcome.SELECTION_INVALID,
    Outcome.SCHEMA_INVALID,
    Outcome.IDENTITY_UNRESOLVED,
}


@dataclass
class AgentResponse:
    """Reply for one invocation, with what led to it."""

    text: str
    outcome: Outcome
    tool_calls: List[Dict[str, Any]] = field(default_factory=list)
    states: List[InvocationState] = field(default_factory=list)
    trace: Optional[RequestTrace] = None

    @property
    def follow_up(self) -> bool:
        """Whether the reply asks the human for more information."""
        return self.outcome in CLARIFICATION_OUTCOMES


def schema_violation_reply(e: SchemaViolation) -> str:
    return (
        f"I couldn't run {e.tool_name} because the parameter '{e.field}' {e.reason}. "
        "Could you give me that detail?"
    )


def result_reply(result: ToolResult) -> str:
    if result.success:
        return result.message or "Done."
    if isinstance(result.data, dict) and "outcome" in result.data:
        return result.error or FAILURE_REPLY
    return f"I'm sorry, I couldn't complete that. {result.error or ''}".strip()


def result_outcome(result: ToolResult) -> Outcome:
    if result.success:
        return Outcome.COMPLETED
    if isinstance(result.data, dict) and result.data.get("outcome") == "identity_unresolved":
        return Outcome.IDENTITY_UNRESOLVED
    return Outcome.EXECUTION_FAILED


class _Invocation:
    """Mutable bookkeeping for one run; never shared between runs."""

    def __init__(self, trace: RequestTrace):
        self.trace = trace
        self.states: List[InvocationState] = []
        self.tool_calls: List[Dict[str, Any]] = []

    def enter(self, state: InvocationState, detail: str = "") -> None:
        self.states.append(state)
        self.trace.state(state.value, detail)

    def finish(self, text: str, outcome: Outcome) -> AgentResponse:
        self.enter(InvocationState.DONE, outcome.value)
        self.trace.add_event(
            TraceEventType.RESPONSE,
            source="agent",
            target="user",
            content_summary=f"Reply ({outcome.value}, length: {len(text)})",
        )
        self.trace.complete()
        return AgentResponse(
            text=text,
            outcome=outcome,
            tool_calls=self.tool_calls,
            states=self.states,
            trace=self.trace,
        )


class SchedulingAgent:
    """Maps a free-text scheduling request onto the closed tool catalog."""

    def __init__(
        self,
        llm: BaseLLM,
        config: AppConfig,
        transport=None,
    ):
        """
        Initialize the agent.

        Args:
            llm: Language oracle backend
            config: Application configuration
            transport: Optional httpx transport for provider calls (tests)
        """
        self.llm = llm
        self.config = config
        self.transport = transport
        self.oracle = LanguageOracle(llm)
        self.timeout = config.agent.timeout_seconds
        self.max_steps = config.agent.max_steps

    async def _execute(
        self,
        registry: ToolRegistry,
        call: ToolCall,
        context: RequestContext,
        invocation: _Invocation,
    ) -> ToolResult:
        """
        Validate and run one call.

        Raises:
            ToolSelectionError: Unknown tool
            SchemaViolation: Invalid arguments; the tool is not executed
            OrchestrationTimeout: The tool missed the deadline
        """
        invocation.enter(InvocationState.VALIDATING, call.name)
        try:
            tool, arguments = registry.validate_call(call)
        except (ToolSelectionError, SchemaViolation) as e:
            invocation.trace.add_event(
                TraceEventType.VALIDATION,
                source="agent",
                target=call.name,
                content_summary=f"Rejected: {e}",
            )
            raise

        invocation.enter(InvocationState.EXECUTING, call.name)
        started = time.time()
        try:
            result = await asyncio.wait_for(tool.execute(context, **arguments), self.timeout)
        except asyncio.TimeoutError:
            raise OrchestrationTimeout(call.name, self.timeout)

        invocation.trace.add_event(
            TraceEventType.TOOL_CALL,
            source=call.name,
            target="agent",
            content_summary=f"Tool result: {'Success' if result.success else 'Error'}",
            duration_ms=(time.time() - started) * 1000,
            metadata={"success": result.success},
        )
        invocation.tool_calls.append(
            {"tool": call.name, "arguments": arguments, "success": result.success}
        )
        return result

    async def run(self, message: str, context: RequestContext) -> AgentResponse:
        """
        Handle one incoming message.

        Never raises: every failure becomes a reply whose outcome says what
        went wrong. Only a TIMEOUT outcome is worth retrying.

        Args:
            message: Free-text email or chat message
            context: Caller, roster and credentials for this request

        Returns:
            AgentResponse with the reply text
        """
        invocation = _Invocation(RequestTrace())
        invocation.trace.add_event(
            TraceEventType.REQUEST,
            source="user",
            target="agent",
            content_summary=f"Message from @{context.caller.username} (length: {len(message)})",
        )

        logger.debug("=" * 60)
        logger.debug("AGENT REQUEST")
        logger.debug(f"Caller: {context.caller.id} (@{context.caller.username})")
        logger.debug(f"References: {len(context.references)}")
        logger.debug(message)
        logger.debug("=" * 60)

        try:
            registry = ToolRegistry.for_request(self.config, context, self.transport)
            directive = build_directive(
                context, registry.list_specs(), assistant_name=self.config.email.assistant_name
            )
            logger.debug(f"Directive:\n{directive}")

            if self.max_steps > 1:
                return await self._run_multi_step(message, context, registry, directive, invocation)
            return await self._run_single_shot(message, context, registry, directive, invocation)
        except OrchestrationTimeout as e:
            logger.warning(f"Invocation timed out: {e}")
            invocation.trace.error(e.stage, str(e))
            return invocation.finish(TIMEOUT_REPLY, Outcome.TIMEOUT)
        except Exception as e:
            logger.error(f"Error during scheduling request: {e}", exc_info=True)
            invocation.trace.error("agent", str(e))
            return invocation.finish(FAILURE_REPLY, Outcome.EXECUTION_FAILED)

    async def _run_single_shot(
        self,
        message: str,
        context: RequestContext,
        registry: ToolRegistry,
        directive: str,
        invocation: _Invocation,
    ) -> AgentResponse:
        invocation.enter(InvocationState.AWAITING_TOOL_SELECTION)
        try:
            proposal = await asyncio.wait_for(
                self.oracle.propose(
                    directive, message, tools=registry.get_schemas(), trace=invocation.trace
                ),
                self.timeout,
            )
        except asyncio.TimeoutError:
            raise OrchestrationTimeout("oracle", self.timeout)
        except ToolSelectionError as e:
            logger.warning(f"Tool selection failed: {e}")
            invocation.enter(InvocationState.SELECTION_INVALID, str(e))
            return invocation.finish(SELECTION_REPLY, Outcome.SELECTION_INVALID)

        if isinstance(proposal, PlainText):
            return invocation.finish(proposal.text, Outcome.PLAIN_TEXT)

        try:
            result = await self._execute(registry, proposal, context, invocation)
        except ToolSelectionError as e:
            logger.warning(f"Tool selection failed: {e}")
            invocation.enter(InvocationState.SELECTION_INVALID, str(e))
            return invocation.finish(SELECTION_REPLY, Outcome.SELECTION_INVALID)
        except SchemaViolation as e:
            logger.warning(f"Schema violation: {e}")
            invocation.enter(InvocationState.SCHEMA_INVALID, str(e))
            return invocation.finish(schema_violation_reply(e), Outcome.SCHEMA_INVALID)

        if not result.success:
            logger.warning(f"Tool {proposal.name} failed: {result.error}")
        return invocation.finish(result_reply(result), result_outcome(result))

    async def _run_multi_step(
        self,
        message: str,
        context: RequestContext,
        registry: ToolRegistry,
        directive: str,
        invocation: _Invocation,
    ) -> AgentResponse:
        """
        Call, observe, call again until the oracle answers in prose.

        Each call is validated exactly like the single-shot path; rejections
        and failures are handed back to the oracle as tool output.
        """

        def make_tool(name: str):
            async def run_tool(**kwargs) -> str:
                call = ToolCall(id=name, name=name, arguments=kwargs)
                try:
                    result = await self._execute(registry, call, context, invocation)
                except SchemaViolation as e:
                    return f"Error from tool '{name}':\n{schema_violation_reply(e)}"
                if result.success:
                    return f"Result from tool '{name}':\n" + (result.message or "Success (no output)")
                return f"Error from tool '{name}':\n" + (result.error or "Unknown error")

            run_tool.__name__ = name
            return run_tool

        tools = [
            Tool.from_schema(
                make_tool(spec.name),
                name=spec.name,
                description=spec.description,
                json_schema=spec.parameters,
            )
            for spec in registry.list_specs()
        ]
        model = PydanticAIModelAdapter(
            self.llm, system_prompt=directive, trace=invocation.trace, agent_name="agent"
        )
        agent = Agent(model=model, tools=tools)

        invocation.enter(InvocationState.AWAITING_TOOL_SELECTION)
        try:
            result = await asyncio.wait_for(
                agent.run(
                    user_prompt=message,
                    usage_limits=UsageLimits(request_limit=self.max_steps + 1),
                ),
                self.timeout * (self.max_steps + 1),
            )
        except asyncio.TimeoutError:
            raise OrchestrationTimeout("oracle", self.timeout * (self.max_steps + 1))
        except ToolSelectionError as e:
            logger.warning(f"Tool selection failed: {e}")
            invocation.enter(InvocationState.SELECTION_INVALID, str(e))
            return invocation.finish(SELECTION_REPLY, Outcome.SELECTION_INVALID)
        except (UsageLimitExceeded, UnexpectedModelBehavior) as e:
            logger.warning(f"Multi-step run stopped early: {e}")
            return invocation.finish(self._partial_summary(invocation), Outcome.EXECUTION_FAILED)

        if any(not call["success"] for call in invocation.tool_calls):
            outcome = Outcome.EXECUTION_FAILED
        elif invocation.tool_calls:
            outcome = Outcome.COMPLETED
        else:
            outcome = Outcome.PLAIN_TEXT
        return invocation.finish(result.output, outcome)

    @staticmethod
    def _partial_summary(invocation: _Invocation) -> str:
        if not invocation.tool_calls:
            return FAILURE_REPLY
        done = [c["tool"] for c in invocation.tool_calls if c["success"]]
        failed = [c["tool"] for c in invocation.tool_calls if not c["success"]]
        parts = []
        if done:
            parts.append(f"I completed: {', '.join(done)}.")
        if failed:
            parts.append(f"These steps failed: {', '.join(failed)}.")
        parts.append("Nothing that succeeded has been undone. Let me know how you'd like to continue.")
        return " ".join(parts)
