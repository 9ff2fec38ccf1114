"""Backend-neutral interface to the language oracle.

Backends are shared by every invocation of an agent, so they keep no
per-request state: the trace of the invocation being served is passed with
each ``generate`` call.
"""

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, List, Optional

if TYPE_CHECKING:
    from ..debug.trace import RequestTrace


@dataclass
class ToolCall:
    """A single structured tool call proposed by the oracle."""

    id: str
    name: str
    arguments: Dict[str, Any]


@dataclass
class LLMResponse:
    """Oracle output: free text, native tool calls, or both."""

    text: Optional[str] = None
    tool_calls: List[ToolCall] = field(default_factory=list)


class BaseLLM(ABC):
    """A chat model that can be offered the tool catalog."""

    async def generate(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        tools: Optional[List[Dict[str, Any]]] = None,
        trace: Optional["RequestTrace"] = None,
        source: str = "oracle",
        **kwargs,
    ) -> LLMResponse:
        """
        Ask the model once.

        Args:
            prompt: The message, or the rendered history in multi-step runs
            system_prompt: Directive for the model
            tools: Tool schemas to offer as native function calls
            trace: Trace of the invocation this request belongs to
            source: Component name the request is attributed to in the trace
            **kwargs: Backend-specific parameters

        Returns:
            LLMResponse with text and/or tool calls
        """
        model = self.get_model_name()
        if trace is not None:
            trace.llm_request(source, model, prompt, bool(system_prompt), len(tools or []))

        started = time.monotonic()
        try:
            response = await self._generate_impl(prompt, system_prompt, tools, **kwargs)
        except Exception as e:
            if trace is not None:
                trace.error(model, f"Oracle request failed: {e}")
            raise

        if trace is not None:
            trace.llm_response(
                source,
                model,
                response.text,
                [call.name for call in response.tool_calls],
                (time.monotonic() - started) * 1000,
            )
        return response

    @abstractmethod
    async def _generate_impl(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        tools: Optional[List[Dict[str, Any]]] = None,
        **kwargs,
    ) -> LLMResponse:
        """Backend call behind generate()."""

    @abstractmethod
    def get_model_name(self) -> str:
        pass

    async def validate(self) -> None:
        """
        Check that the backend answers at all.

        Raises:
            Exception: Whatever the backend raised
        """
        await self.generate("Hello", system_prompt="Respond with just 'Hi'.", source="check")
