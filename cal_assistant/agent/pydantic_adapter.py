"""Adapter that lets a pydantic_ai Agent drive our BaseLLM for multi-step runs."""

import json
import logging
from typing import List, Optional

from pydantic_ai.messages import (
    ModelMessage,
    ModelRequest,
    ModelResponse,
    RetryPromptPart,
    TextPart,
    ToolCallPart,
    ToolReturnPart,
    UserPromptPart,
)
from pydantic_ai.models import Model, ModelRequestParameters
from pydantic_ai.settings import ModelSettings
from pydantic_ai.usage import RequestUsage

from ..debug import RequestTrace
from ..llm.base import BaseLLM
from .oracle import PlainText, parse_proposal

logger = logging.getLogger(__name__)


class PydanticAIModelAdapter(Model):
    """Adapter to use our BaseLLM with pydantic_ai.

    One adapter serves one invocation; its trace is handed to the LLM with
    every request.
    """

    def __init__(
        self,
        llm: BaseLLM,
        system_prompt: Optional[str] = None,
        trace: Optional[RequestTrace] = None,
        agent_name: str = "agent",
    ):
        """
        Initialize adapter.

        Args:
            llm: BaseLLM instance
            system_prompt: Directive for the oracle
            trace: Trace of the invocation this adapter serves
            agent_name: Name the requests are attributed to in the trace
        """
        self.llm = llm
        self._system_prompt = system_prompt or ""
        self.trace = trace
        self.agent_name = agent_name
        super().__init__()

    @property
    def system(self) -> str:
        """Get system prompt."""
        return self._system_prompt

    @property
    def model_name(self) -> str:
        """Get model name."""
        return self.llm.get_model_name()

    @staticmethod
    def render_history(messages: List[ModelMessage]) -> str:
        """Flatten the run so far into one prompt: user input, calls made, results seen."""
        prompt_parts = []
        for msg in messages:
            if isinstance(msg, ModelRequest):
                for part in msg.parts:
                    if isinstance(part, UserPromptPart):
                        prompt_parts.append(str(part.content))
                    elif isinstance(part, ToolReturnPart):
                        prompt_parts.append(part.model_response_str())
                    elif isinstance(part, RetryPromptPart):
                        prompt_parts.append(part.model_response())
            elif isinstance(msg, ModelResponse):
                for part in msg.parts:
                    if isinstance(part, ToolCallPart):
                        prompt_parts.append(
                            json.dumps({"tool": part.tool_name, "tool_input": part.args_as_dict()})
                        )
                    elif isinstance(part, TextPart) and part.content:
                        prompt_parts.append(part.content)
        return "\n".join(prompt_parts)

    async def request(
        self,
        messages: List[ModelMessage],
        model_settings: Optional[ModelSettings] = None,
        model_request_parameters: Optional[ModelRequestParameters] = None,
    ) -> ModelResponse:
        """
        Make a request to the LLM.

        The tool catalog is already part of the directive, so tools are not
        passed natively; the reply is read with the same parser as the
        single-shot path.

        Raises:
            ToolSelectionError: The LLM produced unreadable tool-call output
        """
        user_prompt = self.render_history(messages)

        logger.debug("=" * 60)
        logger.debug("LLM REQUEST (multi-step)")
        logger.debug("-" * 40)
        logger.debug(user_prompt)
        logger.debug("=" * 60)

        response = await self.llm.generate(
            user_prompt, system_prompt=self._system_prompt, trace=self.trace, source=self.agent_name
        )
        proposal = parse_proposal(response)

        if isinstance(proposal, PlainText):
            parts = [TextPart(content=proposal.text)]
        else:
            parts = [
                ToolCallPart(
                    tool_name=proposal.name,
                    args=proposal.arguments,
                    tool_call_id=proposal.id,
                )
            ]

        return ModelResponse(
            parts=parts,
            usage=RequestUsage(input_tokens=0, output_tokens=0),
            model_name=self.model_name,
        )
