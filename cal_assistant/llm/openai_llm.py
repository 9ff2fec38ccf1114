"""OpenAI LLM implementation."""

import json
import logging
from typing import Any, Dict, List, Optional

from openai import AsyncOpenAI

from .base import BaseLLM, LLMResponse, ToolCall

logger = logging.getLogger(__name__)


class OpenAILLM(BaseLLM):
    """OpenAI LLM implementation for ChatGPT/GPT models."""

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-3.5-turbo",
        temperature: float = 0.0,
        max_tokens: int = 2048,
        organization_id: Optional[str] = None,
    ):
        """
        Initialize OpenAI LLM.

        Args:
            api_key: OpenAI API key
            model: Model name (e.g., "gpt-3.5-turbo", "gpt-4")
            temperature: Sampling temperature
            max_tokens: Maximum tokens to generate
            organization_id: Optional organization ID
        """
        super().__init__()
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens

        self.client = AsyncOpenAI(
            api_key=api_key,
            organization=organization_id,
        )

    async def _generate_impl(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        tools: Optional[List[Dict[str, Any]]] = None,
        **kwargs,
    ) -> LLMResponse:
        """
        Generate a response from OpenAI.

        When tools are given the model may answer with at most one native
        function call; otherwise the directive asks for a JSON tool call in
        the message text.
        """
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        api_params = {
            "model": kwargs.get("model", self.model),
            "messages": messages,
            "temperature": kwargs.get("temperature", self.temperature),
            "max_tokens": kwargs.get("max_tokens", self.max_tokens),
        }

        if tools:
            api_params["tools"] = [
                {"type": "function", "function": tool} for tool in tools
            ]
            api_params["parallel_tool_calls"] = False

        response = await self.client.chat.completions.create(**api_params)
        message = response.choices[0].message

        tool_calls = []
        for tc in message.tool_calls or []:
            try:
                arguments = json.loads(tc.function.arguments or "{}")
            except json.JSONDecodeError:
                logger.warning(f"OpenAI returned unparsable arguments for {tc.function.name}")
                arguments = tc.function.arguments
            tool_calls.append(
                ToolCall(
                    id=tc.id,
                    name=tc.function.name,
                    arguments=arguments,
                )
            )

        return LLMResponse(
            text=message.content,
            tool_calls=tool_calls,
        )

    def get_model_name(self) -> str:
        """Get the model name."""
        return self.model
