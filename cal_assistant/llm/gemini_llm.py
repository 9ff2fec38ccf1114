"""Gemini LLM implementation."""

import logging
import uuid
from typing import Any, Dict, List, Optional

import google.genai as genai

from .base import BaseLLM, LLMResponse, ToolCall

logger = logging.getLogger(__name__)


class GeminiLLM(BaseLLM):
    """Gemini LLM implementation for Google Gemini models."""

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-pro",
        temperature: float = 0.0,
        max_tokens: int = 2048,
        safety_settings: Optional[dict] = None,
    ):
        """
        Initialize Gemini LLM.

        Args:
            api_key: Gemini API key
            model: Model name
            temperature: Sampling temperature
            max_tokens: Maximum tokens to generate
            safety_settings: Optional safety settings
        """
        super().__init__()
        self.model_name = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.safety_settings = safety_settings

        self.client = genai.Client(api_key=api_key)

    async def _generate_impl(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        tools: Optional[List[Dict[str, Any]]] = None,
        **kwargs,
    ) -> LLMResponse:
        """Generate a response from Gemini."""
        config = {
            "temperature": kwargs.get("temperature", self.temperature),
            "max_output_tokens": kwargs.get("max_tokens", self.max_tokens),
        }

        if system_prompt:
            config["system_instruction"] = system_prompt

        if self.safety_settings:
            config["safety_settings"] = self.safety_settings

        if tools:
            function_declarations = [
                {
                    "name": tool["name"],
                    "description": tool.get("description", ""),
                    "parameters": tool.get("parameters", {}),
                }
                for tool in tools
            ]
            config["tools"] = [{"function_declarations": function_declarations}]

        response = await self.client.aio.models.generate_content(
            model=self.model_name,
            contents=prompt,
            config=config,
        )

        tool_calls = []
        text = None

        if response.candidates:
            candidate = response.candidates[0]
            if candidate.content and candidate.content.parts:
                for part in candidate.content.parts:
                    if part.function_call:
                        fc = part.function_call
                        tool_calls.append(
                            ToolCall(
                                id=str(uuid.uuid4()),
                                name=fc.name,
                                arguments=dict(fc.args) if fc.args else {},
                            )
                        )
                    elif part.text:
                        text = (text or "") + part.text

        if text is None and not tool_calls:
            text = response.text

        logger.debug(f"Gemini response - tool calls: {len(tool_calls)}, text: {bool(text)}")

        return LLMResponse(
            text=text,
            tool_calls=tool_calls,
        )

    def get_model_name(self) -> str:
        """Get the model name."""
        return self.model_name
