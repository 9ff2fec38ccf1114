"""Language oracle backends."""

from .base import BaseLLM, LLMResponse, ToolCall
from .ollama_llm import OllamaLLM
from .openai_llm import OpenAILLM
from .gemini_llm import GeminiLLM

__all__ = ["BaseLLM", "LLMResponse", "ToolCall", "OllamaLLM", "OpenAILLM", "GeminiLLM"]
