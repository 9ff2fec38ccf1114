"""Orchestration loop and oracle plumbing."""

from .oracle import LanguageOracle, PlainText, parse_proposal, parse_tool_call_text
from .prompts import build_directive, render_tool_catalog
from .scheduling_agent import AgentResponse, InvocationState, Outcome, SchedulingAgent

__all__ = [
    "LanguageOracle",
    "PlainText",
    "parse_proposal",
    "parse_tool_call_text",
    "build_directive",
    "render_tool_catalog",
    "AgentResponse",
    "InvocationState",
    "Outcome",
    "SchedulingAgent",
]
