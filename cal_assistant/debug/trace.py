"""What happened while answering one message.

A RequestTrace belongs to a single ``SchedulingAgent.run`` call. Nothing holds
on to it between calls: the agent creates it, hands it explicitly to the
oracle and the LLM backend for each request, and returns it on the response.
"""

import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

PREVIEW_CHARS = 200


def preview(text: Optional[str], limit: int = PREVIEW_CHARS) -> str:
    """Shorten text for a trace entry."""
    text = text or ""
    return text if len(text) <= limit else text[:limit] + "..."


class TraceEventType(Enum):
    """Kinds of things recorded for an invocation."""
    REQUEST = "request"
    RESPONSE = "response"
    STATE = "state"
    LLM_REQUEST = "llm_request"
    LLM_RESPONSE = "llm_response"
    VALIDATION = "validation"
    TOOL_CALL = "tool_call"
    ERROR = "error"


@dataclass
class TraceEvent:
    """One step of an invocation."""

    event_type: TraceEventType
    source: str
    target: str
    content_summary: str
    offset_ms: float  # since the invocation started
    duration_ms: Optional[float] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event_type": self.event_type.value,
            "source": self.source,
            "target": self.target,
            "content_summary": self.content_summary,
            "offset_ms": round(self.offset_ms, 3),
            "duration_ms": self.duration_ms,
            "metadata": self.metadata,
        }


@dataclass
class RequestTrace:
    """Ordered record of one invocation: states, oracle traffic, validation, tools."""

    trace_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    start_time: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    end_time: Optional[datetime] = None
    events: List[TraceEvent] = field(default_factory=list)
    _started: float = field(default_factory=time.monotonic, repr=False)
    _finished: Optional[float] = field(default=None, repr=False)

    def add_event(
        self,
        event_type: TraceEventType,
        source: str,
        target: str,
        content_summary: str,
        duration_ms: Optional[float] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> TraceEvent:
        event = TraceEvent(
            event_type=event_type,
            source=source,
            target=target,
            content_summary=content_summary,
            offset_ms=(time.monotonic() - self._started) * 1000,
            duration_ms=duration_ms,
            metadata=metadata or {},
        )
        self.events.append(event)
        return event

    def state(self, name: str, detail: str = "") -> TraceEvent:
        """Record a transition of the invocation state machine."""
        return self.add_event(TraceEventType.STATE, "agent", name, detail or name)

    def llm_request(
        self,
        source: str,
        model: str,
        prompt: str,
        has_directive: bool,
        tool_count: int,
    ) -> TraceEvent:
        return self.add_event(
            TraceEventType.LLM_REQUEST,
            source=source,
            target=model,
            content_summary=f"Oracle request (input length: {len(prompt)})",
            metadata={
                "input_preview": preview(prompt),
                "has_directive": has_directive,
                "tool_count": tool_count,
            },
        )

    def llm_response(
        self,
        source: str,
        model: str,
        text: Optional[str],
        tool_call_names: List[str],
        duration_ms: float,
    ) -> TraceEvent:
        if tool_call_names:
            summary = f"Oracle proposed {', '.join(tool_call_names)}"
        else:
            summary = f"Oracle answered in text (length: {len(text or '')})"
        return self.add_event(
            TraceEventType.LLM_RESPONSE,
            source=model,
            target=source,
            content_summary=summary,
            duration_ms=duration_ms,
            metadata={"tool_calls": tool_call_names, "text_preview": preview(text)},
        )

    def error(self, stage: str, message: str) -> TraceEvent:
        return self.add_event(TraceEventType.ERROR, source=stage, target="agent", content_summary=message)

    def events_of(self, event_type: TraceEventType) -> List[TraceEvent]:
        return [e for e in self.events if e.event_type == event_type]

    def states(self) -> List[str]:
        """State names in the order they were entered."""
        return [e.target for e in self.events_of(TraceEventType.STATE)]

    def complete(self) -> None:
        self.end_time = datetime.now(timezone.utc)
        self._finished = time.monotonic()

    def get_duration_ms(self) -> float:
        end = self._finished if self._finished is not None else time.monotonic()
        return (end - self._started) * 1000

    def to_dict(self) -> Dict[str, Any]:
        return {
            "trace_id": self.trace_id,
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat() if self.end_time else None,
            "duration_ms": self.get_duration_ms(),
            "states": self.states(),
            "event_count": len(self.events),
            "events": [e.to_dict() for e in self.events],
        }
