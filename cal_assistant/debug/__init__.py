"""Debug infrastructure for orchestration tracing."""

from .trace import TraceEventType, TraceEvent, RequestTrace

__all__ = [
    "TraceEventType",
    "TraceEvent",
    "RequestTrace",
]
