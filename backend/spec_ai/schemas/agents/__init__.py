"""Agent system schemas."""

from .trace import (
    TraceEventType,
    TraceEvent,
    ExecutionTrace,
)

__all__ = [
    "TraceEventType",
    "TraceEvent",
    "ExecutionTrace",
]
