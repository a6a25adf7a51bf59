"""Execution trace schemas for debugging and observability."""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field
import uuid


class TraceEventType(str, Enum):
    """Types of events recorded during a pipeline run."""
    SOURCES_GATHERED = "sources_gathered"
    STAGE_STARTED = "stage_started"
    STAGE_COMPLETED = "stage_completed"
    STAGE_FAILED = "stage_failed"
    LLM_CALL = "llm_call"
    REPAIR_TRIGGERED = "repair_triggered"


class TraceEvent(BaseModel):
    """A single event in the execution trace."""
    timestamp: datetime = Field(default_factory=datetime.now)
    event_type: TraceEventType
    agent: Optional[str] = None
    data: Dict[str, Any] = Field(default_factory=dict)
    duration_ms: Optional[float] = None

    class Config:
        use_enum_values = True


class ExecutionTrace(BaseModel):
    """Complete trace of one chat turn.

    Internal only; a summary is logged when the turn finishes.
    """
    trace_id: str = Field(default_factory=lambda: str(uuid.uuid4())[:12])
    user_query: str
    events: List[TraceEvent] = Field(default_factory=list)
    total_duration_ms: float = 0
    llm_calls: int = 0
    llm_failures: int = 0
    stages_completed: int = 0
    sources_succeeded: int = 0
    sources_missing: int = 0
    final_response: Optional[str] = None
    repaired: bool = False
    started_at: datetime = Field(default_factory=datetime.now)

    def add_event(
        self,
        event_type: TraceEventType,
        agent: Optional[str] = None,
        data: Optional[Dict[str, Any]] = None,
        duration_ms: Optional[float] = None,
    ) -> None:
        """Add an event to the trace."""
        data = data or {}
        self.events.append(TraceEvent(
            event_type=event_type,
            agent=agent,
            data=data,
            duration_ms=duration_ms,
        ))

        if event_type == TraceEventType.LLM_CALL:
            self.llm_calls += 1
            if data.get("failed"):
                self.llm_failures += 1
        elif event_type == TraceEventType.STAGE_COMPLETED:
            self.stages_completed += 1
        elif event_type == TraceEventType.REPAIR_TRIGGERED:
            self.repaired = True

    def finalize(self, response: Optional[str] = None) -> None:
        """Finalize the trace with the text sent back to the user."""
        self.final_response = response
        self.total_duration_ms = (datetime.now() - self.started_at).total_seconds() * 1000
