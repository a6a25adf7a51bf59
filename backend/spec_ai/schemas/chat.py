from datetime import datetime, timezone
from typing import Any, List, Optional

from pydantic import BaseModel, Field, StrictStr

from .sources import AggregatedContext


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ChatRequest(BaseModel):
    """Incoming chat message. Non-string or empty messages are rejected."""
    message: StrictStr = Field(..., min_length=1)


class GenerationOutcome(BaseModel):
    """Result of one generation pass.

    ``failed=True`` still carries human-readable text (the diagnostic),
    so the next stage always has a string to work with.
    """
    text: str
    failed: bool = False

    class Config:
        frozen = True


class AgentTrace(BaseModel):
    """What the agents saw and concluded, trimmed for the client."""
    information: AggregatedContext = Field(default_factory=AggregatedContext)
    analysis_summary: str = ""
    prediction_summary: str = ""
    timestamp: datetime = Field(default_factory=_utcnow)
    error: Optional[str] = None  # diagnostics only, set on the repair path


class PipelineResult(BaseModel):
    response_text: str
    sources: List[str]
    agent_trace: AgentTrace
    repaired: bool = False


class ChatResponse(BaseModel):
    success: bool = True
    data: PipelineResult
    timestamp: datetime = Field(default_factory=_utcnow)


class SourceResponse(BaseModel):
    """Envelope for the standalone source endpoints. Always a 200."""
    success: bool = True
    data: Any
    source: str
    note: Optional[str] = None
    timestamp: datetime = Field(default_factory=_utcnow)


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
