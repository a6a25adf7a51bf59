from .chat import (
    AgentTrace,
    ChatRequest,
    ChatResponse,
    ErrorResponse,
    GenerationOutcome,
    PipelineResult,
    SourceResponse,
)
from .sources import (
    AggregatedContext,
    RegionalInfoPayload,
    RegionalInfoResult,
    SourceId,
    SourceResult,
    TransportPayload,
    TransportResult,
    WeatherPayload,
    WeatherResult,
)
