"""Multi-agent chat pipeline.

Main entry point:
    process_chat_message(message) -> PipelineResult

Architecture:
    AgentPipeline
    ├── SourceAggregator → AggregatedContext (all sources in parallel)
    │   ├── WeatherAdapter
    │   ├── RegionalInfoAdapter
    │   └── TransportAdapter
    ├── AnalysisAgent (LLM)
    ├── PredictionAgent (LLM)
    └── ResponseAgent (LLM) → final answer
"""

from .orchestrator import AgentPipeline, get_pipeline, process_chat_message
from .aggregator import SourceAggregator
from .llm import GenerationClient, get_generation_client

__all__ = [
    "AgentPipeline",
    "get_pipeline",
    "process_chat_message",
    "SourceAggregator",
    "GenerationClient",
    "get_generation_client",
]
