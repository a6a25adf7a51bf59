"""Orchestrator for the multi-agent chat pipeline.

The orchestrator drives a fixed chain of stages for every user message:
1. Gather: Aggregator fetches every data source concurrently
2. Analyze: AnalysisAgent reads the question and the gathered data
3. Predict: PredictionAgent works from the analysis text
4. Synthesize: ResponseAgent writes the final answer

Each stage takes the previous stage's output as an argument, so the calls
are strictly sequential: three generation passes plus one call per source,
every turn. Any exception escaping a stage switches to the repair path,
which answers with a static apology and performs no I/O.
"""

import logging
from enum import Enum
from typing import Any, Dict, Optional

from ...config import DatasetType, Region, WeatherArea
from ...schemas.agents.trace import ExecutionTrace, TraceEventType
from ...schemas.chat import AgentTrace, GenerationOutcome, PipelineResult
from ...schemas.sources import AggregatedContext, SourceId
from ..sources import SourceParams
from .aggregator import SourceAggregator
from .analysis import AnalysisAgent
from .llm import GenerationClient, get_generation_client
from .prediction import PredictionAgent
from .responder import ResponseAgent
from .tracing import format_trace_summary, trace_stage

logger = logging.getLogger(__name__)


class PipelineState(str, Enum):
    GATHER = "gather"
    ANALYZE = "analyze"
    PREDICT = "predict"
    SYNTHESIZE = "synthesize"
    DONE = "done"
    REPAIR = "repair"


class InvalidMessageError(ValueError):
    """The user message can't be processed (not a string, or blank)."""


# Same sources every turn; choosing them from the message is not done yet
DEFAULT_SOURCE_PARAMS: Dict[SourceId, SourceParams] = {
    SourceId.WEATHER: {"area": WeatherArea.TOKYO.value},
    SourceId.REGIONAL_INFO: {"type": DatasetType.FACILITIES.value, "limit": 5},
    SourceId.TRANSPORT: {"region": Region.KANTO.value},
}

PIPELINE_SOURCES = ["気象庁API", "東京都オープンデータ", "全国交通情報", "Qwen AI"]
REPAIR_SOURCES = ["修復AI", "フォールバックシステム"]

REPAIR_MESSAGE = """申し訳ございません。現在システムに一時的な問題が発生しています。

修復AIが以下を試行しました:
- API接続の再試行
- フォールバックシステムへの切り替え
- エラーログの記録

しばらく時間をおいてから再度お試しください。基本的な質問であれば、政府公式データを使って回答いたします。"""

SUMMARY_LENGTH = 200
TRUNCATION_MARKER = "..."


def summarize(text: str, limit: int = SUMMARY_LENGTH) -> str:
    """First ``limit`` characters of ``text`` plus the truncation marker."""
    return text[:limit] + TRUNCATION_MARKER


class AgentPipeline:
    """Coordinates one chat turn across the aggregator and the three agents.

    Flow:
    1. Validate the message and gather all sources (parallel)
    2. Analyze → Predict → Synthesize (sequential LLM passes)
    3. Assemble the PipelineResult, or the repair result on failure
    """

    def __init__(
        self,
        aggregator: Optional[SourceAggregator] = None,
        llm: Optional[GenerationClient] = None,
        source_params: Optional[Dict[SourceId, SourceParams]] = None,
    ):
        llm = llm or get_generation_client()
        self.aggregator = aggregator or SourceAggregator()
        self.analysis_agent = AnalysisAgent(llm)
        self.prediction_agent = PredictionAgent(llm)
        self.response_agent = ResponseAgent(llm)
        self.source_params = dict(source_params or DEFAULT_SOURCE_PARAMS)

    async def process_query(self, message: Any) -> PipelineResult:
        """Run the full pipeline for one user message.

        Args:
            message: The user's utterance

        Returns:
            PipelineResult; ``repaired=True`` if a stage raised
        """
        trace = ExecutionTrace(user_query=message if isinstance(message, str) else str(message))
        state = PipelineState.GATHER

        try:
            logger.info("[Pipeline] 🔍 Gathering source data...")
            context = await self._gather(message, trace)

            state = PipelineState.ANALYZE
            logger.info("[Pipeline] 📊 Analyzing gathered data...")
            analysis = await self._analyze(message, context, trace)

            state = PipelineState.PREDICT
            logger.info("[Pipeline] 🔮 Predicting trends...")
            prediction = await self._predict(analysis, trace)

            state = PipelineState.SYNTHESIZE
            logger.info("[Pipeline] ✍️ Writing the final response...")
            response = await self._synthesize(message, context, analysis, prediction, trace)

            result = self._done(context, analysis, prediction, response)

        except Exception as e:
            logger.exception(f"[Pipeline] 🔧 Failed during {state.value}, switching to repair: {e}")
            trace.add_event(
                TraceEventType.REPAIR_TRIGGERED,
                agent=PipelineState.REPAIR.value,
                data={"failed_state": state.value, "error": str(e)},
            )
            result = self._repair(e)

        trace.finalize(response=result.response_text)
        logger.debug(format_trace_summary(trace))
        return result

    # ----- stages -----------------------------------------------------

    async def _gather(self, message: Any, trace: ExecutionTrace) -> AggregatedContext:
        if not isinstance(message, str) or not message.strip():
            raise InvalidMessageError("message must be a non-empty string")

        with trace_stage(trace, PipelineState.GATHER.value) as stage:
            context = await self.aggregator.aggregate(self.source_params, trace)
            stage["sources"] = [s.value for s in context.source_ids()]
        return context

    async def _analyze(
        self,
        message: str,
        context: AggregatedContext,
        trace: ExecutionTrace,
    ) -> GenerationOutcome:
        with trace_stage(trace, PipelineState.ANALYZE.value) as stage:
            analysis = await self.analysis_agent.run(message, context, trace)
            stage["failed"] = analysis.failed
        return analysis

    async def _predict(
        self,
        analysis: GenerationOutcome,
        trace: ExecutionTrace,
    ) -> GenerationOutcome:
        with trace_stage(trace, PipelineState.PREDICT.value) as stage:
            prediction = await self.prediction_agent.run(analysis, trace)
            stage["failed"] = prediction.failed
        return prediction

    async def _synthesize(
        self,
        message: str,
        context: AggregatedContext,
        analysis: GenerationOutcome,
        prediction: GenerationOutcome,
        trace: ExecutionTrace,
    ) -> GenerationOutcome:
        with trace_stage(trace, PipelineState.SYNTHESIZE.value) as stage:
            response = await self.response_agent.run(message, context, analysis, prediction, trace)
            stage["failed"] = response.failed
        return response

    # ----- terminal states --------------------------------------------

    def _done(
        self,
        context: AggregatedContext,
        analysis: GenerationOutcome,
        prediction: GenerationOutcome,
        response: GenerationOutcome,
    ) -> PipelineResult:
        return PipelineResult(
            response_text=response.text,
            sources=list(PIPELINE_SOURCES),
            agent_trace=AgentTrace(
                information=context,
                analysis_summary=summarize(analysis.text),
                prediction_summary=summarize(prediction.text),
            ),
            repaired=False,
        )

    def _repair(self, error: Exception) -> PipelineResult:
        """Static apology result. Static strings only, no I/O."""
        return PipelineResult(
            response_text=REPAIR_MESSAGE,
            sources=list(REPAIR_SOURCES),
            agent_trace=AgentTrace(error=f"{type(error).__name__}: {error}"),
            repaired=True,
        )


# Global pipeline instance
_pipeline: Optional[AgentPipeline] = None


def get_pipeline() -> AgentPipeline:
    """Get or create the global pipeline instance."""
    global _pipeline
    if _pipeline is None:
        _pipeline = AgentPipeline()
    return _pipeline


async def process_chat_message(message: str) -> PipelineResult:
    """Main entry point for chat messages.

    Args:
        message: User's message

    Returns:
        PipelineResult for the chat endpoint to serialize
    """
    pipeline = get_pipeline()
    return await pipeline.process_query(message)
