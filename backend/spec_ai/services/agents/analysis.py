"""Analysis agent: first generation pass over the gathered data."""

from typing import Optional

from ...schemas.agents.trace import ExecutionTrace
from ...schemas.chat import GenerationOutcome
from ...schemas.sources import AggregatedContext
from .base import BaseAgent


def build_analysis_prompt(message: str, context: AggregatedContext) -> str:
    return f"""
ユーザーの質問: "{message}"

収集した情報:
{context.to_prompt_json()}

あなたは専門的な分析エージェントです。収集した情報を詳細に分析し、パターンや傾向を見つけてください。
分析結果を簡潔にまとめてください。
"""


class AnalysisAgent(BaseAgent):
    """Finds patterns and trends in the aggregated source data."""

    @property
    def name(self) -> str:
        return "analysis_agent"

    async def run(
        self,
        message: str,
        context: AggregatedContext,
        trace: Optional[ExecutionTrace] = None,
    ) -> GenerationOutcome:
        return await self._generate(build_analysis_prompt(message, context), trace)
