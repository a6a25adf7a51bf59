"""Prediction agent: forecasts trends from the analysis text."""

from typing import Optional

from ...schemas.agents.trace import ExecutionTrace
from ...schemas.chat import GenerationOutcome
from .base import BaseAgent


def build_prediction_prompt(analysis: GenerationOutcome) -> str:
    return f"""
分析結果: {analysis.text}

この分析結果に基づいて、今後の予測や傾向を予想してください。
特に日本の政府データや地域情報を踏まえた予測をお願いします。
"""


class PredictionAgent(BaseAgent):
    """Turns the analysis into forward-looking predictions.

    A failed analysis is passed through as-is; its diagnostic text becomes
    part of the prompt instead of stopping the chain.
    """

    @property
    def name(self) -> str:
        return "prediction_agent"

    async def run(
        self,
        analysis: GenerationOutcome,
        trace: Optional[ExecutionTrace] = None,
    ) -> GenerationOutcome:
        return await self._generate(build_prediction_prompt(analysis), trace)
