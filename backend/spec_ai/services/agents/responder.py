"""Response agent: writes the final answer shown to the user."""

from typing import Optional

from ...schemas.agents.trace import ExecutionTrace
from ...schemas.chat import GenerationOutcome
from ...schemas.sources import AggregatedContext
from .base import BaseAgent


def build_response_prompt(
    message: str,
    context: AggregatedContext,
    analysis: GenerationOutcome,
    prediction: GenerationOutcome,
) -> str:
    return f"""
ユーザーの質問: "{message}"

情報収集結果: {context.to_prompt_json()}
分析結果: {analysis.text}
予測結果: {prediction.text}

あなたは親切なAIアシスタントです。上記の情報を統合して、ユーザーに分かりやすく親切な回答を作成してください。

以下の形式で回答してください:
1. 質問への直接的な回答
2. 収集した政府公式データからの補足情報
3. 今後の予測や提案

日本語で自然な会話調で回答してください。
"""


class ResponseAgent(BaseAgent):
    """Synthesizes question, data, analysis and prediction into one answer."""

    @property
    def name(self) -> str:
        return "response_agent"

    async def run(
        self,
        message: str,
        context: AggregatedContext,
        analysis: GenerationOutcome,
        prediction: GenerationOutcome,
        trace: Optional[ExecutionTrace] = None,
    ) -> GenerationOutcome:
        prompt = build_response_prompt(message, context, analysis, prediction)
        return await self._generate(prompt, trace)
