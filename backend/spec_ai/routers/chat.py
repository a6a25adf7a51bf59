from fastapi import APIRouter, Depends, Request
from pydantic import ValidationError

from ..errors import InvalidRequestError, read_json_object
from ..schemas.chat import ChatRequest, ChatResponse, ErrorResponse
from ..services.agents import AgentPipeline, get_pipeline

router = APIRouter(prefix="/api", tags=["Chat"])


@router.post(
    "/chat",
    response_model=ChatResponse,
    responses={400: {"model": ErrorResponse}},
)
async def chat(request: Request, pipeline: AgentPipeline = Depends(get_pipeline)):
    """
    Ask the multi-agent assistant a question.

    Body: `{"message": "今日の天気は？"}`

    The message goes through the whole agent team once:
    - 情報収集: weather, Tokyo open data and transport status, fetched in parallel
    - 分析 → 予測 → 回答生成: three LLM passes, each reading the previous one

    Always answers 200 with `success: true` once the body is valid. If the
    pipeline itself fails, `data.repaired` is true and `data.response_text`
    is a fixed apology. A missing or non-string `message` is a 400.
    """
    body = await read_json_object(request)
    try:
        chat_request = ChatRequest.model_validate(body)
    except ValidationError as e:
        raise InvalidRequestError(reason=f"message is missing or not a string ({e.error_count()} errors)") from e

    result = await pipeline.process_query(chat_request.message)
    return ChatResponse(data=result)
