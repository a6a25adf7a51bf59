"""Request validation errors and their JSON rendering."""

import logging
from typing import Any, Dict

from fastapi import Request, status
from fastapi.responses import JSONResponse

from .schemas.chat import ErrorResponse

logger = logging.getLogger(__name__)

INVALID_REQUEST_FORMAT = "Invalid request format"


class InvalidRequestError(ValueError):
    """The request body could not be used. Rendered as a 400."""

    def __init__(self, message: str = INVALID_REQUEST_FORMAT, reason: str = ""):
        super().__init__(message)
        self.message = message
        self.reason = reason


async def read_json_object(request: Request) -> Dict[str, Any]:
    """Parse the request body as a JSON object or raise InvalidRequestError."""
    try:
        body = await request.json()
    except ValueError as e:
        raise InvalidRequestError(reason=f"body is not valid JSON: {e}") from e

    if not isinstance(body, dict):
        raise InvalidRequestError(reason="body is not a JSON object")
    return body


async def invalid_request_handler(request: Request, exc: InvalidRequestError) -> JSONResponse:
    logger.warning(f"Rejected {request.method} {request.url.path}: {exc.reason or exc.message}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=ErrorResponse(error=exc.message).model_dump(),
    )
