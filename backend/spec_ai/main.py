"""
Spec AI - FastAPI Application.

Multi-agent chat backend: every question is answered by a team of agents
that gathers Japanese open data (weather, Tokyo open data, transport),
analyzes it, predicts trends and writes the final answer.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import CORS_ORIGINS, QWEN_API_KEY, QWEN_MODEL
from .errors import InvalidRequestError, invalid_request_handler
from .routers import chat, sources
from .utils.logging import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    if QWEN_API_KEY:
        logger.info(f"🚀 Server starting... LLM model: {QWEN_MODEL}")
    else:
        logger.warning("🚀 Server starting without QWEN_API_KEY, answers will be diagnostics only")
    yield
    logger.info("🛑 Server shutting down.")


app = FastAPI(title="Spec AI API", version="1.0.0", lifespan=lifespan)

# CORS Configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(InvalidRequestError, invalid_request_handler)

# Register Routers
app.include_router(chat.router)
app.include_router(sources.router)


@app.get("/api/health", tags=["Health"])
def health_check():
    return {"status": "ok"}
