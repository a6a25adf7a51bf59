"""Pytest configuration and fixtures."""

import asyncio
from typing import AsyncGenerator, Callable, List, Optional

import httpx
import pytest

from spec_ai.schemas.chat import GenerationOutcome
from spec_ai.schemas.sources import (
    RegionalInfoPayload,
    RegionalInfoResult,
    SourceId,
    TransportPayload,
    TransportResult,
    WeatherPayload,
    WeatherResult,
)
from spec_ai.services.agents.aggregator import SourceAggregator
from spec_ai.services.agents.orchestrator import AgentPipeline
from spec_ai.services.sources import RegionalInfoAdapter, TransportAdapter


class StubAdapter:
    """Source adapter double: returns a fixed result, or raises, after an optional delay."""

    def __init__(self, source_id: SourceId, result=None, error: Optional[Exception] = None, delay: float = 0):
        self.source_id = source_id
        self.result = result
        self.error = error
        self.delay = delay
        self.calls: List[dict] = []

    async def fetch(self, params=None):
        self.calls.append(dict(params or {}))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.result


class EchoLLM:
    """Generation client double that answers with its own prompt."""

    def __init__(self):
        self.prompts: List[str] = []

    async def generate(self, prompt: str) -> GenerationOutcome:
        self.prompts.append(prompt)
        return GenerationOutcome(text=prompt)


class ScriptedLLM:
    """Generation client double that replays a list of outcomes (or raises them)."""

    def __init__(self, outcomes):
        self.outcomes = list(outcomes)
        self.prompts: List[str] = []

    async def generate(self, prompt: str) -> GenerationOutcome:
        self.prompts.append(prompt)
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class RecordingTransport(httpx.MockTransport):
    """httpx MockTransport that remembers every request it served."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]):
        self.requests: List[httpx.Request] = []

        def recording_handler(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(recording_handler)


# Source results
@pytest.fixture
def tokyo_weather_result() -> WeatherResult:
    """Successful weather result for Tokyo, sunny today."""
    return WeatherResult(
        succeeded=True,
        payload=WeatherPayload(area="東京", forecast={"today": {"weather": "晴れ"}}),
    )


@pytest.fixture
def regional_fallback_result() -> RegionalInfoResult:
    adapter = RegionalInfoAdapter()
    return RegionalInfoResult(
        succeeded=False,
        payload=adapter.fallback_payload({}),
        note="東京都APIに接続できないため、サンプルデータを表示しています [network_error]",
    )


@pytest.fixture
def transport_fallback_result() -> TransportResult:
    adapter = TransportAdapter()
    return TransportResult(
        succeeded=False,
        payload=adapter.fallback_payload({}),
        note="交通情報APIに接続できないため、サンプルデータを表示 [http_status 503]",
    )


@pytest.fixture
def regional_success_result() -> RegionalInfoResult:
    return RegionalInfoResult(
        succeeded=True,
        payload=RegionalInfoPayload(total_count=1, items=[{"name": "東京都庁"}]),
    )


@pytest.fixture
def transport_success_result() -> TransportResult:
    return TransportResult(
        succeeded=True,
        payload=TransportPayload(region="kanto", major_stations=["東京", "新宿"]),
    )


@pytest.fixture
def stub_adapters(tokyo_weather_result, regional_fallback_result, transport_fallback_result):
    """Weather live, the other two already on their fallback payloads."""
    return {
        SourceId.WEATHER: StubAdapter(SourceId.WEATHER, tokyo_weather_result),
        SourceId.REGIONAL_INFO: StubAdapter(SourceId.REGIONAL_INFO, regional_fallback_result),
        SourceId.TRANSPORT: StubAdapter(SourceId.TRANSPORT, transport_fallback_result),
    }


# LLM doubles
@pytest.fixture
def echo_llm() -> EchoLLM:
    return EchoLLM()


@pytest.fixture
def scripted_llm_factory():
    return ScriptedLLM


@pytest.fixture
def recording_transport_factory():
    """Factory for httpx transports that record requests."""
    return RecordingTransport


@pytest.fixture
def stub_adapter_factory():
    return StubAdapter


# Pipeline
@pytest.fixture
def pipeline(stub_adapters, echo_llm) -> AgentPipeline:
    """Pipeline over stub sources and the echoing LLM."""
    return AgentPipeline(aggregator=SourceAggregator(stub_adapters), llm=echo_llm)


# FastAPI test client
@pytest.fixture
async def api_client(pipeline, stub_adapters) -> AsyncGenerator[httpx.AsyncClient, None]:
    """Async HTTP client against the app, with pipeline and sources stubbed."""
    from spec_ai.main import app
    from spec_ai.services.agents import get_pipeline
    from spec_ai.services.sources import get_source_adapters

    app.dependency_overrides[get_pipeline] = lambda: pipeline
    app.dependency_overrides[get_source_adapters] = lambda: stub_adapters
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
