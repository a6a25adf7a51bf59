"""Unit tests for the data source adapters."""

import json

import httpx
import pytest
from pydantic import ValidationError

from spec_ai.config import AREA_CODES, DATASETS, MAJOR_STATIONS, DatasetType, Region, WeatherArea
from spec_ai.schemas.sources import DelayedLine, SourceId, WeatherPayload, WeatherResult
from spec_ai.services.sources import (
    RegionalInfoAdapter,
    TransportAdapter,
    WeatherAdapter,
    with_fallback,
)
from spec_ai.services.sources.regional import MAX_DATASET_LIMIT, parse_limit
from spec_ai.services.sources.transport import build_operation_status


JMA_FORECAST = [
    {
        "timeSeries": [
            {
                "timeDefines": ["2026-10-19T11:00:00+09:00", "2026-10-20T00:00:00+09:00"],
                "areas": [
                    {
                        "area": {"name": "東京地方", "code": "130010"},
                        "weatherCodes": ["100", "201"],
                        "weathers": ["晴れ", "くもり　時々　晴れ"],
                    }
                ],
            },
            {"timeDefines": [], "areas": []},
            {
                "timeDefines": ["2026-10-19T09:00:00+09:00", "2026-10-19T00:00:00+09:00"],
                "areas": [{"area": {"name": "東京"}, "temps": ["24", "15"]}],
            },
        ]
    }
]

JMA_OVERVIEW = {
    "reportDatetime": "2026-10-19T10:38:00+09:00",
    "text": "関東甲信地方は高気圧に覆われて晴れています。",
}


def jma_handler(request: httpx.Request) -> httpx.Response:
    if "overview_forecast" in request.url.path:
        return httpx.Response(200, json=JMA_OVERVIEW)
    return httpx.Response(200, json=JMA_FORECAST)


def connect_error_handler(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("connection refused", request=request)


def timeout_handler(request: httpx.Request) -> httpx.Response:
    raise httpx.ReadTimeout("timed out", request=request)


def unavailable_handler(request: httpx.Request) -> httpx.Response:
    return httpx.Response(503, text="Service Unavailable")


def garbage_handler(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, content=b"<html>not json</html>")


def wrong_shape_handler(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, json="just a string")


class TestWeatherAdapter:
    """Test suite for the JMA weather adapter."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_parses_forecast_and_overview(self, recording_transport_factory):
        transport = recording_transport_factory(jma_handler)
        adapter = WeatherAdapter(transport=transport)

        result = await adapter.fetch({"area": "tokyo"})

        assert result.succeeded is True
        assert result.source_id == "weather"
        assert result.note is None
        assert result.payload.area == "東京地方"
        assert result.payload.overview == JMA_OVERVIEW["text"]
        assert result.payload.publish_time == JMA_OVERVIEW["reportDatetime"]
        assert result.payload.forecast.today.weather == "晴れ"
        assert result.payload.forecast.today.weather_code == "100"
        assert result.payload.forecast.tomorrow.weather_code == "201"
        assert result.payload.temperature.today.max == "24"
        assert result.payload.temperature.today.min == "15"

        paths = sorted(r.url.path for r in transport.requests)
        assert paths == [
            "/bosai/forecast/data/forecast/130000.json",
            "/bosai/forecast/data/overview_forecast/130000.json",
        ]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_area_selects_area_code(self, recording_transport_factory):
        transport = recording_transport_factory(jma_handler)
        adapter = WeatherAdapter(transport=transport)

        await adapter.fetch({"area": "osaka"})

        assert all(AREA_CODES[WeatherArea.OSAKA] in r.url.path for r in transport.requests)

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_unknown_area_defaults_to_tokyo(self, recording_transport_factory):
        transport = recording_transport_factory(jma_handler)
        adapter = WeatherAdapter(transport=transport)

        await adapter.fetch({"area": "atlantis"})

        assert all("130000" in r.url.path for r in transport.requests)

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_sparse_forecast_uses_defaults(self, recording_transport_factory):
        def handler(request: httpx.Request) -> httpx.Response:
            if "overview_forecast" in request.url.path:
                return httpx.Response(200, json={})
            return httpx.Response(200, json=[{"timeSeries": []}])

        adapter = WeatherAdapter(transport=recording_transport_factory(handler))

        result = await adapter.fetch({})

        assert result.succeeded is True
        assert result.payload.area == "不明"
        assert result.payload.forecast.today.weather == ""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_one_failed_feed_falls_back_after_both_settle(self, recording_transport_factory):
        def handler(request: httpx.Request) -> httpx.Response:
            if "overview_forecast" in request.url.path:
                raise httpx.ConnectError("overview down", request=request)
            return httpx.Response(200, json=JMA_FORECAST)

        transport = recording_transport_factory(handler)
        adapter = WeatherAdapter(transport=transport)

        result = await adapter.fetch({"area": "tokyo"})

        assert result.succeeded is False
        assert "[network_error]" in result.note
        assert len(transport.requests) == 2


class TestAdapterFallbacks:
    """Every adapter returns a complete payload whatever the provider does."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    @pytest.mark.parametrize("adapter_cls", [WeatherAdapter, RegionalInfoAdapter, TransportAdapter])
    @pytest.mark.parametrize(
        "handler, failure",
        [
            (connect_error_handler, "network_error"),
            (timeout_handler, "timeout"),
            (unavailable_handler, "http_status 503"),
            (garbage_handler, "malformed_payload"),
            (wrong_shape_handler, "malformed_payload"),
        ],
    )
    async def test_provider_failure_returns_fallback(
        self, adapter_cls, handler, failure, recording_transport_factory
    ):
        adapter = adapter_cls(transport=recording_transport_factory(handler))

        result = await adapter.fetch({})

        assert result.succeeded is False
        assert result.payload is not None
        assert result.source_id == adapter.source_id.value
        assert failure in result.note
        assert result.payload == adapter.fallback_payload({})

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_regional_fallback_is_sample_facilities(self, recording_transport_factory):
        adapter = RegionalInfoAdapter(transport=recording_transport_factory(unavailable_handler))

        result = await adapter.fetch({"type": "tourism"})

        names = [item["name"] for item in result.payload.items]
        assert names == ["東京駅", "東京都庁", "上野動物園"]
        assert result.payload.data_type == "sample"
        assert "サンプルデータ" in result.note

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_transport_fallback_reports_normal_operation(self, recording_transport_factory):
        adapter = TransportAdapter(transport=recording_transport_factory(connect_error_handler))

        result = await adapter.fetch({"region": "kansai"})

        assert [s.station for s in result.payload.operation_status] == ["東京", "新宿"]
        assert all(s.status == "正常" for s in result.payload.operation_status)

    @pytest.mark.unit
    def test_results_are_immutable(self):
        result = WeatherResult(succeeded=True, payload=WeatherPayload())

        with pytest.raises(ValidationError):
            result.succeeded = False

    @pytest.mark.unit
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "adapter_cls, label",
        [
            (WeatherAdapter, "気象庁API"),
            (RegionalInfoAdapter, "東京都オープンデータ"),
            (TransportAdapter, "全国交通情報"),
        ],
    )
    async def test_results_carry_provenance_label(self, adapter_cls, label, recording_transport_factory):
        adapter = adapter_cls(transport=recording_transport_factory(unavailable_handler))

        result = await adapter.fetch({})

        assert result.label == label


class TestWithFallback:
    """Test suite for the shared fallback combinator."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_success_wraps_payload(self):
        async def operation(params):
            return WeatherPayload(area=params["area"])

        guarded = with_fallback(SourceId.WEATHER, operation, lambda p: WeatherPayload(), WeatherResult)

        result = await guarded({"area": "札幌"})

        assert result.succeeded is True
        assert result.payload.area == "札幌"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_malformed_payload_uses_fallback_with_note(self):
        async def operation(params):
            raise KeyError("timeSeries")

        guarded = with_fallback(
            SourceId.WEATHER,
            operation,
            lambda p: WeatherPayload(area="fallback"),
            WeatherResult,
            fallback_note="天気情報なし",
        )

        result = await guarded({})

        assert result.succeeded is False
        assert result.payload.area == "fallback"
        assert result.note == "天気情報なし [malformed_payload]"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_programming_errors_propagate(self):
        async def operation(params):
            raise RuntimeError("bug")

        guarded = with_fallback(SourceId.WEATHER, operation, lambda p: WeatherPayload(), WeatherResult)

        with pytest.raises(RuntimeError):
            await guarded({})


class TestRegionalInfoAdapter:
    """Test suite for the Tokyo open data adapter."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_posts_search_body_with_limit(self, recording_transport_factory):
        hits = [{"name": f"施設{i}"} for i in range(5)]
        transport = recording_transport_factory(
            lambda request: httpx.Response(200, json={"total": 42, "hits": hits})
        )
        adapter = RegionalInfoAdapter(transport=transport)

        result = await adapter.fetch({"type": "tourism", "limit": 5})

        assert result.succeeded is True
        assert result.payload.data_type == "tourism"
        assert result.payload.total_count == 42
        assert len(result.payload.items) == 5

        request = transport.requests[0]
        assert request.method == "POST"
        assert DATASETS[DatasetType.TOURISM] in request.url.path
        assert request.url.params["limit"] == "5"
        body = json.loads(request.content)
        assert body["searchCondition"]["conditionRelationship"] == "and"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_unknown_type_uses_facilities(self, recording_transport_factory):
        transport = recording_transport_factory(lambda request: httpx.Response(200, json={"hits": []}))
        adapter = RegionalInfoAdapter(transport=transport)

        result = await adapter.fetch({"type": "nonsense"})

        assert result.payload.data_type == "facilities"
        assert DATASETS[DatasetType.FACILITIES] in transport.requests[0].url.path

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "value, expected",
        [(5, 5), ("7", 7), (None, 20), ("many", 20), (0, 1), (10_000, MAX_DATASET_LIMIT)],
    )
    def test_parse_limit(self, value, expected):
        assert parse_limit(value) == expected

    @pytest.mark.unit
    @pytest.mark.asyncio
    @pytest.mark.parametrize("limit, sent", [("abc", "20"), ("0", "1"), ("250", "100"), (None, "20")])
    async def test_raw_limit_is_clamped_before_request(self, limit, sent, recording_transport_factory):
        transport = recording_transport_factory(lambda request: httpx.Response(200, json={"hits": []}))
        adapter = RegionalInfoAdapter(transport=transport)

        result = await adapter.fetch({"type": "facilities", "limit": limit})

        assert result.succeeded is True
        assert transport.requests[0].url.params["limit"] == sent


class TestTransportAdapter:
    """Test suite for the transport adapter."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_marks_stations_on_delayed_lines(self, recording_transport_factory):
        feed = [
            {"name": "横浜線", "company": "JR東日本", "lastupdate_gmt": 1760850000, "source": "鉄道com RSS"},
            {"name": "阪急京都線", "company": "阪急電鉄", "lastupdate_gmt": 1760850000, "source": "鉄道com RSS"},
        ]
        transport = recording_transport_factory(lambda request: httpx.Response(200, json=feed))
        adapter = TransportAdapter(transport=transport)

        result = await adapter.fetch({"region": "kanto", "station": "横浜"})

        assert result.succeeded is True
        assert result.payload.region == "kanto"
        assert result.payload.requested_station == "横浜"
        assert result.payload.major_stations == MAJOR_STATIONS[Region.KANTO]
        statuses = {s.station: s for s in result.payload.operation_status}
        assert statuses["横浜"].status == "遅延"
        assert statuses["横浜"].line == "横浜線"
        assert statuses["東京"].status == "正常"
        assert statuses["東京"].delay is None
        assert len(result.payload.delayed_lines) == 2
        assert transport.requests[0].headers["User-Agent"] == "Spec-AI/1.0"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_unknown_region_defaults_to_kanto(self, recording_transport_factory):
        adapter = TransportAdapter(
            transport=recording_transport_factory(lambda request: httpx.Response(200, json=[]))
        )

        result = await adapter.fetch({"region": "okinawa"})

        assert result.payload.region == "kanto"
        assert "kyushu" in result.payload.available_regions

    @pytest.mark.unit
    def test_build_operation_status_without_delays(self):
        statuses = build_operation_status(["大阪", "京都"], [])

        assert [s.line for s in statuses] == ["大阪線", "京都線"]
        assert all(s.status == "正常" for s in statuses)

    @pytest.mark.unit
    def test_build_operation_status_with_delay(self):
        statuses = build_operation_status(["京都"], [DelayedLine(name="京都市営地下鉄烏丸線")])

        assert statuses[0].status == "遅延"
        assert "京都市営地下鉄烏丸線" in statuses[0].delay

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_requested_line_is_echoed(self, recording_transport_factory):
        adapter = TransportAdapter(
            transport=recording_transport_factory(lambda request: httpx.Response(200, json=[]))
        )

        result = await adapter.fetch({"region": "kanto", "line": "山手線"})

        assert result.payload.requested_line == "山手線"
        assert result.payload.requested_station == ""
