"""Weather adapter backed by the JMA (気象庁) forecast feeds."""

import asyncio
from typing import Any

from ...config import AREA_CODES, JMA_FORECAST_URL, JMA_OVERVIEW_URL, WeatherArea
from ...schemas.sources import (
    ForecastDay,
    SourceId,
    TemperatureForecast,
    TemperatureRange,
    WeatherForecast,
    WeatherPayload,
    WeatherResult,
)
from .base import BaseSourceAdapter, SourceParams, parse_enum


def _dig(data: Any, *path, default: Any = "") -> Any:
    """Walk nested dicts/lists, returning ``default`` when any step is missing."""
    current = data
    for key in path:
        try:
            current = current[key]
        except (KeyError, IndexError, TypeError):
            return default
    return current if current is not None else default


def _text(data: Any, *path, default: str = "") -> str:
    value = _dig(data, *path, default=default)
    return value if isinstance(value, str) else str(value)


class WeatherAdapter(BaseSourceAdapter):
    """Today's and tomorrow's forecast for one prefecture-level area."""

    source_id = SourceId.WEATHER
    result_model = WeatherResult
    fallback_note = "気象庁APIに接続できないため、天気情報を取得できませんでした"

    def resolve_area(self, params: SourceParams) -> WeatherArea:
        return parse_enum(WeatherArea, params.get("area"), WeatherArea.TOKYO)

    async def _fetch_payload(self, params: SourceParams) -> WeatherPayload:
        code = AREA_CODES[self.resolve_area(params)]

        async with self._client() as client:
            # Let both requests finish before the client closes
            responses = await asyncio.gather(
                client.get(JMA_FORECAST_URL.format(code=code)),
                client.get(JMA_OVERVIEW_URL.format(code=code)),
                return_exceptions=True,
            )
            for response in responses:
                if isinstance(response, BaseException):
                    raise response
            forecast_response, overview_response = responses
            forecast_response.raise_for_status()
            overview_response.raise_for_status()
            forecast_data = forecast_response.json()
            overview_data = overview_response.json()

        if not isinstance(forecast_data, list) or not forecast_data:
            raise ValueError("forecast feed is not a non-empty list")
        if not isinstance(overview_data, dict):
            raise ValueError("overview feed is not an object")

        report = forecast_data[0]
        weather_series = _dig(report, "timeSeries", 0, default={})
        area = _dig(weather_series, "areas", 0, default={})

        return WeatherPayload(
            area=_text(area, "area", "name", default="不明"),
            publish_time=_text(overview_data, "reportDatetime"),
            overview=_text(overview_data, "text"),
            forecast=WeatherForecast(
                today=ForecastDay(
                    date=_text(weather_series, "timeDefines", 0),
                    weather=_text(area, "weathers", 0),
                    weather_code=_text(area, "weatherCodes", 0),
                ),
                tomorrow=ForecastDay(
                    date=_text(weather_series, "timeDefines", 1),
                    weather=_text(area, "weathers", 1),
                    weather_code=_text(area, "weatherCodes", 1),
                ),
            ),
            temperature=TemperatureForecast(
                today=TemperatureRange(
                    max=_text(report, "timeSeries", 2, "areas", 0, "temps", 0),
                    min=_text(report, "timeSeries", 2, "areas", 0, "temps", 1),
                ),
            ),
        )

    def fallback_payload(self, params: SourceParams) -> WeatherPayload:
        return WeatherPayload(
            area="不明",
            overview="現在、天気情報を取得できません。",
            source="フォールバックデータ",
        )
