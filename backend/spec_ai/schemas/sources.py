"""Source result schemas.

Each data source produces its own result variant; ``SourceResult`` is the
tagged union of all of them, discriminated by ``source_id``.
"""

import json
from enum import Enum
from typing import Annotated, Any, Dict, Iterable, List, Literal, Optional, Union

from pydantic import BaseModel, Field


class SourceId(str, Enum):
    """Identifiers of the external data sources."""
    WEATHER = "weather"
    REGIONAL_INFO = "regional_info"
    TRANSPORT = "transport"


# ============================================
# Weather (気象庁)
# ============================================

class ForecastDay(BaseModel):
    date: str = ""
    weather: str = ""
    weather_code: str = ""


class WeatherForecast(BaseModel):
    today: ForecastDay = Field(default_factory=ForecastDay)
    tomorrow: ForecastDay = Field(default_factory=ForecastDay)


class TemperatureRange(BaseModel):
    max: str = ""
    min: str = ""


class TemperatureForecast(BaseModel):
    today: TemperatureRange = Field(default_factory=TemperatureRange)


class WeatherPayload(BaseModel):
    area: str = "不明"
    publish_time: str = ""
    overview: str = ""
    forecast: WeatherForecast = Field(default_factory=WeatherForecast)
    temperature: TemperatureForecast = Field(default_factory=TemperatureForecast)
    source: str = "気象庁"


# ============================================
# Regional info (東京都オープンデータ)
# ============================================

class RegionalInfoPayload(BaseModel):
    data_type: str = "facilities"
    total_count: int = 0
    items: List[Dict[str, Any]] = Field(default_factory=list)
    source: str = "東京都オープンデータ"
    last_update: str = ""


# ============================================
# Transport (全国交通情報)
# ============================================

class StationStatus(BaseModel):
    station: str
    line: str
    status: str = "正常"
    delay: Optional[str] = None
    last_update: str = ""


class DelayedLine(BaseModel):
    name: str
    company: str = ""
    last_update: str = ""


class TransportPayload(BaseModel):
    region: str = "kanto"
    requested_station: str = ""
    requested_line: str = ""
    major_stations: List[str] = Field(default_factory=list)
    operation_status: List[StationStatus] = Field(default_factory=list)
    delayed_lines: List[DelayedLine] = Field(default_factory=list)
    available_regions: List[str] = Field(default_factory=list)
    source: str = "全国公共交通オープンデータ"
    last_update: str = ""


# ============================================
# Results
# ============================================

class _SourceResultBase(BaseModel):
    """Fields shared by every source result.

    ``succeeded=False`` still carries a complete fallback payload, so
    consumers only branch on provenance, never on missing data.
    """
    succeeded: bool
    note: Optional[str] = None

    class Config:
        frozen = True


class WeatherResult(_SourceResultBase):
    source_id: Literal["weather"] = "weather"
    label: str = "気象庁API"
    payload: WeatherPayload


class RegionalInfoResult(_SourceResultBase):
    source_id: Literal["regional_info"] = "regional_info"
    label: str = "東京都オープンデータ"
    payload: RegionalInfoPayload


class TransportResult(_SourceResultBase):
    source_id: Literal["transport"] = "transport"
    label: str = "全国交通情報"
    payload: TransportPayload


SourceResult = Annotated[
    Union[WeatherResult, RegionalInfoResult, TransportResult],
    Field(discriminator="source_id"),
]

SOURCE_RESULT_TYPES = (WeatherResult, RegionalInfoResult, TransportResult)


class AggregatedContext(BaseModel):
    """Everything the sources returned for one chat turn.

    A missing key means that source did not settle with a result.
    """
    weather: Optional[WeatherResult] = None
    regional_info: Optional[RegionalInfoResult] = None
    transport: Optional[TransportResult] = None

    @classmethod
    def from_results(cls, results: Iterable[SourceResult]) -> "AggregatedContext":
        return cls(**{result.source_id: result for result in results})

    def source_ids(self) -> List[SourceId]:
        """Sources that are present, in declaration order."""
        return [
            SourceId(name)
            for name in type(self).model_fields
            if getattr(self, name) is not None
        ]

    def to_prompt_json(self) -> str:
        """Serialize for embedding in an LLM prompt (keeps Japanese text readable)."""
        data = self.model_dump(mode="json", exclude_none=True)
        return json.dumps(data, ensure_ascii=False, indent=2)
