"""Transport adapter: regional major stations plus the live train delay feed."""

from datetime import datetime, timezone
from typing import List

from ...config import MAJOR_STATIONS, TRAIN_DELAY_URL, TRANSPORT_USER_AGENT, Region
from ...schemas.sources import (
    DelayedLine,
    SourceId,
    StationStatus,
    TransportPayload,
    TransportResult,
)
from .base import BaseSourceAdapter, SourceParams, parse_enum


def build_operation_status(
    stations: List[str],
    delayed_lines: List[DelayedLine],
    last_update: str = "",
) -> List[StationStatus]:
    """Mark a station delayed when a delayed line's name mentions it."""
    statuses = []
    for station in stations:
        delayed = next((line for line in delayed_lines if station in line.name), None)
        statuses.append(StationStatus(
            station=station,
            line=delayed.name if delayed else f"{station}線",
            status="遅延" if delayed else "正常",
            delay=f"{delayed.company or delayed.name}で遅延が発生しています" if delayed else None,
            last_update=last_update,
        ))
    return statuses


class TransportAdapter(BaseSourceAdapter):
    """Operation status around the major stations of one region."""

    source_id = SourceId.TRANSPORT
    result_model = TransportResult
    fallback_note = "交通情報APIに接続できないため、サンプルデータを表示"

    def resolve_region(self, params: SourceParams) -> Region:
        return parse_enum(Region, params.get("region"), Region.KANTO)

    async def _fetch_payload(self, params: SourceParams) -> TransportPayload:
        region = self.resolve_region(params)
        stations = MAJOR_STATIONS[region]

        async with self._client() as client:
            response = await client.get(
                TRAIN_DELAY_URL,
                headers={"User-Agent": TRANSPORT_USER_AGENT},
            )
            response.raise_for_status()
            feed = response.json()

        if not isinstance(feed, list):
            raise ValueError("delay feed is not a list")

        delayed_lines = [
            DelayedLine(
                name=str(entry["name"]),
                company=str(entry.get("company") or ""),
                last_update=str(entry.get("lastupdate_gmt") or ""),
            )
            for entry in feed
        ]
        now = datetime.now(timezone.utc).isoformat()

        return TransportPayload(
            region=region.value,
            requested_station=str(params.get("station") or ""),
            requested_line=str(params.get("line") or ""),
            major_stations=list(stations),
            operation_status=build_operation_status(stations, delayed_lines, now),
            delayed_lines=delayed_lines,
            available_regions=[r.value for r in Region],
            last_update=now,
        )

    def fallback_payload(self, params: SourceParams) -> TransportPayload:
        return TransportPayload(
            region="unknown",
            major_stations=["東京", "新宿", "渋谷"],
            operation_status=[
                StationStatus(station="東京", line="山手線"),
                StationStatus(station="新宿", line="JR各線"),
            ],
            available_regions=[r.value for r in Region],
            source="フォールバックデータ",
        )
