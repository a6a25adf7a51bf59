"""Regional info adapter backed by the Tokyo metropolitan open data API."""

from datetime import datetime, timezone
from typing import Any

from ...config import DATASETS, DEFAULT_DATASET_LIMIT, TOKYO_API_BASE, DatasetType
from ...schemas.sources import RegionalInfoPayload, RegionalInfoResult, SourceId
from .base import BaseSourceAdapter, SourceParams, parse_enum

MAX_DATASET_LIMIT = 100

# Search body the open data API expects: every column, no filters
_SEARCH_BODY = {
    "column": [],
    "searchCondition": {
        "conditionRelationship": "and",
        "dateAndSearch": [],
    },
}

_SAMPLE_FACILITIES = (
    {
        "name": "東京駅",
        "address": "東京都千代田区丸の内1丁目",
        "type": "交通施設",
        "description": "東京の中央駅",
    },
    {
        "name": "東京都庁",
        "address": "東京都新宿区西新宿2-8-1",
        "type": "行政施設",
        "description": "東京都の本庁舎",
    },
    {
        "name": "上野動物園",
        "address": "東京都台東区上野公園9-83",
        "type": "観光施設",
        "description": "日本最古の動物園",
    },
)


def parse_limit(value: Any) -> int:
    """Clamp the requested result size to 1..MAX_DATASET_LIMIT."""
    try:
        limit = int(value)
    except (TypeError, ValueError):
        return DEFAULT_DATASET_LIMIT
    return max(1, min(limit, MAX_DATASET_LIMIT))


class RegionalInfoAdapter(BaseSourceAdapter):
    """Facilities, population, tourism or transport records for Tokyo."""

    source_id = SourceId.REGIONAL_INFO
    result_model = RegionalInfoResult
    fallback_note = "東京都APIに接続できないため、サンプルデータを表示しています"

    def resolve_dataset(self, params: SourceParams) -> DatasetType:
        return parse_enum(DatasetType, params.get("type"), DatasetType.FACILITIES)

    async def _fetch_payload(self, params: SourceParams) -> RegionalInfoPayload:
        dataset = self.resolve_dataset(params)
        limit = parse_limit(params.get("limit", DEFAULT_DATASET_LIMIT))
        url = f"{TOKYO_API_BASE}/{DATASETS[dataset]}/json"

        async with self._client() as client:
            response = await client.post(
                url,
                params={"limit": limit},
                json=_SEARCH_BODY,
                headers={"Accept": "application/json"},
            )
            response.raise_for_status()
            data = response.json()

        if not isinstance(data, dict):
            raise ValueError("open data response is not an object")
        hits = data.get("hits") or []
        if not isinstance(hits, list):
            raise ValueError("open data 'hits' is not a list")

        return RegionalInfoPayload(
            data_type=dataset.value,
            total_count=int(data.get("total") or 0),
            items=hits[:limit],
            last_update=datetime.now(timezone.utc).isoformat(),
        )

    def fallback_payload(self, params: SourceParams) -> RegionalInfoPayload:
        return RegionalInfoPayload(
            data_type="sample",
            total_count=len(_SAMPLE_FACILITIES),
            items=[dict(item) for item in _SAMPLE_FACILITIES],
            source="サンプルデータ（東京都API接続エラー時）",
        )
