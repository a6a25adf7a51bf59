from typing import Dict, Optional

from fastapi import APIRouter, Depends, Query, Request

from ..errors import read_json_object
from ..schemas.chat import ErrorResponse, SourceResponse
from ..schemas.sources import SourceId
from ..services.sources import BaseSourceAdapter, SourceParams, get_source_adapters

router = APIRouter(prefix="/api", tags=["Sources"])

_ERROR_RESPONSES = {400: {"model": ErrorResponse}}


async def _fetch(
    adapters: Dict[SourceId, BaseSourceAdapter],
    source_id: SourceId,
    params: SourceParams,
) -> SourceResponse:
    """Run one adapter. Fallback content is flagged via ``note``, never a non-2xx."""
    result = await adapters[source_id].fetch(params)
    return SourceResponse(
        data=result.payload.model_dump(mode="json"),
        source=result.payload.source,
        note=result.note,
    )


def _pick(body: dict, *keys: str) -> SourceParams:
    return {key: body[key] for key in keys if body.get(key) is not None}


@router.get("/weather", response_model=SourceResponse)
async def get_weather(
    area: str = Query("tokyo", description="tokyo, osaka, aichi, fukuoka or hokkaido"),
    adapters: Dict[SourceId, BaseSourceAdapter] = Depends(get_source_adapters),
):
    """Today's and tomorrow's JMA forecast for an area."""
    return await _fetch(adapters, SourceId.WEATHER, {"area": area})


@router.post("/weather", response_model=SourceResponse, responses=_ERROR_RESPONSES)
async def post_weather(
    request: Request,
    adapters: Dict[SourceId, BaseSourceAdapter] = Depends(get_source_adapters),
):
    """Same as GET, with `{"area": ...}` in the body."""
    body = await read_json_object(request)
    return await _fetch(adapters, SourceId.WEATHER, _pick(body, "area"))


@router.get("/regional", response_model=SourceResponse)
async def get_regional_info(
    dataset_type: str = Query("facilities", alias="type", description="population, facilities, tourism or transport"),
    limit: Optional[str] = Query(None, description="1-100, default 20; out-of-range values are clamped"),
    adapters: Dict[SourceId, BaseSourceAdapter] = Depends(get_source_adapters),
):
    """Records from a Tokyo metropolitan open data dataset."""
    return await _fetch(adapters, SourceId.REGIONAL_INFO, {"type": dataset_type, "limit": limit})


@router.post("/regional", response_model=SourceResponse, responses=_ERROR_RESPONSES)
async def post_regional_info(
    request: Request,
    adapters: Dict[SourceId, BaseSourceAdapter] = Depends(get_source_adapters),
):
    """Same as GET, with `{"type": ..., "limit": ...}` in the body."""
    body = await read_json_object(request)
    return await _fetch(adapters, SourceId.REGIONAL_INFO, _pick(body, "type", "limit"))


@router.get("/transport", response_model=SourceResponse)
async def get_transport(
    region: str = Query("kanto", description="hokkaido, tohoku, kanto, chubu, kansai, chugoku, shikoku or kyushu"),
    station: str = Query(""),
    line: str = Query(""),
    adapters: Dict[SourceId, BaseSourceAdapter] = Depends(get_source_adapters),
):
    """Operation status around a region's major stations."""
    return await _fetch(adapters, SourceId.TRANSPORT, {"region": region, "station": station, "line": line})


@router.post("/transport", response_model=SourceResponse, responses=_ERROR_RESPONSES)
async def post_transport(
    request: Request,
    adapters: Dict[SourceId, BaseSourceAdapter] = Depends(get_source_adapters),
):
    """Same as GET, with `{"region": ..., "station": ..., "line": ...}` in the body."""
    body = await read_json_object(request)
    return await _fetch(adapters, SourceId.TRANSPORT, _pick(body, "region", "station", "line"))
