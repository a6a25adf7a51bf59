"""Always-available adapters for the external open data sources."""

from typing import Dict, Optional

from ...schemas.sources import SourceId
from .base import BaseSourceAdapter, SourceParams, with_fallback
from .regional import RegionalInfoAdapter
from .transport import TransportAdapter
from .weather import WeatherAdapter


def build_default_adapters() -> Dict[SourceId, BaseSourceAdapter]:
    """One adapter per source, keyed by source id."""
    adapters = [WeatherAdapter(), RegionalInfoAdapter(), TransportAdapter()]
    return {adapter.source_id: adapter for adapter in adapters}


# Global adapters used by the standalone source endpoints
_adapters: Optional[Dict[SourceId, BaseSourceAdapter]] = None


def get_source_adapters() -> Dict[SourceId, BaseSourceAdapter]:
    """Get or create the global source adapters."""
    global _adapters
    if _adapters is None:
        _adapters = build_default_adapters()
    return _adapters


__all__ = [
    "BaseSourceAdapter",
    "SourceParams",
    "with_fallback",
    "WeatherAdapter",
    "RegionalInfoAdapter",
    "TransportAdapter",
    "build_default_adapters",
    "get_source_adapters",
]
