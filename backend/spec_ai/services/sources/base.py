"""Base data source adapter and the shared fallback combinator.

Every adapter follows the same contract: ``fetch(params)`` always returns a
complete ``SourceResult``. Provider failures (network, timeout, non-2xx,
malformed body) are swapped for a static fallback payload here, in one place,
instead of being handled separately by each adapter.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Dict, Optional, Type

import httpx
from pydantic import BaseModel

from ...config import SOURCE_TIMEOUT_SECONDS
from ...schemas.sources import SourceId, SourceResult

logger = logging.getLogger(__name__)

SourceParams = Dict[str, Any]

# Exceptions that mean "the provider gave us something we can't use"
MALFORMED_PAYLOAD_ERRORS = (ValueError, TypeError, KeyError, IndexError, AttributeError)


def classify_failure(exc: Exception) -> str:
    """Map a provider failure to a short failure class for the result note."""
    if isinstance(exc, httpx.TimeoutException):
        return "timeout"
    if isinstance(exc, httpx.HTTPStatusError):
        return f"http_status {exc.response.status_code}"
    if isinstance(exc, httpx.HTTPError):
        return "network_error"
    return "malformed_payload"


def with_fallback(
    source_id: SourceId,
    operation: Callable[[SourceParams], Awaitable[BaseModel]],
    fallback: Callable[[SourceParams], BaseModel],
    result_model: Type[BaseModel],
    fallback_note: str = "",
) -> Callable[[SourceParams], Awaitable[SourceResult]]:
    """Wrap a payload-producing operation so it never fails on provider errors.

    Args:
        source_id: Source the operation belongs to (used for logging)
        operation: Coroutine function building the payload from the provider
        fallback: Builds the static payload used when ``operation`` fails
        result_model: SourceResult variant to wrap the payload in
        fallback_note: Human-readable explanation attached to fallback results

    Returns:
        Coroutine function ``(params) -> SourceResult``
    """

    async def guarded(params: SourceParams) -> SourceResult:
        try:
            payload = await operation(params)
        except (httpx.HTTPError, *MALFORMED_PAYLOAD_ERRORS) as e:
            failure = classify_failure(e)
            logger.warning(f"[Source:{source_id.value}] Falling back ({failure}): {e}")
            note = f"{fallback_note} [{failure}]" if fallback_note else failure
            return result_model(succeeded=False, payload=fallback(params), note=note)

        return result_model(succeeded=True, payload=payload)

    return guarded


class BaseSourceAdapter(ABC):
    """Base class for the always-available data source adapters.

    Subclasses set ``source_id``, ``result_model`` and ``fallback_note`` and
    implement ``_fetch_payload`` and ``fallback_payload``.
    """

    source_id: SourceId
    result_model: Type[BaseModel]
    fallback_note: str = ""

    def __init__(
        self,
        timeout: float = SOURCE_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.timeout = timeout
        self._transport = transport
        self._guarded = with_fallback(
            self.source_id,
            self._fetch_payload,
            self.fallback_payload,
            self.result_model,
            self.fallback_note,
        )

    @property
    def name(self) -> str:
        return self.source_id.value

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self._transport)

    async def fetch(self, params: Optional[SourceParams] = None) -> SourceResult:
        """Fetch this source. Provider failures come back as fallback results."""
        return await self._guarded(dict(params or {}))

    @abstractmethod
    async def _fetch_payload(self, params: SourceParams) -> BaseModel:
        """Request the provider and shape its response into the payload model."""
        pass

    @abstractmethod
    def fallback_payload(self, params: SourceParams) -> BaseModel:
        """Static payload used when the provider can't be used."""
        pass


def parse_enum(enum_cls, value: Any, default):
    """Return ``enum_cls(value)``, or ``default`` for missing/unknown values."""
    try:
        return enum_cls(value)
    except ValueError:
        return default
