"""Aggregator agent: fans out to every data source and merges the results."""

import asyncio
import logging
import time
from typing import Dict, Mapping, Optional

from ...schemas.agents.trace import ExecutionTrace, TraceEventType
from ...schemas.sources import SOURCE_RESULT_TYPES, AggregatedContext, SourceId
from ..sources import BaseSourceAdapter, SourceParams, build_default_adapters

logger = logging.getLogger(__name__)


class SourceAggregator:
    """Runs all configured source adapters concurrently.

    Waits for every fetch to settle rather than racing to the first one,
    since each source adds context instead of answering on its own. A fetch
    that raises, or returns anything but a source result, is dropped from
    the context; the aggregator itself never fails.
    """

    def __init__(self, adapters: Optional[Mapping[SourceId, BaseSourceAdapter]] = None):
        self.adapters: Dict[SourceId, BaseSourceAdapter] = dict(
            adapters if adapters is not None else build_default_adapters()
        )

    @property
    def name(self) -> str:
        return "aggregator_agent"

    async def aggregate(
        self,
        source_params: Mapping[SourceId, SourceParams],
        trace: Optional[ExecutionTrace] = None,
    ) -> AggregatedContext:
        """Fetch every configured source and build the aggregated context.

        Args:
            source_params: Parameters per source; sources without an entry
                are fetched with their defaults
            trace: Optional execution trace

        Returns:
            AggregatedContext with one entry per source that settled
        """
        start_time = time.time()
        source_ids = list(self.adapters.keys())

        coroutines = [
            self.adapters[source_id].fetch(source_params.get(source_id))
            for source_id in source_ids
        ]
        settled = await asyncio.gather(*coroutines, return_exceptions=True)

        results = []
        for source_id, outcome in zip(source_ids, settled):
            if isinstance(outcome, BaseException):
                logger.error(
                    f"[Aggregator] {source_id.value} adapter raised, omitting it: {outcome!r}"
                )
                continue
            if not isinstance(outcome, SOURCE_RESULT_TYPES):
                logger.error(
                    f"[Aggregator] {source_id.value} adapter returned {type(outcome).__name__}, omitting it"
                )
                continue
            results.append(outcome)

        context = AggregatedContext.from_results(results)
        duration_ms = (time.time() - start_time) * 1000

        succeeded = [r.source_id for r in results if r.succeeded]
        missing = [s.value for s in source_ids if s not in context.source_ids()]
        logger.info(
            f"[Aggregator] {len(results)}/{len(source_ids)} sources settled "
            f"({len(succeeded)} live) in {duration_ms:.0f}ms"
        )

        if trace is not None:
            trace.sources_succeeded = len(succeeded)
            trace.sources_missing = len(missing)
            trace.add_event(
                TraceEventType.SOURCES_GATHERED,
                agent=self.name,
                data={
                    "settled": [s.value for s in context.source_ids()],
                    "succeeded": succeeded,
                    "missing": missing,
                },
                duration_ms=duration_ms,
            )

        return context
