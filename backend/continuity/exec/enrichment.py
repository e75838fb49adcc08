"""Bounded-timeout execution of enrichment searches.

The provider is the engine's only suspension point. A slow or failing
provider must never block gap filling, so every search is awaited with a
timeout and any failure degrades to an "empty-handed" result that the
caller answers with a placeholder.
"""

import asyncio
import logging
import time

from backend.continuity.errors import EnrichmentTimeout
from backend.continuity.exec.types import EnrichmentProvider, EnrichmentResult
from backend.continuity.metrics.core import record_enrichment_call
from backend.continuity.metrics.registry import MetricsClient
from backend.continuity.models.gap import Gap
from backend.continuity.models.segment import BaseSegment, Segment, parse_segment

logger = logging.getLogger(__name__)


class EnrichmentExecutor:
    """Runs provider searches with a hard timeout."""

    def __init__(
        self,
        provider: EnrichmentProvider,
        timeout_s: float,
        metrics: MetricsClient | None = None,
    ):
        self.provider = provider
        self.timeout_s = timeout_s
        self.metrics = metrics

    async def _call_with_timeout(self, gap: Gap) -> Segment | None:
        try:
            return await asyncio.wait_for(self.provider.search(gap), timeout=self.timeout_s)
        except asyncio.TimeoutError as e:
            raise EnrichmentTimeout(
                f"Enrichment for {gap.before_segment_id} -> {gap.after_segment_id} "
                f"exceeded {self.timeout_s}s"
            ) from e

    async def search(self, gap: Gap) -> EnrichmentResult:
        """Search for a segment filling the gap; never raises."""
        start_time = time.time()
        try:
            found = await self._call_with_timeout(gap)
            if found is None:
                result = EnrichmentResult(status="empty", latency_ms=self._elapsed(start_time))
            else:
                segment = found if isinstance(found, BaseSegment) else parse_segment(found)
                result = EnrichmentResult(
                    status="success", segment=segment, latency_ms=self._elapsed(start_time)
                )
        except EnrichmentTimeout as e:
            logger.warning(f"{e}; falling back to placeholder")
            result = EnrichmentResult(
                status="timeout", error=str(e), latency_ms=self._elapsed(start_time)
            )
        except Exception as e:
            logger.warning(
                f"Enrichment provider failed for {gap.before_segment_id} -> "
                f"{gap.after_segment_id}: {e}; falling back to placeholder"
            )
            result = EnrichmentResult(
                status="error", error=str(e), latency_ms=self._elapsed(start_time)
            )

        if self.metrics:
            self.metrics.observe_enrichment(result.status, result.latency_ms)
        record_enrichment_call(
            before_segment_id=gap.before_segment_id,
            after_segment_id=gap.after_segment_id,
            latency_ms=result.latency_ms,
            outcome=result.status,
            provider=type(self.provider).__name__,
        )
        return result

    @staticmethod
    def _elapsed(start_time: float) -> int:
        return int((time.time() - start_time) * 1000)
