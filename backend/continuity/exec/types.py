"""Type definitions for optional enrichment searches."""

from typing import Literal, Protocol, runtime_checkable

from pydantic import BaseModel

from backend.continuity.models.gap import Gap
from backend.continuity.models.segment import Segment


@runtime_checkable
class EnrichmentProvider(Protocol):
    """Searches an external source for a real segment that fills a gap.

    Implementations return None when nothing suitable is found.
    """

    async def search(self, gap: Gap) -> Segment | None: ...


class EnrichmentResult(BaseModel):
    """Result of one enrichment search."""

    status: Literal["success", "empty", "timeout", "error"]
    segment: Segment | None = None
    error: str | None = None
    latency_ms: int
