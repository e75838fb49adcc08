"""Metrics façade for structured engine events."""

import logging

logger = logging.getLogger(__name__)


def record_enrichment_call(
    before_segment_id: str,
    after_segment_id: str,
    latency_ms: int,
    outcome: str,
    provider: str | None = None,
) -> None:
    """Log one enrichment search as a structured event.

    The event carries the gap boundary and the outcome so that slow or
    failing providers can be picked out of the engine logs.

    Args:
        before_segment_id: Segment before the gap being filled.
        after_segment_id: Segment after the gap being filled.
        latency_ms: Latency in milliseconds.
        outcome: "success", "empty", "timeout" or "error".
        provider: Optional provider name.
    """
    logger.info(
        "enrichment_call_metric",
        extra={
            "before_segment_id": before_segment_id,
            "after_segment_id": after_segment_id,
            "latency_ms": latency_ms,
            "outcome": outcome,
            "provider": provider,
        },
    )


def record_fill_summary(
    segments_in: int,
    segments_out: int,
    inserted: int,
    duplicates: int,
    tight: int,
) -> None:
    """Record a structured summary of one gap-filling run."""
    logger.info(
        "gap_fill_metric",
        extra={
            "segments_in": segments_in,
            "segments_out": segments_out,
            "inserted": inserted,
            "duplicates": duplicates,
            "tight": tight,
        },
    )
