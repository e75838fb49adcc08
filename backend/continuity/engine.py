"""Public entry points of the continuity engine.

Callers hand in segments (models or raw mappings) and get new segment
collections and reports back; inputs are never mutated. Malformed input
raises SegmentValidationError immediately. Structural graph failures such
as dependency cycles are returned as values and never escape this module.
"""

import asyncio
import logging
from collections.abc import Iterable, Mapping
from datetime import date, timedelta
from typing import Any

from pydantic import ValidationError

from backend.continuity.config import Settings, get_settings
from backend.continuity.errors import CycleError, SegmentValidationError
from backend.continuity.exec.types import EnrichmentProvider
from backend.continuity.graph.dependency_graph import DependencyGraph
from backend.continuity.metrics.registry import MetricsClient
from backend.continuity.models.gap import Gap
from backend.continuity.models.itinerary import Itinerary
from backend.continuity.models.results import (
    ContinuityReport,
    FillResult,
    GraphError,
    GraphReport,
    ReviewResult,
    ShiftResult,
    ShiftWarning,
)
from backend.continuity.models.segment import Segment, parse_segment
from backend.continuity.planning.continuity import ContinuityAnalyzer
from backend.continuity.planning.gap_filler import GapFiller
from backend.continuity.verify.review import review_itinerary

logger = logging.getLogger(__name__)

SegmentInput = Mapping[str, Any] | Segment


def _first_error_field(error: ValidationError) -> str | None:
    errors = error.errors()
    if not errors or not errors[0].get("loc"):
        return None
    return ".".join(str(part) for part in errors[0]["loc"])


def parse_segments(data: Iterable[SegmentInput]) -> list[Segment]:
    """Validate raw segments; reject malformed ones and duplicate ids.

    Raises:
        SegmentValidationError: on the first malformed segment.
    """
    segments: list[Segment] = []
    seen: set[str] = set()
    for position, item in enumerate(data):
        try:
            segment = parse_segment(dict(item) if isinstance(item, Mapping) else item)
        except ValidationError as e:
            raise SegmentValidationError(
                f"Invalid segment at position {position}: {e}",
                field=_first_error_field(e),
            ) from e
        if segment.id in seen:
            raise SegmentValidationError(f"Duplicate segment id: {segment.id}", field="id")
        seen.add(segment.id)
        segments.append(segment)
    if len({segment.start_datetime.tzinfo is None for segment in segments}) > 1:
        raise SegmentValidationError(
            "Segments mix timezone-aware and naive datetimes", field="start_datetime"
        )
    return segments


def parse_itinerary(data: Mapping[str, Any] | Itinerary) -> Itinerary:
    """Validate an itinerary snapshot.

    Raises:
        SegmentValidationError: if a segment is malformed or out of range.
    """
    if isinstance(data, Itinerary):
        itinerary = data
    else:
        try:
            itinerary = Itinerary.model_validate(dict(data))
        except ValidationError as e:
            raise SegmentValidationError(
                f"Invalid itinerary: {e}", field=_first_error_field(e)
            ) from e
    parse_segments(itinerary.segments)
    return itinerary


def review_gaps(
    segments: Iterable[SegmentInput],
    settings: Settings | None = None,
    metrics: MetricsClient | None = None,
) -> list[Gap]:
    """Gaps needing a connecting segment, without modifying anything."""
    analyzer = ContinuityAnalyzer(settings or get_settings(), metrics=metrics)
    return analyzer.detect_location_gaps(parse_segments(segments))


async def fill_gaps(
    segments: Iterable[SegmentInput],
    provider: EnrichmentProvider | None = None,
    settings: Settings | None = None,
    metrics: MetricsClient | None = None,
) -> FillResult:
    """Fill every actionable gap with an inferred or enriched segment."""
    filler = GapFiller(settings or get_settings(), provider=provider, metrics=metrics)
    return await filler.fill(parse_segments(segments))


def fill_gaps_sync(
    segments: Iterable[SegmentInput],
    provider: EnrichmentProvider | None = None,
    settings: Settings | None = None,
    metrics: MetricsClient | None = None,
) -> FillResult:
    """Blocking wrapper around fill_gaps for callers without an event loop."""
    return asyncio.run(fill_gaps(segments, provider, settings, metrics))


def prune_inferred_transfers(
    segments: Iterable[SegmentInput],
    settings: Settings | None = None,
) -> list[Segment]:
    """Remove inferred transfers that no longer serve a purpose."""
    filler = GapFiller(settings or get_settings())
    return filler.prune_inferred_transfers(parse_segments(segments))


def build_graph_report(
    segments: Iterable[SegmentInput],
    start_date: date | None = None,
    end_date: date | None = None,
    settings: Settings | None = None,
    metrics: MetricsClient | None = None,
) -> GraphReport:
    """Dependency order, conflicts and dangling references."""
    graph = DependencyGraph(
        parse_segments(segments),
        settings=settings,
        start_date=start_date,
        end_date=end_date,
        metrics=metrics,
    )
    report = GraphReport(
        conflicts=graph.detect_conflicts(),
        missing_dependencies=graph.missing_dependencies(),
    )
    try:
        report.order = graph.topological_order()
    except CycleError as e:
        logger.warning(f"Cannot order segments: {e}")
        report.error = GraphError(kind="cycle", message=str(e), segment_ids=e.segment_ids)
    return report


def validate_itinerary(
    itinerary: Mapping[str, Any] | Itinerary,
    settings: Settings | None = None,
    metrics: MetricsClient | None = None,
) -> GraphReport:
    """Validate a snapshot and report ordering and conflicts within its dates."""
    parsed = parse_itinerary(itinerary)
    return build_graph_report(
        parsed.segments,
        start_date=parsed.start_date,
        end_date=parsed.end_date,
        settings=settings,
        metrics=metrics,
    )


def shift_segment(
    segments: Iterable[SegmentInput],
    segment_id: str,
    delta: timedelta,
    start_date: date | None = None,
    end_date: date | None = None,
    settings: Settings | None = None,
    metrics: MetricsClient | None = None,
) -> ShiftResult:
    """Move a segment and cascade the delta to its dependents."""
    parsed = parse_segments(segments)
    graph = DependencyGraph(
        parsed,
        settings=settings,
        start_date=start_date,
        end_date=end_date,
        metrics=metrics,
    )
    try:
        return graph.shift_segment(segment_id, delta)
    except CycleError as e:
        logger.warning(f"Cannot shift {segment_id}: {e}")
        return ShiftResult(
            segments=parsed,
            shifted_ids=[],
            delta=delta,
            warnings=[
                ShiftWarning(
                    segment_id=segment_id,
                    reason=str(e),
                    blocked_segment_ids=e.segment_ids,
                )
            ],
        )


def add_dependency(
    segments: Iterable[SegmentInput],
    segment_id: str,
    depends_on_id: str,
    settings: Settings | None = None,
) -> tuple[list[Segment], GraphError | None]:
    """Add an explicit dependency; a cycle comes back as an error value."""
    graph = DependencyGraph(parse_segments(segments), settings=settings)
    try:
        graph.add_dependency(segment_id, depends_on_id)
    except CycleError as e:
        return graph.segments, GraphError(kind="cycle", message=str(e), segment_ids=e.segment_ids)
    return graph.segments, None


def remove_segment(segments: Iterable[SegmentInput], segment_id: str) -> list[Segment]:
    """Segments without the given one, with references to it removed."""
    return DependencyGraph(parse_segments(segments)).remove_segment(segment_id)


def review(
    segments: Iterable[SegmentInput],
    settings: Settings | None = None,
    metrics: MetricsClient | None = None,
) -> ReviewResult:
    """Review segments for gaps, conflicts, tight schedules and cycles."""
    return review_itinerary(parse_segments(segments), settings=settings, metrics=metrics)


async def process_itinerary(
    itinerary: Mapping[str, Any] | Itinerary,
    provider: EnrichmentProvider | None = None,
    settings: Settings | None = None,
    metrics: MetricsClient | None = None,
) -> ContinuityReport:
    """Fill gaps, then order, check and review the result."""
    settings = settings or get_settings()
    parsed = parse_itinerary(itinerary)

    fill = await fill_gaps(parsed.segments, provider, settings, metrics)
    graph = build_graph_report(
        fill.segments,
        start_date=parsed.start_date,
        end_date=parsed.end_date,
        settings=settings,
        metrics=metrics,
    )
    result = review_itinerary(fill.segments, settings=settings, metrics=metrics)

    logger.info(
        f"Processed itinerary {parsed.id or '<unnamed>'}: "
        f"{fill.inserted_count} inserted, {len(graph.conflicts)} conflicts, "
        f"{len(result.issues)} review issues"
    )
    return ContinuityReport(fill=fill, graph=graph, review=result)
