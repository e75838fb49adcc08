"""Gap filling: synthesize connecting transfers between discontinuous segments.

The filler walks the chronologically sorted segments and re-analyses every
boundary against the output built so far, so a transfer inserted earlier is
already visible when the next boundary is examined. Re-running the filler
on its own output therefore inserts nothing.
"""

import logging
import warnings
from collections.abc import Sequence
from datetime import datetime, timedelta

from backend.continuity.config import Settings, get_settings
from backend.continuity.errors import TightScheduleWarning
from backend.continuity.exec.enrichment import EnrichmentExecutor
from backend.continuity.exec.types import EnrichmentProvider
from backend.continuity.metrics.core import record_fill_summary
from backend.continuity.metrics.registry import MetricsClient
from backend.continuity.models.common import (
    GapClassification,
    SegmentStatus,
    TransferType,
)
from backend.continuity.models.gap import Gap
from backend.continuity.models.results import FillAction, FillOutcome, FillResult
from backend.continuity.models.segment import (
    Segment,
    TransferSegment,
    is_stationary,
    segment_label,
)
from backend.continuity.planning.continuity import (
    ContinuityAnalyzer,
    is_actionable,
    sort_segments,
)

logger = logging.getLogger(__name__)

PLACEHOLDER_NOTES = "Placeholder transfer - please verify and update with actual transfer details"

# Typical door-to-door minutes used when the window is much longer than a transfer
TYPICAL_TRANSFER_MINUTES = {
    GapClassification.LOCAL_TRANSFER: 30,
    GapClassification.AIRPORT_TRANSFER: 60,
    GapClassification.TRAVEL_DAY: 180,
}

# Airport transfers shorter than this get a private car instead of a shuttle
_SHUTTLE_MIN_WINDOW = 90


def select_transfer_type(gap: Gap) -> TransferType:
    """Vehicle type for a placeholder transfer."""
    if gap.classification == GapClassification.AIRPORT_TRANSFER:
        if gap.available_window_minutes < _SHUTTLE_MIN_WINDOW:
            return TransferType.PRIVATE
        return TransferType.SHUTTLE
    if gap.classification == GapClassification.LOCAL_TRANSFER:
        return TransferType.TAXI
    return TransferType.PRIVATE


def _minutes_between(start: datetime, end: datetime) -> float:
    return (end - start).total_seconds() / 60


class GapFiller:
    """Inserts inferred transfers where the traveler would otherwise teleport."""

    def __init__(
        self,
        settings: Settings | None = None,
        analyzer: ContinuityAnalyzer | None = None,
        provider: EnrichmentProvider | None = None,
        metrics: MetricsClient | None = None,
    ):
        self.settings = settings or get_settings()
        self.analyzer = analyzer or ContinuityAnalyzer(self.settings, metrics=metrics)
        self.metrics = metrics
        self.executor = (
            EnrichmentExecutor(provider, self.settings.enrichment_timeout_s, metrics)
            if provider is not None
            else None
        )

    async def fill(self, segments: Sequence[Segment]) -> FillResult:
        """Return the segments with a connecting transfer in every actionable gap."""
        ordered = sort_segments(segments)
        used_ids = {segment.id for segment in ordered}
        output: list[Segment] = []
        inserted: list[Segment] = []
        actions: list[FillAction] = []
        messages: list[str] = []

        for current in ordered:
            if output:
                prev = output[-1]
                gap = self.analyzer.analyze_pair(prev, current, len(output) - 1, len(output))
                if gap is not None and is_actionable(gap):
                    if self.metrics:
                        self.metrics.inc_gap(gap.classification.value)
                    action, segment = await self._fill_gap(gap, prev, current, ordered, used_ids)
                    actions.append(action)
                    if self.metrics:
                        self.metrics.inc_fill_outcome(action.outcome.value)
                    if segment is not None:
                        used_ids.add(segment.id)
                        output.append(segment)
                        inserted.append(segment)
                    if action.tight_schedule:
                        messages.append(action.reason)
            output.append(current)

        # Provider results may carry their own times
        output = sort_segments(output)

        duplicates = sum(1 for a in actions if a.outcome == FillOutcome.duplicate)
        logger.info(
            f"Gap filling inserted {len(inserted)} segments "
            f"({duplicates} gaps already covered, {len(messages)} tight)"
        )
        record_fill_summary(
            segments_in=len(ordered),
            segments_out=len(output),
            inserted=len(inserted),
            duplicates=duplicates,
            tight=len(messages),
        )
        return FillResult(segments=output, inserted=inserted, actions=actions, warnings=messages)

    async def _fill_gap(
        self,
        gap: Gap,
        prev: Segment,
        next_: Segment,
        ordered: Sequence[Segment],
        used_ids: set[str],
    ) -> tuple[FillAction, Segment | None]:
        covering = self._find_covering_transfer(gap, prev, next_, ordered)
        if covering is not None:
            logger.debug(f"Gap {prev.id} -> {next_.id} already covered by {covering.id}")
            return (
                FillAction(
                    gap=gap,
                    outcome=FillOutcome.duplicate,
                    segment_id=covering.id,
                    reason=f"Existing transfer {covering.id} already covers this gap",
                ),
                None,
            )

        if (
            is_stationary(prev)
            and is_stationary(next_)
            and gap.available_window_minutes < self.settings.walking_threshold_min
        ):
            return (
                FillAction(
                    gap=gap,
                    outcome=FillOutcome.walking_distance,
                    reason=(
                        f"{gap.available_window_minutes} min between {segment_label(prev)} "
                        f"and {segment_label(next_)}; assumed walkable"
                    ),
                ),
                None,
            )

        if self.executor is not None:
            result = await self.executor.search(gap)
            if result.status == "success" and result.segment is not None:
                segment = self._mark_enriched(result.segment, gap, used_ids)
                return (
                    FillAction(
                        gap=gap,
                        outcome=FillOutcome.enriched,
                        segment_id=segment.id,
                        reason=f"Found {segment.type.value} for gap: {gap.description}",
                    ),
                    segment,
                )

        segment = self.create_placeholder_transfer(gap, prev, next_, used_ids)
        if segment.tight_schedule:
            reason = (
                f"Tight schedule: only {gap.available_window_minutes} min from "
                f"{gap.from_location.display_name()} to {gap.to_location.display_name()}"
            )
            logger.warning(reason)
            warnings.warn(reason, TightScheduleWarning, stacklevel=2)
            if self.metrics:
                self.metrics.inc_tight_schedule()
        else:
            reason = gap.description
        return (
            FillAction(
                gap=gap,
                outcome=FillOutcome.placeholder,
                segment_id=segment.id,
                tight_schedule=segment.tight_schedule,
                reason=reason,
            ),
            segment,
        )

    def _find_covering_transfer(
        self,
        gap: Gap,
        prev: Segment,
        next_: Segment,
        ordered: Sequence[Segment],
    ) -> TransferSegment | None:
        """An existing transfer near the boundary that already makes the trip."""
        matcher = self.analyzer.matcher
        for candidate in ordered:
            if not isinstance(candidate, TransferSegment):
                continue
            if candidate.id in (prev.id, next_.id):
                continue
            if candidate.start_datetime < prev.start_datetime:
                continue
            if candidate.end_datetime > next_.end_datetime:
                continue
            if matcher.is_same_location(
                candidate.pickup_location, gap.from_location
            ) and matcher.is_same_location(candidate.dropoff_location, gap.to_location):
                return candidate
        return None

    def _mark_enriched(self, segment: Segment, gap: Gap, used_ids: set[str]) -> Segment:
        update: dict = {"inferred": True}
        if not segment.inferred_reason:
            update["inferred_reason"] = gap.description
        if segment.id in used_ids:
            update["id"] = self._unique_id(
                f"inferred_{segment.type.value.lower()}_{gap.before_segment_id}_{gap.after_segment_id}",
                used_ids,
            )
        return segment.model_copy(update=update)

    @staticmethod
    def _unique_id(base: str, used_ids: set[str]) -> str:
        candidate = base
        suffix = 2
        while candidate in used_ids:
            candidate = f"{base}_{suffix}"
            suffix += 1
        return candidate

    def create_placeholder_transfer(
        self,
        gap: Gap,
        prev: Segment,
        next_: Segment,
        used_ids: set[str] | None = None,
    ) -> TransferSegment:
        """Build a placeholder TRANSFER spanning the buffered window of a gap."""
        classifier = self.analyzer.classifier
        prev_airport = classifier.is_airport_segment(prev)
        next_airport = classifier.is_airport_segment(next_)

        pre_buffer = (
            self.settings.airport_egress_buffer_min
            if prev_airport
            else self.settings.local_buffer_min
        )
        post_buffer = (
            self.settings.airport_ingress_buffer_min
            if next_airport
            else self.settings.local_buffer_min
        )

        start = gap.before_effective_end + timedelta(minutes=pre_buffer)
        end = gap.after_start - timedelta(minutes=post_buffer)
        window = _minutes_between(start, end)
        tight = False

        if window < self.settings.tight_schedule_min:
            # Never invert: fall back to the raw window
            start, end = gap.before_effective_end, gap.after_start
            tight = True
        elif window > self.settings.max_transfer_min:
            typical = timedelta(minutes=TYPICAL_TRANSFER_MINUTES.get(gap.classification, 60))
            if next_airport and not prev_airport:
                start = end - typical
            else:
                end = start + typical

        segment_id = self._unique_id(
            f"inferred_transfer_{prev.id}_{next_.id}", used_ids or set()
        )
        return TransferSegment(
            id=segment_id,
            start_datetime=start,
            end_datetime=end,
            status=SegmentStatus.TENTATIVE,
            depends_on=[prev.id],
            notes=PLACEHOLDER_NOTES,
            inferred=True,
            inferred_reason=gap.description,
            metadata={
                "gap_classification": gap.classification.value,
                "gap_confidence": gap.confidence,
            },
            pickup_location=gap.from_location,
            dropoff_location=gap.to_location,
            transfer_type=select_transfer_type(gap),
            tight_schedule=tight,
        )

    def prune_inferred_transfers(self, segments: Sequence[Segment]) -> list[Segment]:
        """Drop inferred transfers that are redundant.

        An inferred transfer goes when a neighboring source transfer already
        makes the same trip, or when its neighbors no longer need a
        connection, for example because the boundary became an overnight skip.
        """
        ordered = sort_segments(segments)
        kept: list[Segment] = []
        removed: list[str] = []

        for index, segment in enumerate(ordered):
            if not (isinstance(segment, TransferSegment) and segment.inferred):
                kept.append(segment)
                continue

            prev = kept[-1] if kept else None
            next_ = ordered[index + 1] if index + 1 < len(ordered) else None

            if self._repeats_source_transfer(segment, prev) or self._repeats_source_transfer(
                segment, next_
            ):
                removed.append(segment.id)
                continue

            if prev is not None and next_ is not None:
                gap = self.analyzer.analyze_pair(prev, next_)
                if gap is None or not is_actionable(gap):
                    removed.append(segment.id)
                    continue

            kept.append(segment)

        if removed:
            logger.info(f"Pruned {len(removed)} redundant inferred transfers: {removed}")
            dropped = set(removed)
            kept = [
                s.model_copy(update={"depends_on": [d for d in s.depends_on if d not in dropped]})
                if any(d in dropped for d in s.depends_on)
                else s
                for s in kept
            ]
        return kept

    def _repeats_source_transfer(
        self, inferred: TransferSegment, neighbor: Segment | None
    ) -> bool:
        """Whether a neighboring source transfer already makes the same trip."""
        if not isinstance(neighbor, TransferSegment) or neighbor.inferred:
            return False
        matcher = self.analyzer.matcher
        return matcher.is_same_location(
            neighbor.pickup_location, inferred.pickup_location
        ) or matcher.is_same_location(neighbor.dropoff_location, inferred.dropoff_location)
