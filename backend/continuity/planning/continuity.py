"""Continuity analysis: find location discontinuities between adjacent segments."""

import logging
from collections.abc import Sequence

from backend.continuity.config import Settings, get_settings
from backend.continuity.matching.location_matcher import LocationMatcher
from backend.continuity.metrics.registry import MetricsClient
from backend.continuity.models.common import GapClassification, SegmentType
from backend.continuity.models.gap import Gap
from backend.continuity.models.segment import (
    Segment,
    get_end_location,
    get_start_location,
)
from backend.continuity.planning.classifier import GapClassifier
from backend.continuity.planning.duration import DurationInferencer

logger = logging.getLogger(__name__)

# Classifications that do not call for a connecting segment
_NON_ACTIONABLE = frozenset({GapClassification.NONE, GapClassification.SKIP_OVERNIGHT})


def sort_segments(segments: Sequence[Segment]) -> list[Segment]:
    """Chronological order by start; ties keep their original order."""
    return sorted(segments, key=lambda segment: segment.start_datetime)


def is_actionable(gap: Gap) -> bool:
    """Whether a gap calls for a connecting segment."""
    return gap.classification not in _NON_ACTIONABLE


class ContinuityAnalyzer:
    """Detects and classifies gaps between chronologically adjacent segments."""

    def __init__(
        self,
        settings: Settings | None = None,
        matcher: LocationMatcher | None = None,
        classifier: GapClassifier | None = None,
        durations: DurationInferencer | None = None,
        metrics: MetricsClient | None = None,
    ):
        self.settings = settings or get_settings()
        self.matcher = matcher or LocationMatcher(self.settings)
        self.classifier = classifier or GapClassifier(self.settings, self.matcher)
        self.durations = durations or DurationInferencer(self.settings)
        self.metrics = metrics

    def analyze_pair(
        self,
        prev: Segment,
        next_: Segment,
        before_index: int = 0,
        after_index: int = 1,
    ) -> Gap | None:
        """Analyze one boundary.

        Returns None when either side has no location; otherwise a Gap whose
        classification may be NONE or SKIP_OVERNIGHT.
        """
        from_location = get_end_location(prev)
        to_location = get_start_location(next_)
        if from_location is None or to_location is None:
            return None

        effective_end = self.durations.get_effective_end_time(prev)
        window = (next_.start_datetime - effective_end).total_seconds() / 60
        airport_adjacent = self.classifier.is_airport_segment(
            prev
        ) or self.classifier.is_airport_segment(next_)
        hotel_to_hotel = prev.type == SegmentType.HOTEL and next_.type == SegmentType.HOTEL

        classification = self.classifier.classify_gap(
            from_location,
            to_location,
            window,
            is_overnight=self.classifier.is_overnight_gap(effective_end, next_.start_datetime),
            airport_adjacent=airport_adjacent,
            hotel_to_hotel=hotel_to_hotel,
        )

        return Gap(
            before_segment_id=prev.id,
            after_segment_id=next_.id,
            from_location=from_location,
            to_location=to_location,
            available_window_minutes=int(window),
            classification=classification,
            inferred=self.durations.is_end_inferred(prev),
            before_index=before_index,
            after_index=after_index,
            before_effective_end=effective_end,
            after_start=next_.start_datetime,
            description=self.classifier.describe_gap(
                from_location, to_location, classification
            ),
            confidence=self.classifier.gap_confidence(classification, prev, next_),
            suggested_type=self.classifier.suggest_segment_type(classification),
        )

    def detect_location_gaps(self, segments: Sequence[Segment]) -> list[Gap]:
        """Gaps needing a connecting segment, in chronological order."""
        ordered = sort_segments(segments)
        gaps: list[Gap] = []

        for i in range(len(ordered) - 1):
            gap = self.analyze_pair(ordered[i], ordered[i + 1], i, i + 1)
            if gap is None:
                continue
            if self.metrics:
                self.metrics.inc_gap(gap.classification.value)
            if is_actionable(gap):
                gaps.append(gap)

        logger.info(
            f"Detected {len(gaps)} location gaps across {len(ordered)} segments"
        )
        return gaps
