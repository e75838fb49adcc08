"""Duration inference for segments without a meaningful end time.

Imported activities often carry only a start time (the end equals the
start, or sits a minute later). Continuity analysis needs a realistic end
instant, so we guess one from what the segment is: dinner takes about two
hours, an opera about three.
"""

import re
from dataclasses import dataclass
from datetime import datetime, timedelta

from backend.continuity.config import Settings, get_settings
from backend.continuity.models.common import Confidence, SegmentType
from backend.continuity.models.gap import InferredDuration
from backend.continuity.models.segment import (
    ActivitySegment,
    CustomSegment,
    MeetingSegment,
    Segment,
    get_start_location,
)


@dataclass(frozen=True)
class DurationRule:
    """One row of the inference table."""

    pattern: re.Pattern[str]
    minutes: int
    confidence: Confidence
    reason: str


def _rule(words: str, minutes: int, confidence: Confidence, reason: str) -> DurationRule:
    return DurationRule(
        pattern=re.compile(rf"\b(?:{words})\b", re.IGNORECASE),
        minutes=minutes,
        confidence=confidence,
        reason=reason,
    )


# Ordered: first match wins
DURATION_RULES: tuple[DurationRule, ...] = (
    # Meals
    _rule("breakfasts?", 60, Confidence.high, "Standard breakfast duration"),
    _rule("brunch(?:es)?", 90, Confidence.high, "Standard brunch duration"),
    _rule("lunch(?:es)?", 90, Confidence.high, "Standard lunch duration"),
    _rule("dinners?|supper", 120, Confidence.high, "Standard dinner duration"),
    _rule("cocktails?|drinks", 90, Confidence.medium, "Standard cocktail/drinks duration"),
    # Entertainment
    _rule("movies?|films?|cinema", 120, Confidence.high, "Standard movie duration"),
    _rule("opera|ballet", 180, Confidence.high, "Standard opera/ballet duration"),
    _rule(
        "concerts?|broadway|shows?|theatre|theater",
        150,
        Confidence.high,
        "Standard show/theater duration",
    ),
    # Activities
    _rule("wine tasting|vineyards?", 120, Confidence.medium, "Standard wine tasting duration"),
    _rule("cooking class(?:es)?|culinary", 180, Confidence.medium, "Standard cooking class duration"),
    _rule("tours?", 180, Confidence.medium, "Standard tour duration"),
    _rule(
        "museums?|gallery|galleries|exhibitions?",
        120,
        Confidence.medium,
        "Standard museum/gallery visit duration",
    ),
    _rule("spa|massages?", 120, Confidence.medium, "Standard spa/massage duration"),
    _rule("golf", 240, Confidence.medium, "Standard golf round duration"),
    _rule("hikes?|hiking", 180, Confidence.medium, "Standard hiking duration"),
    _rule("shopping", 120, Confidence.medium, "Standard shopping duration"),
    _rule("meetings?", 60, Confidence.medium, "Standard meeting duration"),
    _rule(
        "workshops?|class(?:es)?|lessons?",
        120,
        Confidence.medium,
        "Standard workshop/class duration",
    ),
    _rule(
        "sporting event|games?|match(?:es)?",
        180,
        Confidence.medium,
        "Standard sporting event duration",
    ),
)

_MEETING_DURATION = InferredDuration(
    minutes=60, confidence=Confidence.medium, reason="Standard meeting duration"
)

# Conveyances carry their own schedule
_SCHEDULED_TYPES = frozenset({SegmentType.FLIGHT, SegmentType.TRANSFER})


def searchable_text(segment: Segment) -> str:
    """Concatenate the descriptive fields of a segment."""
    parts: list[str | None] = []
    if isinstance(segment, ActivitySegment):
        parts.extend([segment.name, segment.description, segment.category])
    elif isinstance(segment, MeetingSegment):
        parts.extend([segment.title, segment.agenda])
    elif isinstance(segment, CustomSegment):
        parts.append(segment.title)

    location = get_start_location(segment)
    if location is not None and segment.type not in _SCHEDULED_TYPES:
        parts.append(location.name)
    parts.append(segment.notes)
    return " ".join(part for part in parts if part)


class DurationInferencer:
    """Infers standard durations and effective end times."""

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()

    def infer_activity_duration(self, segment: Segment) -> InferredDuration:
        """Guess a standard duration from the segment's descriptive text.

        Deterministic: the same segment always yields the same result.
        """
        text = searchable_text(segment)
        for rule in DURATION_RULES:
            if rule.pattern.search(text):
                return InferredDuration(
                    minutes=rule.minutes, confidence=rule.confidence, reason=rule.reason
                )

        if segment.type == SegmentType.MEETING:
            return _MEETING_DURATION

        return InferredDuration(
            minutes=self.settings.default_activity_min,
            confidence=Confidence.low,
            reason="Default duration for unknown activity type",
        )

    def is_end_inferred(self, segment: Segment) -> bool:
        """Whether the recorded duration is too short to trust."""
        if segment.type in _SCHEDULED_TYPES:
            return False
        return segment.duration_minutes < self.settings.meaningful_duration_min

    def get_effective_end_time(self, segment: Segment) -> datetime:
        """Recorded end when meaningful, otherwise start plus the inferred duration."""
        if not self.is_end_inferred(segment):
            return segment.end_datetime
        inferred = self.infer_activity_duration(segment)
        return segment.start_datetime + timedelta(minutes=inferred.minutes)
