"""Gap classification: what kind of connection a discontinuity needs."""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from backend.continuity.config import Settings, get_settings
from backend.continuity.matching.location_matcher import LocationMatcher
from backend.continuity.models.common import GapClassification, Location, SegmentType
from backend.continuity.models.segment import Segment, TransferSegment

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GapContext:
    """Facts about one boundary that the classification rules read."""

    same_location: bool
    window_minutes: float
    overnight: bool
    airport_adjacent: bool
    hotel_to_hotel: bool
    same_city: bool | None  # None when either city is unknown


ClassificationRule = tuple[GapClassification, Callable[[GapContext], bool]]

# Ordered: first match wins
CLASSIFICATION_RULES: tuple[ClassificationRule, ...] = (
    (
        GapClassification.NONE,
        lambda ctx: ctx.same_location or ctx.window_minutes <= 0,
    ),
    (
        GapClassification.SKIP_OVERNIGHT,
        lambda ctx: ctx.overnight
        and not (ctx.airport_adjacent or ctx.hotel_to_hotel)
        and ctx.same_city is not False,
    ),
    (GapClassification.AIRPORT_TRANSFER, lambda ctx: ctx.airport_adjacent),
    (GapClassification.LOCAL_TRANSFER, lambda ctx: ctx.same_city is True),
    (GapClassification.TRAVEL_DAY, lambda ctx: True),
)


def _is_airport_location(location: Location) -> bool:
    if location.code and len(location.code) == 3 and location.code.isalpha():
        return True
    return "airport" in location.name.lower()


class GapClassifier:
    """Classifies discontinuities between adjacent segments."""

    def __init__(
        self,
        settings: Settings | None = None,
        matcher: LocationMatcher | None = None,
    ):
        self.settings = settings or get_settings()
        self.matcher = matcher or LocationMatcher(self.settings)

    def is_overnight_gap(self, end_dt: datetime, start_dt: datetime) -> bool:
        """Whether the traveler naturally sleeps between the two instants.

        Evening (18:00 or later) to next-day morning or midday (before
        14:00), or a same-day gap longer than eight hours.
        """
        if end_dt.date() != start_dt.date():
            return (
                end_dt.hour >= self.settings.overnight_evening_hour
                and start_dt.hour < self.settings.overnight_morning_cutoff_hour
            )
        hours = (start_dt - end_dt).total_seconds() / 3600
        return hours > self.settings.overnight_same_day_hours

    @staticmethod
    def is_airport_segment(segment: Segment) -> bool:
        """FLIGHT, or a TRANSFER touching an airport."""
        if segment.type == SegmentType.FLIGHT:
            return True
        if isinstance(segment, TransferSegment):
            return _is_airport_location(segment.pickup_location) or _is_airport_location(
                segment.dropoff_location
            )
        return False

    def classify_gap(
        self,
        prev_end: Location,
        next_start: Location,
        time_gap_minutes: float,
        is_overnight: bool,
        airport_adjacent: bool,
        hotel_to_hotel: bool = False,
    ) -> GapClassification:
        """Classify a boundary between two locations."""
        ctx = GapContext(
            same_location=self.matcher.is_same_location(prev_end, next_start),
            window_minutes=time_gap_minutes,
            overnight=is_overnight,
            airport_adjacent=airport_adjacent,
            hotel_to_hotel=hotel_to_hotel,
            same_city=self.matcher.same_city(prev_end, next_start),
        )
        for classification, applies in CLASSIFICATION_RULES:
            if applies(ctx):
                logger.debug(
                    f"Gap {prev_end.name!r} -> {next_start.name!r} "
                    f"({time_gap_minutes:.0f} min) classified {classification.value}"
                )
                return classification
        return GapClassification.TRAVEL_DAY

    def gap_confidence(
        self,
        classification: GapClassification,
        prev_segment: Segment,
        next_segment: Segment,
    ) -> int:
        """Confidence (0-100) that the gap really needs a connecting segment."""
        prev_airport = self.is_airport_segment(prev_segment)
        next_airport = self.is_airport_segment(next_segment)
        prev_hotel = prev_segment.type == SegmentType.HOTEL
        next_hotel = next_segment.type == SegmentType.HOTEL
        travel_day = classification == GapClassification.TRAVEL_DAY

        if prev_airport and next_airport and travel_day:
            return 95
        if prev_airport and next_segment.type in (SegmentType.HOTEL, SegmentType.ACTIVITY):
            return 95
        if next_airport and prev_segment.type in (SegmentType.HOTEL, SegmentType.ACTIVITY):
            return 95
        if prev_hotel and next_hotel and travel_day:
            return 90
        if prev_hotel and not next_hotel and not next_airport:
            return 85
        if next_hotel and not prev_hotel and not prev_airport:
            return 85
        if classification == GapClassification.LOCAL_TRANSFER:
            return 80
        if travel_day:
            return 60
        return 50

    def describe_gap(
        self,
        from_location: Location,
        to_location: Location,
        classification: GapClassification,
    ) -> str:
        """Human-readable description of a gap."""
        src = from_location.display_name()
        dst = to_location.display_name()

        if classification == GapClassification.LOCAL_TRANSFER:
            return f"Local transfer needed from {src} to {dst}"
        if classification == GapClassification.AIRPORT_TRANSFER:
            return f"Airport transfer needed from {src} to {dst}"
        if classification == GapClassification.SKIP_OVERNIGHT:
            return f"Overnight gap between {src} and {dst} (no direct transfer needed)"
        if classification == GapClassification.NONE:
            return f"No gap between {src} and {dst}"

        src_country = self.matcher.resolve_country(from_location)
        dst_country = self.matcher.resolve_country(to_location)
        if src_country and dst_country:
            if src_country != dst_country:
                return f"International flight needed from {src} to {dst}"
            return f"Domestic transportation needed from {src} to {dst}"
        return f"Transportation gap between {src} and {dst}"

    @staticmethod
    def suggest_segment_type(classification: GapClassification) -> str:
        """FLIGHT for travel days, TRANSFER otherwise."""
        if classification == GapClassification.TRAVEL_DAY:
            return "FLIGHT"
        return "TRANSFER"
