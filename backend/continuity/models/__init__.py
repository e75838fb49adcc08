"""Convenient imports for all model types."""

# Common types and enums
from .common import (
    Address,
    Confidence,
    Coordinates,
    GapClassification,
    Location,
    SegmentStatus,
    SegmentType,
    TransferType,
)

# Analysis models
from .gap import Gap, InferredDuration, LocationMatch

# Itinerary snapshot
from .itinerary import Itinerary

# Result models
from .results import (
    Conflict,
    ContinuityReport,
    FillAction,
    FillOutcome,
    FillResult,
    GraphError,
    GraphReport,
    ReviewIssue,
    ReviewResult,
    ReviewSeverity,
    ShiftResult,
    ShiftWarning,
)

# Segment models
from .segment import (
    ActivitySegment,
    BaseSegment,
    CustomSegment,
    FlightSegment,
    HotelSegment,
    MeetingSegment,
    Segment,
    TransferSegment,
    get_end_location,
    get_start_location,
    is_background,
    is_exclusive,
    is_stationary,
    parse_segment,
)

__all__ = [
    # Common
    "Address",
    "Confidence",
    "Coordinates",
    "GapClassification",
    "Location",
    "SegmentStatus",
    "SegmentType",
    "TransferType",
    # Analysis
    "Gap",
    "InferredDuration",
    "LocationMatch",
    # Itinerary
    "Itinerary",
    # Results
    "Conflict",
    "ContinuityReport",
    "FillAction",
    "FillOutcome",
    "FillResult",
    "GraphError",
    "GraphReport",
    "ReviewIssue",
    "ReviewResult",
    "ReviewSeverity",
    "ShiftResult",
    "ShiftWarning",
    # Segments
    "ActivitySegment",
    "BaseSegment",
    "CustomSegment",
    "FlightSegment",
    "HotelSegment",
    "MeetingSegment",
    "Segment",
    "TransferSegment",
    "get_end_location",
    "get_start_location",
    "is_background",
    "is_exclusive",
    "is_stationary",
    "parse_segment",
]
