"""Segment models: a tagged union over segment types plus the location accessors."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field, TypeAdapter, field_validator, model_validator

from .common import (
    BACKGROUND_TYPES,
    EXCLUSIVE_TYPES,
    STATIONARY_TYPES,
    Location,
    SegmentStatus,
    SegmentType,
    TransferType,
)


class BaseSegment(BaseModel):
    """Fields shared by every segment type."""

    id: str = Field(description="Unique segment identifier")
    start_datetime: datetime = Field(description="Start date and time")
    end_datetime: datetime = Field(description="End date and time")
    status: SegmentStatus = Field(
        default=SegmentStatus.TENTATIVE, description="Booking status"
    )
    depends_on: list[str] = Field(
        default_factory=list, description="Segment IDs this segment depends on"
    )
    notes: str | None = Field(default=None, description="Free-form notes")
    inferred: bool = Field(
        default=False,
        description="True if synthesized to fill a gap rather than read from a source",
    )
    inferred_reason: str | None = Field(
        default=None, description="Why the segment was synthesized"
    )
    metadata: dict[str, Any] = Field(
        default_factory=dict, description="Additional metadata"
    )

    @field_validator("id")
    @classmethod
    def validate_id(cls, v: str) -> str:
        """Ensure the identifier is not blank."""
        if not v or not v.strip():
            raise ValueError("Segment id must not be empty")
        return v

    @model_validator(mode="after")
    def validate_time_range(self) -> BaseSegment:
        """Ensure the segment ends after it starts."""
        if (self.start_datetime.tzinfo is None) != (self.end_datetime.tzinfo is None):
            raise ValueError(
                f"Segment {self.id}: start and end must both carry a timezone or neither"
            )
        if self.end_datetime <= self.start_datetime:
            raise ValueError(
                f"Segment {self.id}: end {self.end_datetime.isoformat()} "
                f"must be after start {self.start_datetime.isoformat()}"
            )
        return self

    @property
    def duration_minutes(self) -> float:
        """Recorded duration in minutes."""
        return (self.end_datetime - self.start_datetime).total_seconds() / 60


class FlightSegment(BaseSegment):
    """A flight between two airports."""

    type: Literal[SegmentType.FLIGHT] = SegmentType.FLIGHT
    origin: Location = Field(description="Departure airport")
    destination: Location = Field(description="Arrival airport")
    airline: str | None = Field(default=None, description="Operating airline")
    flight_number: str | None = Field(default=None, description="Flight number")


class TransferSegment(BaseSegment):
    """Ground transportation between two places."""

    type: Literal[SegmentType.TRANSFER] = SegmentType.TRANSFER
    pickup_location: Location = Field(description="Pickup location")
    dropoff_location: Location = Field(description="Drop-off location")
    transfer_type: TransferType = Field(
        default=TransferType.OTHER, description="Vehicle type"
    )
    tight_schedule: bool = Field(
        default=False,
        description="True if the transfer window is shorter than comfortable",
    )


class HotelSegment(BaseSegment):
    """A lodging stay."""

    type: Literal[SegmentType.HOTEL] = SegmentType.HOTEL
    location: Location = Field(description="Hotel location")
    property_name: str | None = Field(default=None, description="Hotel property name")


class MeetingSegment(BaseSegment):
    """A business meeting."""

    type: Literal[SegmentType.MEETING] = SegmentType.MEETING
    location: Location = Field(description="Meeting location")
    title: str | None = Field(default=None, description="Meeting title")
    agenda: str | None = Field(default=None, description="Meeting agenda")


class ActivitySegment(BaseSegment):
    """A tour, meal, show or other planned activity."""

    type: Literal[SegmentType.ACTIVITY] = SegmentType.ACTIVITY
    location: Location = Field(description="Activity location")
    name: str = Field(description="Activity name")
    description: str | None = Field(default=None, description="Activity description")
    category: str | None = Field(default=None, description="Activity category")


class CustomSegment(BaseSegment):
    """Anything that doesn't fit the other types."""

    type: Literal[SegmentType.CUSTOM] = SegmentType.CUSTOM
    location: Location | None = Field(default=None, description="Optional location")
    title: str | None = Field(default=None, description="Custom segment title")


Segment = Annotated[
    FlightSegment
    | TransferSegment
    | HotelSegment
    | MeetingSegment
    | ActivitySegment
    | CustomSegment,
    Field(discriminator="type"),
]

SEGMENT_ADAPTER: TypeAdapter[Segment] = TypeAdapter(Segment)


LocationAccessor = Callable[[Any], Location | None]

# One row per segment type: (start location, end location)
_LOCATION_ACCESSORS: dict[SegmentType, tuple[LocationAccessor, LocationAccessor]] = {
    SegmentType.FLIGHT: (lambda s: s.origin, lambda s: s.destination),
    SegmentType.TRANSFER: (lambda s: s.pickup_location, lambda s: s.dropoff_location),
    SegmentType.HOTEL: (lambda s: s.location, lambda s: s.location),
    SegmentType.MEETING: (lambda s: s.location, lambda s: s.location),
    SegmentType.ACTIVITY: (lambda s: s.location, lambda s: s.location),
    SegmentType.CUSTOM: (lambda s: s.location, lambda s: s.location),
}


def get_start_location(segment: Segment) -> Location | None:
    """Where the traveler is when the segment starts."""
    start, _ = _LOCATION_ACCESSORS[segment.type]
    return start(segment)


def get_end_location(segment: Segment) -> Location | None:
    """Where the traveler is when the segment ends."""
    _, end = _LOCATION_ACCESSORS[segment.type]
    return end(segment)


def is_background(segment: Segment) -> bool:
    """Background segments may coexist in time with others."""
    return segment.type in BACKGROUND_TYPES


def is_exclusive(segment: Segment) -> bool:
    """Exclusive segments may not overlap one another."""
    return segment.type in EXCLUSIVE_TYPES


def is_stationary(segment: Segment) -> bool:
    """Stationary segments begin and end at the same place."""
    return segment.type in STATIONARY_TYPES


def parse_segment(data: dict[str, Any] | Segment) -> Segment:
    """Validate a raw mapping into the matching segment model."""
    if isinstance(data, BaseSegment):
        return data
    return SEGMENT_ADAPTER.validate_python(data)


def segment_label(segment: Segment) -> str:
    """Short human-readable label for logs and messages."""
    if isinstance(segment, ActivitySegment):
        return segment.name
    if isinstance(segment, HotelSegment) and segment.property_name:
        return segment.property_name
    if isinstance(segment, MeetingSegment | CustomSegment) and segment.title:
        return segment.title
    if isinstance(segment, FlightSegment) and segment.flight_number:
        return f"Flight {segment.flight_number}"
    location = get_start_location(segment)
    if location is not None:
        return f"{segment.type.value.title()} at {location.name}"
    return f"{segment.type.value.title()} {segment.id}"
