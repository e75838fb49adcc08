"""Itinerary snapshot model handed to the engine by the calling service."""

from __future__ import annotations

from datetime import date, datetime, time

from pydantic import BaseModel, Field, model_validator

from .segment import Segment


class Itinerary(BaseModel):
    """Ordered segment collection with an optional date range.

    The engine treats an itinerary as an immutable input and returns new
    segment collections; persistence belongs to the caller.
    """

    id: str | None = Field(default=None, description="Itinerary identifier")
    segments: list[Segment] = Field(
        default_factory=list, description="Segments in caller order"
    )
    start_date: date | None = Field(default=None, description="First day of the trip")
    end_date: date | None = Field(default=None, description="Last day of the trip")

    @model_validator(mode="after")
    def validate_date_range(self) -> Itinerary:
        """Ensure every segment falls inside the itinerary dates."""
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError(
                f"Itinerary end date {self.end_date} precedes start date {self.start_date}"
            )
        for segment in self.segments:
            if not self.contains(segment.start_datetime, segment.end_datetime):
                raise ValueError(
                    f"Segment {segment.id} falls outside the itinerary date range"
                )
        return self

    def contains(self, start: datetime, end: datetime) -> bool:
        """Whether a datetime range lies within the itinerary dates."""
        if self.start_date and start.date() < self.start_date:
            return False
        if self.end_date and end.date() > self.end_date:
            # An end exactly at midnight after the last day still belongs to it
            if not (end.time() == time(0, 0) and (end.date() - self.end_date).days == 1):
                return False
        return True
