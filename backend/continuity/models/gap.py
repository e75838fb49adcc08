"""Transient analysis models: gaps, inferred durations and location matches."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from .common import Confidence, GapClassification, Location


class InferredDuration(BaseModel):
    """A standard duration guessed for a segment lacking a meaningful end."""

    minutes: int = Field(gt=0, description="Inferred duration in minutes")
    confidence: Confidence = Field(description="Confidence in the inference")
    reason: str = Field(description="Human-readable reason for the inference")


class LocationMatch(BaseModel):
    """Outcome of comparing two locations, with the rule that decided it."""

    same: bool = Field(description="Whether the locations are the same place")
    rule: str = Field(description="Name of the cascade rule that decided")
    confidence: float = Field(
        ge=0.0, le=1.0, description="Confidence in the decision (0-1)"
    )


class Gap(BaseModel):
    """A location discontinuity between two chronologically adjacent segments."""

    before_segment_id: str = Field(description="Segment before the gap")
    after_segment_id: str = Field(description="Segment after the gap")
    from_location: Location = Field(description="End location of the earlier segment")
    to_location: Location = Field(description="Start location of the later segment")
    available_window_minutes: int = Field(
        description="Minutes between the earlier segment's effective end and the later start"
    )
    classification: GapClassification = Field(description="Gap category")
    inferred: bool = Field(
        default=False,
        description="True if the earlier segment's end time was inferred",
    )
    before_index: int = Field(description="Index of the earlier segment after sorting")
    after_index: int = Field(description="Index of the later segment after sorting")
    before_effective_end: datetime = Field(
        description="Effective end instant of the earlier segment"
    )
    after_start: datetime = Field(description="Start instant of the later segment")
    description: str = Field(default="", description="Human-readable description")
    confidence: int = Field(
        default=50, ge=0, le=100, description="Confidence (0-100) that a fill is needed"
    )
    suggested_type: Literal["FLIGHT", "TRANSFER"] = Field(
        default="TRANSFER", description="Segment type suggested to fill the gap"
    )
