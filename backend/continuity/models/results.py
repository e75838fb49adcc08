"""Result models returned across the engine's public boundary."""

from __future__ import annotations

from datetime import datetime, timedelta
from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field

from .gap import Gap
from .segment import Segment


class FillOutcome(str, Enum):
    """What the gap filler did for one gap."""

    placeholder = "placeholder"
    enriched = "enriched"
    duplicate = "duplicate"
    walking_distance = "walking_distance"


class FillAction(BaseModel):
    """A single gap-filling decision."""

    gap: Gap = Field(description="Gap that was considered")
    outcome: FillOutcome = Field(description="Decision taken")
    segment_id: str | None = Field(
        default=None,
        description="Inserted segment, or the existing transfer that already covers the gap",
    )
    tight_schedule: bool = Field(
        default=False, description="Whether the inserted transfer has a tight window"
    )
    reason: str = Field(description="Human-readable explanation for this decision")


class FillResult(BaseModel):
    """Result of running the gap filler over a segment collection."""

    segments: list[Segment] = Field(
        description="Chronologically ordered segments with inferred transfers inserted"
    )
    inserted: list[Segment] = Field(description="Segments that were synthesized")
    actions: list[FillAction] = Field(description="One decision per actionable gap")
    warnings: list[str] = Field(
        default_factory=list, description="Non-fatal warnings such as tight schedules"
    )

    @property
    def inserted_count(self) -> int:
        """Number of synthesized segments."""
        return len(self.inserted)


class Conflict(BaseModel):
    """Two exclusive segments whose time ranges overlap."""

    first_segment_id: str = Field(description="Earlier-starting segment")
    second_segment_id: str = Field(description="Later-starting segment")
    overlap_minutes: int = Field(description="Length of the overlap in minutes")
    description: str = Field(description="Human-readable description")


class ShiftWarning(BaseModel):
    """A cascaded shift that was not applied."""

    segment_id: str = Field(description="Segment that could not be moved")
    reason: str = Field(description="Why the shift stopped here")
    blocked_segment_ids: list[str] = Field(
        default_factory=list,
        description="Dependents left in place because this segment did not move",
    )


class ShiftResult(BaseModel):
    """Result of moving a segment and cascading to its dependents."""

    segments: list[Segment] = Field(description="Segments after the shift")
    shifted_ids: list[str] = Field(description="Segments that moved, in cascade order")
    delta: timedelta = Field(description="Time delta applied")
    warnings: list[ShiftWarning] = Field(
        default_factory=list, description="Shifts stopped at itinerary bounds"
    )

    @property
    def complete(self) -> bool:
        """True if every dependent moved."""
        return not self.warnings


class GraphError(BaseModel):
    """A structural failure returned as a value at the public boundary."""

    kind: Literal["cycle", "missing_segment"] = Field(description="Failure category")
    message: str = Field(description="Human-readable message")
    segment_ids: list[str] = Field(
        default_factory=list, description="Segments involved in the failure"
    )


class GraphReport(BaseModel):
    """Ordering and conflict analysis of a segment collection."""

    order: list[str] = Field(
        default_factory=list, description="Segment IDs in a valid dependency order"
    )
    conflicts: list[Conflict] = Field(
        default_factory=list, description="Overlapping exclusive segments"
    )
    missing_dependencies: dict[str, list[str]] = Field(
        default_factory=dict,
        description="Segment id -> depends_on ids that are not in the collection",
    )
    error: GraphError | None = Field(
        default=None, description="Structural failure, if any"
    )

    @property
    def ok(self) -> bool:
        """True when ordering succeeded and nothing conflicts."""
        return self.error is None and not self.conflicts


class ReviewSeverity(str, Enum):
    """Severity of a review issue."""

    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


class ReviewIssue(BaseModel):
    """A problem found while reviewing an itinerary."""

    kind: Literal["location_gap", "time_conflict", "tight_schedule", "dependency_cycle"]
    severity: ReviewSeverity
    description: str
    segment_ids: list[str] = Field(default_factory=list)


class ReviewResult(BaseModel):
    """Aggregated review of a segment collection."""

    valid: bool
    issues: list[ReviewIssue]
    summary: str
    reviewed_at: datetime


class ContinuityReport(BaseModel):
    """Everything the engine learned about one itinerary."""

    fill: FillResult = Field(description="Gap filling outcome")
    graph: GraphReport = Field(description="Ordering and conflicts after filling")
    review: ReviewResult = Field(description="Review of the filled segments")
