"""Error taxonomy for the continuity engine."""

from __future__ import annotations

from collections.abc import Sequence


class ContinuityError(Exception):
    """Base class for engine errors."""


class SegmentValidationError(ContinuityError, ValueError):
    """Raised when a segment or itinerary is malformed.

    Malformed input is never corrected silently.
    """

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class CycleError(ContinuityError):
    """Raised when a dependency would create (or already forms) a cycle."""

    def __init__(self, message: str, segment_ids: Sequence[str] = ()) -> None:
        super().__init__(message)
        self.segment_ids = list(segment_ids)


class EnrichmentTimeout(ContinuityError):
    """Enrichment search exceeded its time budget.

    Recovered inside the gap filler; never reaches callers.
    """


class TightScheduleWarning(UserWarning):
    """A gap was filled with less time than a comfortable transfer needs."""
