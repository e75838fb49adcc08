"""Semantic review - aggregate continuity and scheduling problems.

Pure function that reviews a segment collection for:
- Location gaps that still need a connecting segment
- Overlapping conveyances (flights and transfers)
- Transfers squeezed into a tight window
- Dependency cycles
"""

from collections.abc import Sequence
from datetime import UTC, datetime

from backend.continuity.config import Settings, get_settings
from backend.continuity.errors import CycleError
from backend.continuity.graph.dependency_graph import DependencyGraph
from backend.continuity.metrics.registry import MetricsClient
from backend.continuity.models.results import ReviewIssue, ReviewResult, ReviewSeverity
from backend.continuity.models.segment import Segment, TransferSegment
from backend.continuity.planning.continuity import ContinuityAnalyzer


def _gap_severity(confidence: int) -> ReviewSeverity:
    if confidence >= 90:
        return ReviewSeverity.HIGH
    if confidence >= 80:
        return ReviewSeverity.MEDIUM
    return ReviewSeverity.LOW


def review_itinerary(
    segments: Sequence[Segment],
    settings: Settings | None = None,
    metrics: MetricsClient | None = None,
) -> ReviewResult:
    """Review segments and summarize every issue found.

    Args:
        segments: Segments in any order
        settings: Optional engine settings
        metrics: Optional metrics client for telemetry

    Returns:
        ReviewResult; valid when no issue was found
    """
    settings = settings or get_settings()
    issues: list[ReviewIssue] = []

    analyzer = ContinuityAnalyzer(settings, metrics=metrics)
    for gap in analyzer.detect_location_gaps(segments):
        issues.append(
            ReviewIssue(
                kind="location_gap",
                severity=_gap_severity(gap.confidence),
                description=gap.description,
                segment_ids=[gap.before_segment_id, gap.after_segment_id],
            )
        )

    graph = DependencyGraph(segments, settings=settings, metrics=metrics)
    for conflict in graph.detect_conflicts():
        issues.append(
            ReviewIssue(
                kind="time_conflict",
                severity=ReviewSeverity.HIGH,
                description=conflict.description,
                segment_ids=[conflict.first_segment_id, conflict.second_segment_id],
            )
        )

    try:
        graph.topological_order()
    except CycleError as e:
        issues.append(
            ReviewIssue(
                kind="dependency_cycle",
                severity=ReviewSeverity.HIGH,
                description=str(e),
                segment_ids=e.segment_ids,
            )
        )

    for segment in segments:
        if isinstance(segment, TransferSegment) and segment.tight_schedule:
            issues.append(
                ReviewIssue(
                    kind="tight_schedule",
                    severity=ReviewSeverity.MEDIUM,
                    description=(
                        f"Transfer {segment.id} from {segment.pickup_location.name} to "
                        f"{segment.dropoff_location.name} has a tight schedule"
                    ),
                    segment_ids=[segment.id],
                )
            )

    return ReviewResult(
        valid=not issues,
        issues=issues,
        summary=build_summary(issues),
        reviewed_at=datetime.now(UTC),
    )


def build_summary(issues: Sequence[ReviewIssue]) -> str:
    """Human-readable summary of review issues."""
    if not issues:
        return "No issues detected. Itinerary structure is valid."

    counts = {
        severity: sum(1 for issue in issues if issue.severity == severity)
        for severity in ReviewSeverity
    }
    labels = {
        ReviewSeverity.HIGH: "requires immediate attention",
        ReviewSeverity.MEDIUM: "should be reviewed",
        ReviewSeverity.LOW: "minor issues",
    }

    lines = [f"Found {len(issues)} issue(s):"]
    for severity in ReviewSeverity:
        if counts[severity]:
            lines.append(f"  - {counts[severity]} {severity.value} severity ({labels[severity]})")

    lines.append("")
    lines.append("Issues:")
    for index, issue in enumerate(issues, start=1):
        lines.append(f"  {index}. [{issue.severity.value}] {issue.description}")

    return "\n".join(lines)
