"""In-process metrics registry for continuity analysis."""

from collections import defaultdict
from typing import Literal

EnrichmentOutcome = Literal["success", "empty", "timeout", "error"]


class MetricsClient:
    """
    Simple in-process metrics client for tracking engine decisions.

    Stores metrics in memory for testing and internal monitoring.
    Can be replaced with Prometheus/OpenTelemetry in the future.
    """

    def __init__(self) -> None:
        # Gaps detected: classification -> count
        self.gap_counts: dict[str, int] = defaultdict(int)

        # Gap filler decisions: outcome -> count
        self.fill_outcomes: dict[str, int] = defaultdict(int)

        # Transfers inserted with a tight window
        self.tight_schedules_total: int = 0

        # Enrichment observations: list of (outcome, latency_ms)
        self.enrichment_latencies: list[tuple[str, int]] = []

        # Dependency graph
        self.conflicts_total: int = 0
        self.cycles_rejected_total: int = 0
        self.missing_dependencies_total: int = 0

        # Cascade shifts: list of moved-segment counts per shift
        self.shift_sizes: list[int] = []
        self.shift_blocked_total: int = 0

    def inc_gap(self, classification: str) -> None:
        """Increment gap counter for a classification."""
        self.gap_counts[classification] += 1

    def inc_fill_outcome(self, outcome: str) -> None:
        """Increment gap filler decision counter."""
        self.fill_outcomes[outcome] += 1

    def inc_tight_schedule(self) -> None:
        """Increment tight-schedule counter."""
        self.tight_schedules_total += 1

    def observe_enrichment(self, outcome: EnrichmentOutcome, latency_ms: int) -> None:
        """Record an enrichment call outcome and latency."""
        self.enrichment_latencies.append((outcome, latency_ms))

    def inc_conflict(self, count: int = 1) -> None:
        """Increment time-conflict counter."""
        self.conflicts_total += count

    def inc_cycle_rejected(self) -> None:
        """Increment rejected-cycle counter."""
        self.cycles_rejected_total += 1

    def inc_missing_dependency(self, count: int = 1) -> None:
        """Increment dangling-dependency counter."""
        self.missing_dependencies_total += count

    def observe_shift(self, moved: int, blocked: int) -> None:
        """Record a cascade shift."""
        self.shift_sizes.append(moved)
        self.shift_blocked_total += blocked

    def get_enrichment_stats(self) -> dict[str, float]:
        """Get enrichment outcome counts and latency statistics."""
        if not self.enrichment_latencies:
            return {"count": 0, "success_rate": 0.0, "min": 0, "max": 0, "avg": 0}

        latencies = [lat for _, lat in self.enrichment_latencies]
        successes = sum(1 for outcome, _ in self.enrichment_latencies if outcome == "success")
        return {
            "count": len(latencies),
            "success_rate": successes / len(latencies),
            "min": min(latencies),
            "max": max(latencies),
            "avg": sum(latencies) / len(latencies),
        }

    def get_enrichment_count(self, outcome: EnrichmentOutcome | None = None) -> int:
        """Get enrichment call count, optionally filtered by outcome."""
        if outcome:
            return sum(1 for o, _ in self.enrichment_latencies if o == outcome)
        return len(self.enrichment_latencies)

    def reset(self) -> None:
        """Reset all metrics (useful for testing)."""
        self.gap_counts.clear()
        self.fill_outcomes.clear()
        self.tight_schedules_total = 0
        self.enrichment_latencies.clear()
        self.conflicts_total = 0
        self.cycles_rejected_total = 0
        self.missing_dependencies_total = 0
        self.shift_sizes.clear()
        self.shift_blocked_total = 0
