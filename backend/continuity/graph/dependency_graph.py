"""Dependency graph over itinerary segments.

Segments live in a flat list (the arena) and are addressed by index.
Edges are ``(from_index, to_index)`` pairs meaning "to depends on from".
Edges come from two places: explicit ``depends_on`` references, and
implicit chronological links where one segment starts shortly after
another ends.
"""

from __future__ import annotations

import heapq
import logging
from collections import defaultdict
from collections.abc import Iterable, Sequence
from datetime import date, timedelta
from typing import TYPE_CHECKING

from pydantic import ValidationError

from backend.continuity.config import Settings, get_settings
from backend.continuity.errors import CycleError, SegmentValidationError
from backend.continuity.models.itinerary import Itinerary
from backend.continuity.models.results import Conflict, ShiftResult, ShiftWarning
from backend.continuity.models.segment import Segment, is_background, is_exclusive

if TYPE_CHECKING:
    from backend.continuity.metrics.registry import MetricsClient

logger = logging.getLogger(__name__)


class DependencyGraph:
    """Orders segments and finds scheduling conflicts."""

    def __init__(
        self,
        segments: Sequence[Segment],
        settings: Settings | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
        metrics: MetricsClient | None = None,
    ):
        self.settings = settings or get_settings()
        self.metrics = metrics
        try:
            self._bounds = Itinerary(start_date=start_date, end_date=end_date)
        except ValidationError as e:
            raise SegmentValidationError(f"Invalid date range: {e}", field="end_date") from e

        self._segments: list[Segment] = list(segments)
        self._index: dict[str, int] = {}
        for i, segment in enumerate(self._segments):
            if segment.id in self._index:
                raise SegmentValidationError(f"Duplicate segment id: {segment.id}", field="id")
            self._index[segment.id] = i

        self._explicit: set[tuple[int, int]] = set()
        self._implicit: set[tuple[int, int]] = set()
        self._missing: dict[str, list[str]] = {}

        self._add_explicit_edges()
        self._add_implicit_edges()

    @classmethod
    def from_itinerary(
        cls,
        itinerary: Itinerary,
        settings: Settings | None = None,
        metrics: MetricsClient | None = None,
    ) -> DependencyGraph:
        """Build a graph bounded by the itinerary dates."""
        return cls(
            itinerary.segments,
            settings=settings,
            start_date=itinerary.start_date,
            end_date=itinerary.end_date,
            metrics=metrics,
        )

    # Construction

    def _add_explicit_edges(self) -> None:
        for to_idx, segment in enumerate(self._segments):
            for dep_id in segment.depends_on:
                from_idx = self._index.get(dep_id)
                if from_idx is None:
                    self._missing.setdefault(segment.id, []).append(dep_id)
                    continue
                self._explicit.add((from_idx, to_idx))

        if self._missing:
            count = sum(len(ids) for ids in self._missing.values())
            logger.warning(f"{count} dependencies reference unknown segments: {self._missing}")
            if self.metrics:
                self.metrics.inc_missing_dependency(count)

    def _add_implicit_edges(self) -> None:
        window = timedelta(minutes=self.settings.implicit_dependency_window_min)
        order = sorted(range(len(self._segments)), key=self._sort_key)

        for from_idx in order:
            earlier = self._segments[from_idx]
            for to_idx in order:
                if to_idx == from_idx:
                    continue
                later = self._segments[to_idx]
                if is_background(later):
                    continue
                lag = later.start_datetime - earlier.end_datetime
                if not timedelta(0) <= lag <= window:
                    continue
                edge = (from_idx, to_idx)
                if edge in self._explicit:
                    continue
                # Skip links that would close a cycle with existing edges
                if self._reachable(to_idx, from_idx):
                    logger.debug(
                        f"Skipping implicit edge {earlier.id} -> {later.id}: would form a cycle"
                    )
                    continue
                self._implicit.add(edge)

    # Queries

    @property
    def segments(self) -> list[Segment]:
        """Segments in arena order."""
        return list(self._segments)

    def get(self, segment_id: str) -> Segment:
        """Look up a segment by id."""
        return self._segments[self._require(segment_id)]

    def edges(self) -> list[tuple[str, str]]:
        """All edges as (dependency id, dependent id), sorted."""
        return sorted(
            (self._segments[a].id, self._segments[b].id) for a, b in self._all_edges()
        )

    def dependents_of(self, segment_id: str, transitive: bool = False) -> list[str]:
        """Segments depending on the given one."""
        start = self._require(segment_id)
        if not transitive:
            return [self._segments[b].id for a, b in sorted(self._all_edges()) if a == start]
        return [self._segments[i].id for i in sorted(self._descendants(start))]

    def dependencies_of(self, segment_id: str) -> list[str]:
        """Segments the given one depends on."""
        target = self._require(segment_id)
        return [self._segments[a].id for a, b in sorted(self._all_edges()) if b == target]

    def missing_dependencies(self) -> dict[str, list[str]]:
        """Segment id -> depends_on ids that are not in the graph."""
        return {k: list(v) for k, v in self._missing.items()}

    # Mutation

    def add_dependency(self, segment_id: str, depends_on_id: str) -> None:
        """Record that ``segment_id`` depends on ``depends_on_id``.

        Raises:
            CycleError: if the edge would create a cycle; the graph is unchanged.
            SegmentValidationError: if either segment is unknown.
        """
        to_idx = self._require(segment_id)
        from_idx = self._require(depends_on_id)

        if from_idx == to_idx:
            self._reject_cycle([segment_id])

        path = self._path(to_idx, from_idx)
        if path is not None:
            self._reject_cycle([self._segments[i].id for i in path])

        edge = (from_idx, to_idx)
        self._implicit.discard(edge)
        self._explicit.add(edge)
        segment = self._segments[to_idx]
        if depends_on_id not in segment.depends_on:
            self._segments[to_idx] = segment.model_copy(
                update={"depends_on": [*segment.depends_on, depends_on_id]}
            )

    def _reject_cycle(self, members: list[str]) -> None:
        if self.metrics:
            self.metrics.inc_cycle_rejected()
        raise CycleError(f"Dependency would create a cycle: {' -> '.join(members)}", members)

    # Ordering

    def topological_order(self) -> list[str]:
        """Segment ids in an order that respects every edge.

        Kahn's algorithm; ready segments are taken by start time, then by
        arena index.

        Raises:
            CycleError: naming the segments that could not be ordered.
        """
        indegree = [0] * len(self._segments)
        adjacency = self._adjacency()
        for _, b in self._all_edges():
            indegree[b] += 1

        ready = [self._sort_key(i) for i, deg in enumerate(indegree) if deg == 0]
        heapq.heapify(ready)
        order: list[int] = []

        while ready:
            _, idx = heapq.heappop(ready)
            order.append(idx)
            for nxt in adjacency[idx]:
                indegree[nxt] -= 1
                if indegree[nxt] == 0:
                    heapq.heappush(ready, self._sort_key(nxt))

        if len(order) < len(self._segments):
            stuck = [self._segments[i].id for i, deg in enumerate(indegree) if deg > 0]
            raise CycleError(f"Dependency cycle among segments: {stuck}", stuck)

        return [self._segments[i].id for i in order]

    # Conflicts

    def detect_conflicts(self) -> list[Conflict]:
        """Overlapping time ranges between exclusive segments."""
        exclusive = sorted(
            (i for i, s in enumerate(self._segments) if is_exclusive(s)), key=self._sort_key
        )
        conflicts: list[Conflict] = []

        for pos, i in enumerate(exclusive):
            first = self._segments[i]
            for j in exclusive[pos + 1 :]:
                second = self._segments[j]
                if second.start_datetime >= first.end_datetime:
                    break
                overlap_end = min(first.end_datetime, second.end_datetime)
                overlap = int((overlap_end - second.start_datetime).total_seconds() // 60)
                conflicts.append(
                    Conflict(
                        first_segment_id=first.id,
                        second_segment_id=second.id,
                        overlap_minutes=overlap,
                        description=(
                            f"{first.type.value} {first.id} overlaps "
                            f"{second.type.value} {second.id} by {overlap} min"
                        ),
                    )
                )

        if conflicts:
            logger.info(f"Detected {len(conflicts)} time conflicts")
            if self.metrics:
                self.metrics.inc_conflict(len(conflicts))
        return conflicts

    # Shifting

    def shift_segment(self, segment_id: str, delta: timedelta) -> ShiftResult:
        """Move a segment and cascade the same delta to its dependents.

        A segment that would leave the itinerary dates stays put, and so do
        the dependents that only it would have moved.
        """
        root = self._require(segment_id)
        affected = self._descendants(root) | {root}
        adjacency = self._adjacency()
        parents: dict[int, list[int]] = defaultdict(list)
        for a, b in self._all_edges():
            parents[b].append(a)

        moved: set[int] = set()
        held: set[int] = set()
        blocked: list[int] = []
        updated = list(self._segments)

        for idx in self._cascade_order(affected, adjacency):
            if idx != root:
                if any(p in held for p in parents[idx]):
                    held.add(idx)
                    continue
                if not any(p in moved for p in parents[idx]):
                    continue
            segment = self._segments[idx]
            new_start = segment.start_datetime + delta
            new_end = segment.end_datetime + delta
            if not self._bounds.contains(new_start, new_end):
                blocked.append(idx)
                held.add(idx)
                continue
            updated[idx] = segment.model_copy(
                update={"start_datetime": new_start, "end_datetime": new_end}
            )
            moved.add(idx)

        warnings = []
        for idx in blocked:
            stranded = sorted(i for i in self._descendants(idx) if i not in moved)
            warnings.append(
                ShiftWarning(
                    segment_id=self._segments[idx].id,
                    reason="Shift would move the segment outside the itinerary dates",
                    blocked_segment_ids=[self._segments[i].id for i in stranded],
                )
            )
            logger.warning(
                f"Not shifting {self._segments[idx].id}: outside itinerary dates"
            )

        shifted_ids = [self._segments[i].id for i in self._cascade_order(moved, adjacency)]
        if self.metrics:
            self.metrics.observe_shift(len(shifted_ids), len(blocked))
        logger.info(f"Shifted {len(shifted_ids)} segments by {delta}")

        return ShiftResult(
            segments=updated, shifted_ids=shifted_ids, delta=delta, warnings=warnings
        )

    def _cascade_order(
        self, subset: Iterable[int], adjacency: dict[int, list[int]]
    ) -> list[int]:
        """Topological order restricted to a subset of nodes."""
        nodes = set(subset)
        indegree = {i: 0 for i in nodes}
        for a, b in self._all_edges():
            if a in nodes and b in nodes:
                indegree[b] += 1
        ready = [self._sort_key(i) for i, deg in indegree.items() if deg == 0]
        heapq.heapify(ready)
        order = []
        while ready:
            _, idx = heapq.heappop(ready)
            order.append(idx)
            for nxt in adjacency[idx]:
                if nxt in nodes:
                    indegree[nxt] -= 1
                    if indegree[nxt] == 0:
                        heapq.heappush(ready, self._sort_key(nxt))
        if len(order) < len(nodes):
            stuck = [self._segments[i].id for i in sorted(nodes) if i not in order]
            raise CycleError(f"Dependency cycle among segments: {stuck}", stuck)
        return order

    # Removal

    def remove_segment(self, segment_id: str) -> list[Segment]:
        """Segments without the given one, with references to it dropped."""
        self._require(segment_id)
        remaining = []
        for segment in self._segments:
            if segment.id == segment_id:
                continue
            if segment_id in segment.depends_on:
                segment = segment.model_copy(
                    update={"depends_on": [d for d in segment.depends_on if d != segment_id]}
                )
            remaining.append(segment)
        return remaining

    # Helpers

    def _require(self, segment_id: str) -> int:
        idx = self._index.get(segment_id)
        if idx is None:
            raise SegmentValidationError(f"Unknown segment: {segment_id}", field="id")
        return idx

    def _sort_key(self, idx: int) -> tuple:
        return (self._segments[idx].start_datetime, idx)

    def _all_edges(self) -> set[tuple[int, int]]:
        return self._explicit | self._implicit

    def _adjacency(self) -> dict[int, list[int]]:
        adjacency: dict[int, list[int]] = defaultdict(list)
        for a, b in sorted(self._all_edges()):
            adjacency[a].append(b)
        return adjacency

    def _descendants(self, start: int) -> set[int]:
        adjacency = self._adjacency()
        seen: set[int] = set()
        stack = list(adjacency[start])
        while stack:
            idx = stack.pop()
            if idx in seen:
                continue
            seen.add(idx)
            stack.extend(adjacency[idx])
        seen.discard(start)
        return seen

    def _reachable(self, src: int, dst: int) -> bool:
        return self._path(src, dst) is not None

    def _path(self, src: int, dst: int) -> list[int] | None:
        """Edge path from src to dst (depth-first), or None."""
        adjacency = self._adjacency()
        stack: list[tuple[int, list[int]]] = [(src, [src])]
        seen: set[int] = set()
        while stack:
            idx, path = stack.pop()
            if idx == dst:
                return path
            if idx in seen:
                continue
            seen.add(idx)
            for nxt in adjacency[idx]:
                stack.append((nxt, [*path, nxt]))
        return None
