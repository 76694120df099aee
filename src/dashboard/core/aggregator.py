"""Aggregator: filtered view → summary statistics.

Responsible for:
- Per-status counts, success rate and average duration of the filtered view
- Monitored surface (project and ref counts) from the unfiltered snapshot
- Display ordering of pipelines
"""

from __future__ import annotations

import logging
import math
from datetime import datetime, timezone
from typing import Sequence

from ..models.records import Environment, Pipeline, PipelineStatus, Snapshot
from ..models.stats import DashboardStats, EnvironmentStats

logger = logging.getLogger(__name__)

_EPOCH = datetime.fromtimestamp(0, tz=timezone.utc)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero (1.5 → 2, 2.5 → 3)."""
    return int(math.floor(value + 0.5))


class Aggregator:
    """Compute dashboard statistics.

    Usage:
        aggregator = Aggregator()
        view = apply_filters(snapshot, criteria)
        stats = aggregator.summarize(view.pipelines, snapshot)
    """

    def summarize(
        self, pipelines: Sequence[Pipeline], snapshot: Snapshot
    ) -> DashboardStats:
        """Compute statistics for a filtered set of pipelines.

        Project and ref counts come from the global snapshot, not the
        filtered set: they describe everything being monitored.
        """
        stats = DashboardStats()

        counts = {status: 0 for status in PipelineStatus}
        for pipeline in pipelines:
            counts[pipeline.status] += 1

        stats.success_count = counts[PipelineStatus.SUCCESS]
        stats.failed_count = counts[PipelineStatus.FAILED]
        stats.running_count = counts[PipelineStatus.RUNNING]
        stats.pending_count = counts[PipelineStatus.PENDING]
        stats.total_count = len(pipelines)

        if stats.total_count > 0:
            stats.success_rate = round_half_up(
                stats.success_count / stats.total_count * 100
            )

        stats.average_duration_minutes = self._average_duration_minutes(pipelines)

        # Monitored surface (unfiltered)
        stats.total_projects = len(snapshot.projects)
        stats.active_refs = len(snapshot.refs)

        return stats

    def summarize_environments(
        self, environments: Sequence[Environment]
    ) -> EnvironmentStats:
        """Count available and unavailable environments."""
        available = sum(1 for e in environments if e.available)
        return EnvironmentStats(
            available=available, unavailable=len(environments) - available
        )

    def sort_for_display(self, pipelines: Sequence[Pipeline]) -> list[Pipeline]:
        """Newest first; pipelines without a timestamp sort as epoch zero."""
        return sorted(
            pipelines,
            key=lambda p: p.timestamp if p.timestamp is not None else _EPOCH,
            reverse=True,
        )

    def _average_duration_minutes(self, pipelines: Sequence[Pipeline]) -> int:
        # Zero durations count as unknown, same as the duration display
        durations = [p.duration / 60 for p in pipelines if p.duration]
        if not durations:
            return 0
        return round_half_up(sum(durations) / len(durations))
