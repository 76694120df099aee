"""Computed statistic models.

Statistics are derived from a filtered view, not stored directly.
The dataclasses are the internal shape; the Pydantic versions are what the
API returns.
"""

from __future__ import annotations

from dataclasses import dataclass

from pydantic import BaseModel


@dataclass
class DashboardStats:
    """Summary statistics for the current filtered view."""

    # Per-status counts (filtered)
    success_count: int = 0
    failed_count: int = 0
    running_count: int = 0
    pending_count: int = 0
    total_count: int = 0

    # Rates (filtered)
    success_rate: int = 0  # percent
    average_duration_minutes: int = 0

    # Monitored surface (global, unfiltered)
    total_projects: int = 0
    active_refs: int = 0


@dataclass
class EnvironmentStats:
    """Availability counts for the filtered environments."""

    available: int = 0
    unavailable: int = 0


# Pydantic versions for API responses


class DashboardStatsResponse(BaseModel):
    """Dashboard statistics for API responses."""

    success_count: int = 0
    failed_count: int = 0
    running_count: int = 0
    pending_count: int = 0
    total_count: int = 0
    success_rate: int = 0
    average_duration_minutes: int = 0
    total_projects: int = 0
    active_refs: int = 0
    available_environments: int = 0
    unavailable_environments: int = 0

    @classmethod
    def from_stats(
        cls, stats: DashboardStats, environments: EnvironmentStats | None = None
    ) -> "DashboardStatsResponse":
        """Create from internal stats."""
        environments = environments or EnvironmentStats()
        return cls(
            success_count=stats.success_count,
            failed_count=stats.failed_count,
            running_count=stats.running_count,
            pending_count=stats.pending_count,
            total_count=stats.total_count,
            success_rate=stats.success_rate,
            average_duration_minutes=stats.average_duration_minutes,
            total_projects=stats.total_projects,
            active_refs=stats.active_refs,
            available_environments=environments.available,
            unavailable_environments=environments.unavailable,
        )
