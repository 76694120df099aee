"""Dashboard data models.

Structured into:
- facts.py: Partial facts parsed from exposition lines (Pydantic)
- records.py: Pipeline/environment/snapshot records
- stats.py: Computed statistic models
- api.py: API response models
"""

from .facts import (
    DurationFact,
    EnvironmentFact,
    MetricFact,
    MetricFamily,
    StatusFact,
    TimestampFact,
)
from .records import (
    Environment,
    Pipeline,
    PipelineKey,
    PipelineStatus,
    Snapshot,
)
from .stats import (
    DashboardStats,
    DashboardStatsResponse,
    EnvironmentStats,
)

__all__ = [
    # Facts
    "MetricFamily",
    "MetricFact",
    "StatusFact",
    "DurationFact",
    "TimestampFact",
    "EnvironmentFact",
    # Records
    "PipelineStatus",
    "PipelineKey",
    "Pipeline",
    "Environment",
    "Snapshot",
    # Stats
    "DashboardStats",
    "DashboardStatsResponse",
    "EnvironmentStats",
]
