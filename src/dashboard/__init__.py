"""Dashboard for gitlab-ci-pipelines-exporter metrics."""

from .app import DashboardApp, RefreshOutcome
from .core import FilterCriteria, MetricLineParser, SnapshotStore, build_snapshot
from .server import create_app, run_dashboard

__all__ = [
    "create_app",
    "run_dashboard",
    "DashboardApp",
    "RefreshOutcome",
    "FilterCriteria",
    "MetricLineParser",
    "SnapshotStore",
    "build_snapshot",
]
