"""Dashboard core business logic.

Structured into:
- labels.py: Label fragment → label mapping
- line_parser.py: Exposition lines → typed metric facts
- correlator.py: Facts → pipeline/environment records
- store.py: Latest snapshot, replaced wholesale
- filters.py: Snapshot + criteria → filtered view
- aggregator.py: Filtered view → statistics
"""

from .aggregator import Aggregator, round_half_up
from .correlator import Correlator, build_snapshot
from .filters import FilterCriteria, FilteredView, apply_filters
from .labels import parse_labels
from .line_parser import MetricLineParser, classify_line
from .store import SnapshotStore

__all__ = [
    "parse_labels",
    "MetricLineParser",
    "classify_line",
    "Correlator",
    "build_snapshot",
    "SnapshotStore",
    "FilterCriteria",
    "FilteredView",
    "apply_filters",
    "Aggregator",
    "round_half_up",
]
