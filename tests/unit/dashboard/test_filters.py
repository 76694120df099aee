"""Tests for the filter engine."""

import pytest

from src.dashboard.core.correlator import build_snapshot
from src.dashboard.core.filters import FilterCriteria, apply_filters
from src.dashboard.models.records import PipelineStatus, Snapshot


@pytest.fixture
def snapshot(sample_exposition: str) -> Snapshot:
    return build_snapshot(sample_exposition)


class TestApplyFilters:
    """Tests for narrowing a snapshot."""

    def test_empty_criteria_is_identity(self, snapshot: Snapshot) -> None:
        """No selection returns everything, in order."""
        view = apply_filters(snapshot, FilterCriteria())

        assert view.pipelines == snapshot.pipelines
        assert view.environments == snapshot.environments

    def test_from_query_with_empty_values_is_identity(self, snapshot: Snapshot) -> None:
        """Empty sets and an empty status string match everything."""
        criteria = FilterCriteria.from_query([], [], "")

        assert criteria.status is None
        assert apply_filters(snapshot, criteria).pipelines == snapshot.pipelines

    def test_filter_by_project(self, snapshot: Snapshot) -> None:
        """Project filter narrows pipelines and environments."""
        view = apply_filters(snapshot, FilterCriteria(projects=frozenset({"group/web"})))

        assert [p.id for p in view.pipelines] == ["201"]
        assert [e.name for e in view.environments] == ["staging"]

    def test_all_sentinel_short_circuits(self, snapshot: Snapshot) -> None:
        """The "" option matches everything even alongside specific values."""
        view = apply_filters(
            snapshot, FilterCriteria(projects=frozenset({"", "group/web"}))
        )

        assert len(view.pipelines) == 3
        assert len(view.environments) == 2

    def test_filter_by_ref(self, snapshot: Snapshot) -> None:
        """Ref filter narrows pipelines but not environments."""
        view = apply_filters(snapshot, FilterCriteria(refs=frozenset({"develop"})))

        assert [p.id for p in view.pipelines] == ["102"]
        assert len(view.environments) == 2

    def test_filter_by_status(self, snapshot: Snapshot) -> None:
        """Status filter narrows pipelines but not environments."""
        view = apply_filters(snapshot, FilterCriteria(status=PipelineStatus.RUNNING))

        assert [p.id for p in view.pipelines] == ["201"]
        assert len(view.environments) == 2

    def test_dimensions_combine(self, snapshot: Snapshot) -> None:
        """All dimensions must match."""
        criteria = FilterCriteria.from_query(["group/api"], ["main"], "failed")

        assert apply_filters(snapshot, criteria).pipelines == []

    def test_snapshot_not_mutated(self, snapshot: Snapshot) -> None:
        """Filtering leaves the snapshot untouched."""
        before = list(snapshot.pipelines)

        apply_filters(snapshot, FilterCriteria(status=PipelineStatus.SUCCESS))

        assert snapshot.pipelines == before

    def test_unknown_status_rejected(self) -> None:
        """Unknown status strings raise ValueError."""
        with pytest.raises(ValueError):
            FilterCriteria.from_query(status="exploded")
