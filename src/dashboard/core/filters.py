"""Filter engine: snapshot + selection criteria → filtered view."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from ..models.records import Environment, Pipeline, PipelineStatus, Snapshot

# Selection value meaning "All" for a multi-select dimension
ALL_SENTINEL = ""


@dataclass(frozen=True)
class FilterCriteria:
    """User-selected filters. Empty dimensions match everything."""

    projects: frozenset[str] = frozenset()
    refs: frozenset[str] = frozenset()
    status: PipelineStatus | None = None

    @classmethod
    def from_query(
        cls,
        projects: Iterable[str] | None = None,
        refs: Iterable[str] | None = None,
        status: str | PipelineStatus | None = None,
    ) -> FilterCriteria:
        """Build criteria from raw selection values.

        An empty status string means no status filter.

        Raises:
            ValueError: If status is not a known pipeline status.
        """
        return cls(
            projects=frozenset(projects or ()),
            refs=frozenset(refs or ()),
            status=PipelineStatus(status) if status else None,
        )


@dataclass
class FilteredView:
    """Subset of a snapshot matching the current criteria."""

    pipelines: list[Pipeline] = field(default_factory=list)
    environments: list[Environment] = field(default_factory=list)


def _dimension_matches(selected: frozenset[str], value: str) -> bool:
    return not selected or ALL_SENTINEL in selected or value in selected


def pipeline_matches(pipeline: Pipeline, criteria: FilterCriteria) -> bool:
    """Whether a pipeline passes the project, ref and status filters."""
    return (
        _dimension_matches(criteria.projects, pipeline.project)
        and _dimension_matches(criteria.refs, pipeline.ref)
        and (criteria.status is None or criteria.status == pipeline.status)
    )


def environment_matches(environment: Environment, criteria: FilterCriteria) -> bool:
    """Environments are only constrained by the project filter."""
    return _dimension_matches(criteria.projects, environment.project)


def apply_filters(snapshot: Snapshot, criteria: FilterCriteria) -> FilteredView:
    """Narrow a snapshot to the records matching the criteria.

    The snapshot is not modified; the view holds new lists.
    """
    return FilteredView(
        pipelines=[p for p in snapshot.pipelines if pipeline_matches(p, criteria)],
        environments=[
            e for e in snapshot.environments if environment_matches(e, criteria)
        ],
    )
