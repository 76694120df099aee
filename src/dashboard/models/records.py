"""Record models for pipelines, environments, and snapshots.

These models represent the correlated state built from metric facts,
separate from the raw fact models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class PipelineStatus(str, Enum):
    """Status of a pipeline's last run.

    The exporter encodes statuses as integers 0-6 in declaration order.
    Any other code maps to UNKNOWN.
    """

    SUCCESS = "success"
    FAILED = "failed"
    CANCELED = "canceled"
    SKIPPED = "skipped"
    RUNNING = "running"
    PENDING = "pending"
    CREATED = "created"
    UNKNOWN = "unknown"

    @classmethod
    def from_code(cls, code: int) -> PipelineStatus:
        """Map an exporter status code to a status."""
        return _STATUS_BY_CODE.get(code, cls.UNKNOWN)


_STATUS_BY_CODE: dict[int, PipelineStatus] = {
    0: PipelineStatus.SUCCESS,
    1: PipelineStatus.FAILED,
    2: PipelineStatus.CANCELED,
    3: PipelineStatus.SKIPPED,
    4: PipelineStatus.RUNNING,
    5: PipelineStatus.PENDING,
    6: PipelineStatus.CREATED,
}


PipelineKey = tuple[str, str, str]


@dataclass
class Pipeline:
    """A pipeline's last run, joined from status, duration and timestamp."""

    project: str
    ref: str
    id: str
    status: PipelineStatus
    duration: float | None = None  # seconds
    timestamp: datetime | None = None  # UTC

    @property
    def key(self) -> PipelineKey:
        """Identity key used for correlation."""
        return (self.project, self.ref, self.id)


@dataclass
class Environment:
    """A deployment environment. Environments are never merged."""

    project: str
    name: str
    external_url: str = ""
    available: bool = False


@dataclass(frozen=True)
class Snapshot:
    """Complete parsed state from one parse cycle.

    Project and ref sets are derived from the pipelines when the snapshot
    is built (see Snapshot.build), never lazily.
    """

    pipelines: list[Pipeline] = field(default_factory=list)
    environments: list[Environment] = field(default_factory=list)
    projects: frozenset[str] = frozenset()
    refs: frozenset[str] = frozenset()

    @classmethod
    def empty(cls) -> Snapshot:
        """Snapshot used before the first parse."""
        return cls()

    @classmethod
    def build(
        cls, pipelines: list[Pipeline], environments: list[Environment]
    ) -> Snapshot:
        """Build a snapshot, deriving the distinct project and ref sets."""
        return cls(
            pipelines=pipelines,
            environments=environments,
            projects=frozenset(p.project for p in pipelines),
            refs=frozenset(p.ref for p in pipelines),
        )

    @property
    def sorted_projects(self) -> list[str]:
        """Projects in alphabetical order, for selection controls."""
        return sorted(self.projects)

    @property
    def sorted_refs(self) -> list[str]:
        """Refs in alphabetical order, for selection controls."""
        return sorted(self.refs)
