"""Correlator: metric facts → pipeline and environment records.

Responsible for:
- Creating pipeline records from status facts
- Joining duration and timestamp facts onto existing records
- Collecting environment records

Pipelines are joined on the exact (project, ref, id) triple, against
records that already exist when the fact arrives. Facts are therefore
order dependent: a duration or timestamp line that precedes its status line
is dropped.

When a status series has no `id` label the parser synthesizes a random id.
Duration and timestamp facts for that series carry their own (absent) id,
so they never join, and such pipelines stay without duration and timestamp.
This is deliberate: falling back to a (project, ref) key would merge
unrelated series.
"""

from __future__ import annotations

import logging
from typing import Iterable

from ..models.facts import (
    DurationFact,
    EnvironmentFact,
    MetricFact,
    StatusFact,
    TimestampFact,
)
from ..models.records import Environment, Pipeline, PipelineKey, Snapshot
from .line_parser import MetricLineParser

logger = logging.getLogger(__name__)


class Correlator:
    """Build the record sets for one snapshot from a fact stream.

    Usage:
        correlator = Correlator()
        for fact in parser.parse_text(body):
            correlator.process_fact(fact)
        snapshot = correlator.build_snapshot()
    """

    def __init__(self) -> None:
        # Insertion ordered; a duplicate status keeps its first position
        self._pipelines: dict[PipelineKey, Pipeline] = {}
        self._environments: list[Environment] = []
        self._correlation_misses: int = 0
        self._synthesized_ids: int = 0

    @property
    def correlation_misses(self) -> int:
        """Duration/timestamp facts dropped for lack of a status record."""
        return self._correlation_misses

    @property
    def synthesized_ids(self) -> int:
        """Status facts whose id was generated because the label was missing."""
        return self._synthesized_ids

    def reset(self) -> None:
        """Reset to empty state."""
        self._pipelines = {}
        self._environments = []
        self._correlation_misses = 0
        self._synthesized_ids = 0

    def process_fact(self, fact: MetricFact) -> None:
        """Process a single fact and update the record sets."""
        if isinstance(fact, StatusFact):
            self._handle_status(fact)
        elif isinstance(fact, DurationFact):
            pipeline = self._lookup(fact.project, fact.ref, fact.id)
            if pipeline is not None:
                pipeline.duration = fact.seconds
        elif isinstance(fact, TimestampFact):
            pipeline = self._lookup(fact.project, fact.ref, fact.id)
            if pipeline is not None:
                pipeline.timestamp = fact.timestamp
        elif isinstance(fact, EnvironmentFact):
            self._environments.append(
                Environment(
                    project=fact.project,
                    name=fact.name,
                    external_url=fact.external_url,
                    available=fact.available,
                )
            )

    def process_facts(self, facts: Iterable[MetricFact]) -> None:
        """Process facts in order."""
        for fact in facts:
            self.process_fact(fact)

    def build_snapshot(self) -> Snapshot:
        """Snapshot of the records correlated so far."""
        return Snapshot.build(
            pipelines=list(self._pipelines.values()),
            environments=list(self._environments),
        )

    def _handle_status(self, fact: StatusFact) -> None:
        """Create the pipeline record, replacing any earlier one for the key."""
        pipeline = Pipeline(
            project=fact.project,
            ref=fact.ref,
            id=fact.id,
            status=fact.status,
        )
        if fact.synthesized_id:
            self._synthesized_ids += 1
            logger.debug(
                "No id label for project=%s ref=%s, using generated id %s",
                fact.project,
                fact.ref,
                fact.id,
            )
        if pipeline.key in self._pipelines:
            logger.debug("Duplicate status for %s, last one wins", pipeline.key)
        self._pipelines[pipeline.key] = pipeline

    def _lookup(
        self, project: str | None, ref: str | None, pipeline_id: str | None
    ) -> Pipeline | None:
        if project is None or ref is None or pipeline_id is None:
            pipeline = None
        else:
            pipeline = self._pipelines.get((project, ref, pipeline_id))
        if pipeline is None:
            self._correlation_misses += 1
            logger.debug(
                "No status record for project=%s ref=%s id=%s, dropping fact",
                project,
                ref,
                pipeline_id,
            )
        return pipeline


def build_snapshot(text: str, parser: MetricLineParser | None = None) -> Snapshot:
    """Parse and correlate an exposition body into a fresh snapshot."""
    parser = parser or MetricLineParser()
    correlator = Correlator()
    correlator.process_facts(parser.parse_text(text))
    snapshot = correlator.build_snapshot()
    logger.debug(
        "Built snapshot: %d pipelines (%d with generated ids), %d environments, "
        "%d correlation misses",
        len(snapshot.pipelines),
        correlator.synthesized_ids,
        len(snapshot.environments),
        correlator.correlation_misses,
    )
    return snapshot
