"""Partial facts extracted from exposition lines.

Each recognized metric family produces exactly one fact variant:
- StatusFact: pipeline last run status
- DurationFact: pipeline last run duration in seconds
- TimestampFact: pipeline last run timestamp
- EnvironmentFact: deployment environment information

Facts are partial: the correlator joins the pipeline variants on
(project, ref, id) to build complete Pipeline records.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Literal, Union

from pydantic import BaseModel, Field

from .records import PipelineStatus


class MetricFamily(str, Enum):
    """Metric families understood by the parser, valued by metric name."""

    PIPELINE_STATUS = "gitlab_ci_pipeline_last_run_status"
    PIPELINE_DURATION = "gitlab_ci_pipeline_last_run_duration_seconds"
    PIPELINE_TIMESTAMP = "gitlab_ci_pipeline_timestamp"
    ENVIRONMENT_INFO = "gitlab_ci_environment_information"


class StatusFact(BaseModel):
    """Status of a pipeline's last run. Creates the Pipeline record."""

    family: Literal[MetricFamily.PIPELINE_STATUS] = MetricFamily.PIPELINE_STATUS
    project: str
    ref: str
    id: str
    status: PipelineStatus
    # True when the id label was absent and a random one was generated
    synthesized_id: bool = False


class DurationFact(BaseModel):
    """Duration of a pipeline's last run.

    Labels are kept raw: a missing label stays None rather than being
    defaulted, so the fact only correlates with a series that really
    carries the same labels.
    """

    family: Literal[MetricFamily.PIPELINE_DURATION] = MetricFamily.PIPELINE_DURATION
    project: str | None = None
    ref: str | None = None
    id: str | None = None
    seconds: float = Field(ge=0)


class TimestampFact(BaseModel):
    """Start time of a pipeline's last run (labels kept raw)."""

    family: Literal[MetricFamily.PIPELINE_TIMESTAMP] = MetricFamily.PIPELINE_TIMESTAMP
    project: str | None = None
    ref: str | None = None
    id: str | None = None
    timestamp: datetime


class EnvironmentFact(BaseModel):
    """Deployment environment information."""

    family: Literal[MetricFamily.ENVIRONMENT_INFO] = MetricFamily.ENVIRONMENT_INFO
    project: str
    name: str
    external_url: str = ""
    available: bool = False


MetricFact = Union[StatusFact, DurationFact, TimestampFact, EnvironmentFact]
