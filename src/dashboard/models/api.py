"""Pydantic models for dashboard API responses."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, Field

from ..formatting import format_duration, format_relative_time, status_icon
from .records import Environment, Pipeline, PipelineStatus
from .stats import DashboardStatsResponse

ConnectionStatus = Literal["connecting", "connected", "disconnected"]


class PipelineResponse(BaseModel):
    """Pipeline entry for list view."""
    project: str
    ref: str
    id: str
    status: PipelineStatus
    duration: float | None = None
    timestamp: datetime | None = None
    # Display helpers
    icon: str = "question-circle"
    duration_display: str = "N/A"
    age_display: str = "N/A"

    @classmethod
    def from_pipeline(
        cls, pipeline: Pipeline, now: datetime | None = None
    ) -> "PipelineResponse":
        """Create from a correlated pipeline record."""
        now = now or datetime.now(timezone.utc)
        return cls(
            project=pipeline.project,
            ref=pipeline.ref,
            id=pipeline.id,
            status=pipeline.status,
            duration=pipeline.duration,
            timestamp=pipeline.timestamp,
            icon=status_icon(pipeline.status),
            duration_display=(
                format_duration(pipeline.duration) if pipeline.duration else "N/A"
            ),
            age_display=(
                format_relative_time(pipeline.timestamp, now)
                if pipeline.timestamp
                else "N/A"
            ),
        )


class EnvironmentResponse(BaseModel):
    """Environment entry for list view."""
    project: str
    name: str
    external_url: str = ""
    available: bool = False

    @classmethod
    def from_environment(cls, env: Environment) -> "EnvironmentResponse":
        """Create from an environment record."""
        return cls(
            project=env.project,
            name=env.name,
            external_url=env.external_url,
            available=env.available,
        )


class ConnectionInfo(BaseModel):
    """Connection state of the dashboard to the exporter."""
    status: ConnectionStatus = "connecting"
    last_updated: datetime | None = None
    last_error: str | None = None
    auto_refresh: bool = False
    refresh_interval: float = 30.0
    generation: int = 0


class DashboardResponse(BaseModel):
    """Everything the front end needs to render one view."""
    pipelines: list[PipelineResponse] = Field(default_factory=list)
    environments: list[EnvironmentResponse] = Field(default_factory=list)
    stats: DashboardStatsResponse = Field(default_factory=DashboardStatsResponse)
    projects: list[str] = Field(default_factory=list)
    refs: list[str] = Field(default_factory=list)
    connection: ConnectionInfo = Field(default_factory=ConnectionInfo)


class FiltersResponse(BaseModel):
    """Options for the selection controls."""
    projects: list[str] = Field(default_factory=list)
    refs: list[str] = Field(default_factory=list)
    statuses: list[str] = Field(default_factory=list)


class RefreshResponse(BaseModel):
    """Outcome of a manual refresh."""
    outcome: Literal["ok", "busy", "failed"]
    error: str | None = None
    # FetchError.to_dict() of the failed retrieval
    detail: dict[str, object] | None = None
    connection: ConnectionInfo


class AutoRefreshRequest(BaseModel):
    """Request body to set auto refresh. Omit `enabled` to toggle."""
    enabled: bool | None = None


class FilterRequest(BaseModel):
    """Request body to change the current filter selection."""
    projects: list[str] = Field(default_factory=list)
    refs: list[str] = Field(default_factory=list)
    status: str = ""
