"""Dashboard application state and the refresh cycle.

One cycle: fetch → parse → correlate → store → filter → aggregate → present.
At most one cycle is in flight; a trigger arriving meanwhile is ignored.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Protocol

from ..config_schema import DashboardConfig
from .core import (
    Aggregator,
    FilterCriteria,
    MetricLineParser,
    SnapshotStore,
    apply_filters,
    build_snapshot,
)
from .errors import FetchError
from .fetcher import MetricsFetcher
from .models.api import (
    ConnectionInfo,
    ConnectionStatus,
    DashboardResponse,
    EnvironmentResponse,
    FiltersResponse,
    PipelineResponse,
)
from .models.records import PipelineStatus
from .models.stats import DashboardStatsResponse
from .scheduler import RefreshScheduler

logger = logging.getLogger(__name__)


class RefreshOutcome(str, Enum):
    """Result of one refresh trigger."""

    OK = "ok"
    BUSY = "busy"  # Another cycle was in flight; trigger ignored
    FAILED = "failed"  # Retrieval failed; previous snapshot kept


class Presenter(Protocol):
    """Receives everything the dashboard wants to show."""

    async def render(self, payload: DashboardResponse) -> None: ...

    async def set_connection_status(self, connection: ConnectionInfo) -> None: ...

    async def show_error(self, message: str) -> None: ...


class DashboardApp:
    """Dashboard application state.

    Owns the snapshot store, the current filter criteria and the auto
    refresh scheduler. Presentation adapters subscribe with add_presenter().
    """

    def __init__(
        self,
        config: DashboardConfig | None = None,
        fetcher: MetricsFetcher | None = None,
    ) -> None:
        self.config = config or DashboardConfig()
        self.fetcher = fetcher or MetricsFetcher(
            url=self.config.metrics_url, timeout=self.config.request_timeout
        )
        self.parser = MetricLineParser()
        self.store = SnapshotStore()
        self.aggregator = Aggregator()
        self.scheduler = RefreshScheduler(self.refresh, self.config.refresh_interval)
        self.criteria = FilterCriteria()

        self.connection_status: ConnectionStatus = "connecting"
        self.last_error: str | None = None
        self.last_failure: FetchError | None = None
        self._presenters: list[Presenter] = []
        self._in_flight = False

    def add_presenter(self, presenter: Presenter) -> None:
        """Register a presentation adapter."""
        self._presenters.append(presenter)

    @property
    def in_flight(self) -> bool:
        """Whether a refresh cycle is currently pending."""
        return self._in_flight

    @property
    def auto_refresh(self) -> bool:
        """Whether the recurring refresh is active."""
        return self.scheduler.is_running

    async def start(self) -> None:
        """Load data once and start auto refresh if configured."""
        await self.refresh()
        if self.config.auto_refresh:
            self.scheduler.start()

    async def stop(self) -> None:
        """Cancel auto refresh and release the HTTP client."""
        self.scheduler.stop()
        await self.fetcher.close()

    async def refresh(self) -> RefreshOutcome:
        """Run one fetch-parse-render cycle."""
        if self._in_flight:
            logger.debug("Refresh already in flight, ignoring trigger")
            return RefreshOutcome.BUSY

        self._in_flight = True
        try:
            await self._set_connection_status("connecting")
            try:
                body = await self.fetcher.fetch()
            except FetchError as e:
                logger.warning("Error loading data: %s", e.message)
                self.last_error = e.message
                self.last_failure = e
                await self._set_connection_status("disconnected")
                for presenter in self._presenters:
                    await presenter.show_error(f"Failed to load data: {e.message}")
                return RefreshOutcome.FAILED

            self.parser.reset_stats()
            snapshot = build_snapshot(body, self.parser)
            self.store.replace(snapshot)
            self.last_error = None
            self.last_failure = None
            logger.info(
                "Loaded %d pipelines and %d environments (%d lines rejected)",
                len(snapshot.pipelines),
                len(snapshot.environments),
                self.parser.parse_errors,
            )

            await self._render()
            await self._set_connection_status("connected")
            return RefreshOutcome.OK
        except asyncio.CancelledError:
            # Settle the status left at "connecting" before propagating
            settled: ConnectionStatus = (
                "connected"
                if self.store.generation > 0 and self.last_error is None
                else "disconnected"
            )
            logger.info("Refresh cancelled, connection status back to %s", settled)
            await self._set_connection_status(settled)
            raise
        finally:
            self._in_flight = False

    async def apply_filters(self, criteria: FilterCriteria) -> DashboardResponse:
        """Change the current criteria and re-render without fetching."""
        self.criteria = criteria
        return await self._render()

    def toggle_auto_refresh(self, enabled: bool | None = None) -> bool:
        """Start or stop auto refresh. None flips the current state.

        Returns the new state.
        """
        target = not self.auto_refresh if enabled is None else enabled
        if target:
            self.scheduler.start()
        else:
            self.scheduler.stop()
        return self.auto_refresh

    def connection_info(self) -> ConnectionInfo:
        """Current connection state."""
        return ConnectionInfo(
            status=self.connection_status,
            last_updated=self.store.updated_at,
            last_error=self.last_error,
            auto_refresh=self.auto_refresh,
            refresh_interval=self.config.refresh_interval,
            generation=self.store.generation,
        )

    def build_view(
        self, criteria: FilterCriteria | None = None, now: datetime | None = None
    ) -> DashboardResponse:
        """Filter and summarize the stored snapshot."""
        criteria = criteria if criteria is not None else self.criteria
        now = now or datetime.now(timezone.utc)
        snapshot = self.store.current()

        view = apply_filters(snapshot, criteria)
        stats = self.aggregator.summarize(view.pipelines, snapshot)
        env_stats = self.aggregator.summarize_environments(view.environments)

        pipelines = self.aggregator.sort_for_display(view.pipelines)
        limit = self.config.recent_pipelines_limit
        if limit > 0:
            pipelines = pipelines[:limit]

        return DashboardResponse(
            pipelines=[PipelineResponse.from_pipeline(p, now) for p in pipelines],
            environments=[
                EnvironmentResponse.from_environment(e) for e in view.environments
            ],
            stats=DashboardStatsResponse.from_stats(stats, env_stats),
            projects=snapshot.sorted_projects,
            refs=snapshot.sorted_refs,
            connection=self.connection_info(),
        )

    def filter_options(self) -> FiltersResponse:
        """Values for the selection controls."""
        snapshot = self.store.current()
        return FiltersResponse(
            projects=snapshot.sorted_projects,
            refs=snapshot.sorted_refs,
            statuses=[s.value for s in PipelineStatus],
        )

    async def _render(self) -> DashboardResponse:
        payload = self.build_view()
        for presenter in self._presenters:
            await presenter.render(payload)
        return payload

    async def _set_connection_status(self, status: ConnectionStatus) -> None:
        self.connection_status = status
        info = self.connection_info()
        for presenter in self._presenters:
            await presenter.set_connection_status(info)
