"""FastAPI server for the pipelines dashboard.

The server is the presentation adapter: it exposes the current view as
JSON and pushes updates to WebSocket clients.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator

from fastapi import FastAPI, HTTPException, Query, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware

from ..config import get_validated_config
from ..config_schema import DashboardConfig
from .app import DashboardApp, RefreshOutcome
from .core import FilterCriteria
from .models.api import (
    AutoRefreshRequest,
    ConnectionInfo,
    DashboardResponse,
    FilterRequest,
    FiltersResponse,
    RefreshResponse,
)

logger = logging.getLogger(__name__)

# Seconds of client silence before the server sends a keepalive ping
WEBSOCKET_KEEPALIVE = 30.0


class ConnectionManager:
    """Manages WebSocket connections for real-time updates."""

    def __init__(self) -> None:
        self.active_connections: list[WebSocket] = []

    async def connect(self, websocket: WebSocket) -> None:
        """Accept and store a new WebSocket connection."""
        await websocket.accept()
        self.active_connections.append(websocket)
        logger.info(
            "WebSocket connected. Total connections: %d", len(self.active_connections)
        )

    def disconnect(self, websocket: WebSocket) -> None:
        """Remove a WebSocket connection."""
        if websocket in self.active_connections:
            self.active_connections.remove(websocket)

    async def broadcast(self, message: dict[str, Any]) -> None:
        """Send a message to every client, dropping those that fail.

        Iterates over a copy: a handler's disconnect() may run while a send
        is awaited.
        """
        for websocket in list(self.active_connections):
            try:
                await websocket.send_json(message)
            except Exception as e:
                logger.warning(
                    "Dropping WebSocket client after %s message failed: %s",
                    message.get("type"),
                    e,
                )
                self.disconnect(websocket)

    @property
    def connection_count(self) -> int:
        """Get the number of active connections."""
        return len(self.active_connections)


class WebSocketPresenter:
    """Presenter that broadcasts dashboard updates to WebSocket clients."""

    def __init__(self, connection_manager: ConnectionManager) -> None:
        self.connection_manager = connection_manager

    async def render(self, payload: DashboardResponse) -> None:
        await self.connection_manager.broadcast(
            {"type": "dashboard", "data": payload.model_dump(mode="json")}
        )

    async def set_connection_status(self, connection: ConnectionInfo) -> None:
        await self.connection_manager.broadcast(
            {"type": "connection", "data": connection.model_dump(mode="json")}
        )

    async def show_error(self, message: str) -> None:
        await self.connection_manager.broadcast(
            {"type": "error", "data": {"message": message}}
        )


def _criteria_or_422(
    projects: list[str], refs: list[str], status: str
) -> FilterCriteria:
    try:
        return FilterCriteria.from_query(projects, refs, status)
    except ValueError:
        raise HTTPException(status_code=422, detail=f"Unknown status: {status!r}")


def _register_api_routes(app: FastAPI, dashboard: DashboardApp) -> None:
    """Register the JSON API routes."""

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Liveness probe."""
        return {"status": "ok"}

    @app.get("/api/dashboard", response_model=DashboardResponse)
    async def get_dashboard(
        project: list[str] = Query(default=[]),
        ref: list[str] = Query(default=[]),
        status: str = Query("", description="Pipeline status, empty for all"),
    ) -> DashboardResponse:
        """Get pipelines, environments and stats for the given filters."""
        criteria = _criteria_or_422(project, ref, status)
        return dashboard.build_view(criteria)

    @app.get("/api/filters", response_model=FiltersResponse)
    async def get_filters() -> FiltersResponse:
        """Get options for the project, ref and status selectors."""
        return dashboard.filter_options()

    @app.post("/api/filters", response_model=DashboardResponse)
    async def set_filters(request: FilterRequest) -> DashboardResponse:
        """Change the current selection and push the new view to clients."""
        criteria = _criteria_or_422(request.projects, request.refs, request.status)
        return await dashboard.apply_filters(criteria)

    @app.post("/api/refresh", response_model=RefreshResponse)
    async def refresh() -> RefreshResponse:
        """Fetch and parse the exporter metrics now."""
        outcome = await dashboard.refresh()
        failure = dashboard.last_failure if outcome is RefreshOutcome.FAILED else None
        return RefreshResponse(
            outcome=outcome.value,
            error=failure.message if failure else None,
            detail=failure.to_dict() if failure else None,
            connection=dashboard.connection_info(),
        )

    @app.post("/api/auto-refresh", response_model=ConnectionInfo)
    async def set_auto_refresh(request: AutoRefreshRequest) -> ConnectionInfo:
        """Enable, disable or toggle the recurring refresh."""
        dashboard.toggle_auto_refresh(request.enabled)
        return dashboard.connection_info()

    @app.get("/api/status", response_model=ConnectionInfo)
    async def get_status() -> ConnectionInfo:
        """Get connection state and refresh settings."""
        return dashboard.connection_info()


def _register_websocket_routes(
    app: FastAPI, dashboard: DashboardApp, connection_manager: ConnectionManager
) -> None:
    """Register WebSocket endpoint."""

    @app.websocket("/ws")
    async def websocket_endpoint(websocket: WebSocket) -> None:
        """WebSocket endpoint for real-time updates."""
        await connection_manager.connect(websocket)
        try:
            await websocket.send_json({
                "type": "dashboard",
                "data": dashboard.build_view().model_dump(mode="json"),
            })

            while True:
                try:
                    data = await asyncio.wait_for(
                        websocket.receive_text(), timeout=WEBSOCKET_KEEPALIVE
                    )
                    if data == "ping":
                        await websocket.send_text("pong")
                except asyncio.TimeoutError:
                    await websocket.send_text("ping")

        except WebSocketDisconnect:
            pass
        finally:
            connection_manager.disconnect(websocket)


def create_app(
    config: DashboardConfig | None = None,
    dashboard: DashboardApp | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        config: Dashboard config; defaults to the loaded config file.
        dashboard: Pre-built application state (for testing).
    """
    if dashboard is None:
        config = config or get_validated_config().dashboard
        dashboard = DashboardApp(config)
    config = dashboard.config

    connection_manager = ConnectionManager()
    dashboard.add_presenter(WebSocketPresenter(connection_manager))

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Lifespan context manager for startup/shutdown."""
        await dashboard.start()
        yield
        await dashboard.stop()

    app = FastAPI(
        title="GitLab CI Pipelines Dashboard",
        description="Pipeline and environment status from gitlab-ci-pipelines-exporter",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.dashboard = dashboard
    app.state.connection_manager = connection_manager

    _register_api_routes(app, dashboard)
    _register_websocket_routes(app, dashboard, connection_manager)

    return app


def run_dashboard(config: DashboardConfig | None = None) -> None:
    """Run the dashboard server."""
    import uvicorn

    config = config or get_validated_config().dashboard
    app = create_app(config)
    uvicorn.run(app, host=config.host, port=config.port, log_config=None)
