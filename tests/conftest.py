"""Pytest fixtures for dashboard tests.

Common fixtures: a representative exporter exposition and helpers to
build a DashboardApp whose fetcher is served by httpx.MockTransport.
"""

from __future__ import annotations

# Load environment variables from .env before any tests run
from dotenv import load_dotenv

load_dotenv()

from typing import Callable

import httpx
import pytest

from src.config_schema import DashboardConfig
from src.dashboard.app import DashboardApp
from src.dashboard.fetcher import MetricsFetcher

METRICS_URL = "http://exporter.test/metrics"

SAMPLE_EXPOSITION = """\
# HELP gitlab_ci_pipeline_last_run_status Status of the most recent pipeline
# TYPE gitlab_ci_pipeline_last_run_status gauge
gitlab_ci_pipeline_last_run_status{id="101",project="group/api",ref="main"} 0
gitlab_ci_pipeline_last_run_status{id="102",project="group/api",ref="develop"} 1
gitlab_ci_pipeline_last_run_status{id="201",project="group/web",ref="main"} 4
# HELP gitlab_ci_pipeline_last_run_duration_seconds Duration of the most recent pipeline
# TYPE gitlab_ci_pipeline_last_run_duration_seconds gauge
gitlab_ci_pipeline_last_run_duration_seconds{id="101",project="group/api",ref="main"} 120
gitlab_ci_pipeline_last_run_duration_seconds{id="102",project="group/api",ref="develop"} 300.5
# HELP gitlab_ci_pipeline_timestamp Timestamp of the most recent pipeline
# TYPE gitlab_ci_pipeline_timestamp gauge
gitlab_ci_pipeline_timestamp{id="101",project="group/api",ref="main"} 1700000000
gitlab_ci_pipeline_timestamp{id="201",project="group/web",ref="main"} 1700003600
# HELP gitlab_ci_environment_information Information about the environment
# TYPE gitlab_ci_environment_information gauge
gitlab_ci_environment_information{project="group/api",environment="production",external_url="https://api.example.com"} 1
gitlab_ci_environment_information{project="group/web",environment="staging",external_url=""} 0
"""


def make_transport(
    body: str = SAMPLE_EXPOSITION, status_code: int = 200
) -> httpx.MockTransport:
    """Mock transport that answers every request with the given body."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, text=body)

    return httpx.MockTransport(handler)


def make_dashboard(
    transport: httpx.MockTransport | None = None, **config: object
) -> DashboardApp:
    """DashboardApp whose fetcher talks to a mock transport."""
    dashboard_config = DashboardConfig(metrics_url=METRICS_URL, **config)
    fetcher = MetricsFetcher(
        url=METRICS_URL,
        http_client=httpx.AsyncClient(transport=transport or make_transport()),
    )
    return DashboardApp(dashboard_config, fetcher=fetcher)


@pytest.fixture
def sample_exposition() -> str:
    """Exposition with three pipelines and two environments."""
    return SAMPLE_EXPOSITION


@pytest.fixture
def dashboard_factory() -> Callable[..., DashboardApp]:
    """Factory for DashboardApp instances backed by a mock transport."""
    return make_dashboard


@pytest.fixture
def transport_factory() -> Callable[..., httpx.MockTransport]:
    """Factory for mock transports returning a fixed body and status."""
    return make_transport
