#!/usr/bin/env python3
"""
GitLab CI Pipelines Dashboard - Main runner script

Usage:
    python run.py                          # Serve with defaults from config/config.yaml
    python run.py --port 9000              # Override port
    python run.py --auto-refresh           # Start with auto refresh enabled
    python run.py --once                   # Fetch once, print stats as JSON, exit
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys

from dotenv import load_dotenv

# Load environment variables (DASHBOARD_METRICS_URL)
load_dotenv()

from src.config import get_validated_config, load_config, set_config_value
from src.dashboard.app import DashboardApp, RefreshOutcome
from src.dashboard.server import run_dashboard


def configure_logging() -> None:
    """Configure root logging from the logging config section."""
    config = get_validated_config().logging
    logging.basicConfig(level=config.level, format=config.format)


async def run_once() -> int:
    """Run one refresh cycle and print the unfiltered view as JSON."""
    dashboard = DashboardApp(get_validated_config().dashboard)
    try:
        outcome = await dashboard.refresh()
    finally:
        await dashboard.stop()

    if outcome is not RefreshOutcome.OK:
        print(f"Failed to load data: {dashboard.last_error}", file=sys.stderr)
        return 1

    view = dashboard.build_view()
    print(json.dumps(view.model_dump(mode="json", exclude={"connection"}), indent=2))
    return 0


def main() -> int:
    parser: argparse.ArgumentParser = argparse.ArgumentParser(
        description="Run the GitLab CI pipelines dashboard"
    )
    parser.add_argument(
        "--config", default=None, help="Path to config file (default: config/config.yaml)"
    )
    parser.add_argument("--host", help="Override bind host")
    parser.add_argument("--port", type=int, help="Override bind port")
    parser.add_argument("--metrics-url", help="Override exporter metrics URL")
    parser.add_argument(
        "--auto-refresh", action="store_true", help="Start with auto refresh enabled"
    )
    parser.add_argument(
        "--once", action="store_true", help="Fetch once, print the view as JSON and exit"
    )
    args: argparse.Namespace = parser.parse_args()

    load_config(args.config)
    if args.host:
        set_config_value("dashboard.host", args.host)
    if args.port:
        set_config_value("dashboard.port", args.port)
    if args.metrics_url:
        set_config_value("dashboard.metrics_url", args.metrics_url)
    if args.auto_refresh:
        set_config_value("dashboard.auto_refresh", True)

    configure_logging()

    if args.once:
        return asyncio.run(run_once())

    run_dashboard(get_validated_config().dashboard)
    return 0


if __name__ == "__main__":
    sys.exit(main())
