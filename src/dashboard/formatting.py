"""Display formatting for pipeline durations, ages and status icons."""

from __future__ import annotations

from datetime import datetime

from .models.records import PipelineStatus

_STATUS_ICONS: dict[PipelineStatus, str] = {
    PipelineStatus.SUCCESS: "check-circle",
    PipelineStatus.FAILED: "times-circle",
    PipelineStatus.RUNNING: "play-circle",
    PipelineStatus.PENDING: "clock",
    PipelineStatus.CANCELED: "ban",
    PipelineStatus.SKIPPED: "forward",
}


def status_icon(status: PipelineStatus) -> str:
    """Icon name for a status; unmapped statuses get a question mark."""
    return _STATUS_ICONS.get(status, "question-circle")


def format_duration(seconds: float) -> str:
    """Format seconds as "<minutes>m <seconds>s", truncating fractions."""
    minutes = int(seconds // 60)
    remaining = int(seconds % 60)
    return f"{minutes}m {remaining}s"


def format_relative_time(timestamp: datetime, now: datetime) -> str:
    """Format a timestamp relative to now.

    Under a minute is "Just now", then minutes, then hours; anything a day
    or older is shown as a date.
    """
    diff = (now - timestamp).total_seconds()
    if diff < 60:
        return "Just now"
    if diff < 3600:
        return f"{int(diff // 60)}m ago"
    if diff < 86400:
        return f"{int(diff // 3600)}h ago"
    return timestamp.strftime("%Y-%m-%d")
