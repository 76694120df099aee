"""Error types for the dashboard.

Only retrieval can fail: parsing and aggregation never raise on bad input.

Usage:
    from src.dashboard.errors import FetchError, ErrorCode

    try:
        body = await fetcher.fetch()
    except FetchError as e:
        if e.code == ErrorCode.HTTP_STATUS:
            ...
"""

from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    """Specific error codes for programmatic handling."""

    HTTP_STATUS = "http_status"  # Non-success response
    TRANSPORT = "transport"  # Connection refused, DNS, protocol errors
    TIMEOUT = "timeout"


class DashboardError(Exception):
    """Base class for dashboard errors."""


class FetchError(DashboardError):
    """Retrieving the metrics exposition failed."""

    def __init__(
        self,
        message: str,
        code: ErrorCode,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code

    def to_dict(self) -> dict[str, object]:
        """Convert to a response dictionary."""
        result: dict[str, object] = {"error": self.message, "code": self.code.value}
        if self.status_code is not None:
            result["status_code"] = self.status_code
        return result
