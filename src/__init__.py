"""GitLab CI pipelines dashboard source package.

This package contains:
- config: Configuration loading and management
- dashboard: Exposition parsing, filtering, aggregation and the API server
"""

from __future__ import annotations

__all__: list[str] = []
