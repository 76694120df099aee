"""Snapshot store: holds the latest snapshot, replaced wholesale."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from ..models.records import Snapshot

logger = logging.getLogger(__name__)


class SnapshotStore:
    """Owns the current snapshot.

    Readers get the stored snapshot and derive new values from it; they
    never mutate it. Each replace discards the previous snapshot entirely.
    """

    def __init__(self) -> None:
        self._snapshot = Snapshot.empty()
        self._generation: int = 0
        self._updated_at: datetime | None = None

    @property
    def generation(self) -> int:
        """Number of snapshots stored so far."""
        return self._generation

    @property
    def updated_at(self) -> datetime | None:
        """UTC time of the last replace, None before the first parse."""
        return self._updated_at

    def current(self) -> Snapshot:
        """Get the latest snapshot (empty before the first parse)."""
        return self._snapshot

    def replace(self, snapshot: Snapshot) -> None:
        """Swap in a new snapshot."""
        self._snapshot = snapshot
        self._generation += 1
        self._updated_at = datetime.now(timezone.utc)
        logger.debug(
            "Stored snapshot #%d (%d pipelines, %d environments)",
            self._generation,
            len(snapshot.pipelines),
            len(snapshot.environments),
        )
