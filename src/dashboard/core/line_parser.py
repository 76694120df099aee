"""Metric-line parser: exposition text → typed metric facts.

Responsible for:
- Classifying each line by metric family, once per line
- Decoding the label set and numeric payload for that family
- Skipping comments, blank lines, unknown metrics and malformed lines
"""

from __future__ import annotations

import logging
import re
import uuid
from datetime import datetime, timezone
from typing import Callable, Iterable, Iterator

from ..models.facts import (
    DurationFact,
    EnvironmentFact,
    MetricFact,
    MetricFamily,
    StatusFact,
    TimestampFact,
)
from ..models.records import PipelineStatus
from .labels import parse_labels

logger = logging.getLogger(__name__)

UNKNOWN_LABEL = "Unknown"

_INTEGER = r"(\d+)"
_DECIMAL = r"([\d.]+)"

_VALUE_PATTERNS: dict[MetricFamily, str] = {
    MetricFamily.PIPELINE_STATUS: _INTEGER,
    MetricFamily.PIPELINE_DURATION: _DECIMAL,
    MetricFamily.PIPELINE_TIMESTAMP: _DECIMAL,
    MetricFamily.ENVIRONMENT_INFO: _INTEGER,
}

# name{labels} value, with a non-empty label fragment
_LINE_PATTERNS: dict[MetricFamily, re.Pattern[str]] = {
    family: re.compile(re.escape(family.value) + r"\{([^}]+)\}\s+" + value)
    for family, value in _VALUE_PATTERNS.items()
}


def synthesize_id() -> str:
    """Process-local opaque id for status series without an `id` label."""
    return uuid.uuid4().hex[:9]


def classify_line(line: str) -> MetricFamily | None:
    """Return the metric family a line belongs to, if any."""
    if not line.strip() or line.startswith("#"):
        return None
    for family in MetricFamily:
        if family.value in line:
            return family
    return None


class MetricLineParser:
    """Parse exposition lines into typed metric facts.

    Usage:
        parser = MetricLineParser()
        for fact in parser.parse_text(body):
            print(fact.family, fact)
    """

    def __init__(self, id_factory: Callable[[], str] = synthesize_id) -> None:
        self._id_factory = id_factory
        self._facts_parsed: int = 0
        self._lines_skipped: int = 0
        self._parse_errors: int = 0

    @property
    def facts_parsed(self) -> int:
        """Total facts successfully parsed."""
        return self._facts_parsed

    @property
    def lines_skipped(self) -> int:
        """Comments, blank lines and unrecognized metrics."""
        return self._lines_skipped

    @property
    def parse_errors(self) -> int:
        """Lines naming a known family that failed the strict pattern."""
        return self._parse_errors

    def parse_line(self, line: str) -> MetricFact | None:
        """Parse a single exposition line into a fact.

        Returns None if the line carries no fact. Never raises.
        """
        family = classify_line(line)
        if family is None:
            self._lines_skipped += 1
            return None

        match = _LINE_PATTERNS[family].search(line)
        if match is None:
            logger.debug("Skipping malformed %s line: %r", family.value, line)
            self._parse_errors += 1
            return None

        labels = parse_labels(match.group(1))
        try:
            fact = self._build_fact(family, labels, match.group(2))
        except (ValueError, OverflowError, OSError) as e:
            logger.debug("Skipping %s line with bad value: %s", family.value, e)
            self._parse_errors += 1
            return None

        self._facts_parsed += 1
        return fact

    def parse_lines(self, lines: Iterable[str]) -> Iterator[MetricFact]:
        """Parse multiple lines, yielding facts in input order."""
        for line in lines:
            fact = self.parse_line(line)
            if fact is not None:
                yield fact

    def parse_text(self, text: str) -> Iterator[MetricFact]:
        """Parse a whole exposition body. Empty or garbage text yields nothing."""
        return self.parse_lines(text.split("\n"))

    def reset_stats(self) -> None:
        """Reset parsing statistics."""
        self._facts_parsed = 0
        self._lines_skipped = 0
        self._parse_errors = 0

    def _build_fact(
        self, family: MetricFamily, labels: dict[str, str], raw_value: str
    ) -> MetricFact:
        if family is MetricFamily.PIPELINE_STATUS:
            pipeline_id = labels.get("id") or None
            return StatusFact(
                project=labels.get("project") or UNKNOWN_LABEL,
                ref=labels.get("ref") or UNKNOWN_LABEL,
                id=pipeline_id or self._id_factory(),
                status=PipelineStatus.from_code(int(raw_value)),
                synthesized_id=pipeline_id is None,
            )

        if family is MetricFamily.PIPELINE_DURATION:
            return DurationFact(
                project=labels.get("project"),
                ref=labels.get("ref"),
                id=labels.get("id"),
                seconds=float(raw_value),
            )

        if family is MetricFamily.PIPELINE_TIMESTAMP:
            return TimestampFact(
                project=labels.get("project"),
                ref=labels.get("ref"),
                id=labels.get("id"),
                timestamp=datetime.fromtimestamp(float(raw_value), tz=timezone.utc),
            )

        return EnvironmentFact(
            project=labels.get("project") or UNKNOWN_LABEL,
            name=labels.get("environment") or UNKNOWN_LABEL,
            external_url=labels.get("external_url", ""),
            available=int(raw_value) == 1,
        )
