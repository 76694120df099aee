"""Tests for the metric-line parser."""

from datetime import datetime, timezone

import pytest

from src.dashboard.core.line_parser import MetricLineParser, classify_line
from src.dashboard.models.facts import (
    DurationFact,
    EnvironmentFact,
    MetricFamily,
    StatusFact,
    TimestampFact,
)
from src.dashboard.models.records import PipelineStatus


class TestClassifyLine:
    """Tests for metric family classification."""

    def test_classifies_each_family(self) -> None:
        """Each metric name maps to its family."""
        assert classify_line('gitlab_ci_pipeline_last_run_status{a="b"} 0') is (
            MetricFamily.PIPELINE_STATUS
        )
        assert classify_line(
            'gitlab_ci_pipeline_last_run_duration_seconds{a="b"} 1'
        ) is MetricFamily.PIPELINE_DURATION
        assert classify_line('gitlab_ci_pipeline_timestamp{a="b"} 1') is (
            MetricFamily.PIPELINE_TIMESTAMP
        )
        assert classify_line('gitlab_ci_environment_information{a="b"} 1') is (
            MetricFamily.ENVIRONMENT_INFO
        )

    def test_comments_and_blanks(self) -> None:
        """Comments and blank lines have no family."""
        assert classify_line("# TYPE gitlab_ci_pipeline_last_run_status gauge") is None
        assert classify_line("") is None
        assert classify_line("   ") is None

    def test_unknown_metric(self) -> None:
        """Unrelated metrics have no family."""
        assert classify_line('go_goroutines{job="x"} 12') is None


class TestParseStatus:
    """Tests for pipeline status lines."""

    @pytest.mark.parametrize(
        "code,expected",
        [
            (0, PipelineStatus.SUCCESS),
            (1, PipelineStatus.FAILED),
            (2, PipelineStatus.CANCELED),
            (3, PipelineStatus.SKIPPED),
            (4, PipelineStatus.RUNNING),
            (5, PipelineStatus.PENDING),
            (6, PipelineStatus.CREATED),
            (7, PipelineStatus.UNKNOWN),
            (42, PipelineStatus.UNKNOWN),
        ],
    )
    def test_status_codes(self, code: int, expected: PipelineStatus) -> None:
        """Codes 0-6 map in order; anything else is unknown."""
        parser = MetricLineParser()
        fact = parser.parse_line(
            f'gitlab_ci_pipeline_last_run_status{{id="1",project="p",ref="main"}} {code}'
        )

        assert isinstance(fact, StatusFact)
        assert fact.status is expected

    def test_parse_status_labels(self) -> None:
        """Project, ref and id come from the labels."""
        parser = MetricLineParser()
        fact = parser.parse_line(
            'gitlab_ci_pipeline_last_run_status{id="101",project="group/api",ref="main",kind="branch"} 0'
        )

        assert isinstance(fact, StatusFact)
        assert fact.project == "group/api"
        assert fact.ref == "main"
        assert fact.id == "101"
        assert fact.synthesized_id is False

    def test_missing_project_and_ref_default_to_unknown(self) -> None:
        """Missing project/ref labels default to "Unknown"."""
        parser = MetricLineParser()
        fact = parser.parse_line('gitlab_ci_pipeline_last_run_status{id="7"} 0')

        assert isinstance(fact, StatusFact)
        assert fact.project == "Unknown"
        assert fact.ref == "Unknown"

    def test_missing_id_is_synthesized(self) -> None:
        """Missing id gets a generated opaque identifier."""
        parser = MetricLineParser(id_factory=lambda: "generated")
        fact = parser.parse_line(
            'gitlab_ci_pipeline_last_run_status{project="p",ref="main"} 0'
        )

        assert isinstance(fact, StatusFact)
        assert fact.id == "generated"
        assert fact.synthesized_id is True

    def test_default_synthesized_ids_differ(self) -> None:
        """The default id factory produces distinct ids."""
        parser = MetricLineParser()
        line = 'gitlab_ci_pipeline_last_run_status{project="p",ref="main"} 0'

        first = parser.parse_line(line)
        second = parser.parse_line(line)

        assert isinstance(first, StatusFact) and isinstance(second, StatusFact)
        assert first.id != second.id
        assert len(first.id) == 9

    def test_negative_status_is_malformed(self) -> None:
        """A non-digit value fails the strict pattern."""
        parser = MetricLineParser()
        fact = parser.parse_line(
            'gitlab_ci_pipeline_last_run_status{project="p",ref="main"} -1'
        )

        assert fact is None
        assert parser.parse_errors == 1


class TestParseDurationAndTimestamp:
    """Tests for duration and timestamp lines."""

    def test_parse_duration(self) -> None:
        """Durations are float seconds."""
        parser = MetricLineParser()
        fact = parser.parse_line(
            'gitlab_ci_pipeline_last_run_duration_seconds{id="1",project="p",ref="main"} 300.5'
        )

        assert isinstance(fact, DurationFact)
        assert fact.seconds == 300.5
        assert (fact.project, fact.ref, fact.id) == ("p", "main", "1")

    def test_duration_labels_are_not_defaulted(self) -> None:
        """Absent labels on pipeline refinements stay None."""
        parser = MetricLineParser()
        fact = parser.parse_line(
            'gitlab_ci_pipeline_last_run_duration_seconds{ref="main"} 10'
        )

        assert isinstance(fact, DurationFact)
        assert fact.project is None
        assert fact.id is None

    def test_parse_timestamp(self) -> None:
        """Timestamps are epoch seconds converted to UTC datetimes."""
        parser = MetricLineParser()
        fact = parser.parse_line(
            'gitlab_ci_pipeline_timestamp{id="1",project="p",ref="main"} 1700000000'
        )

        assert isinstance(fact, TimestampFact)
        assert fact.timestamp == datetime(2023, 11, 14, 22, 13, 20, tzinfo=timezone.utc)

    def test_unconvertible_decimal_is_skipped(self) -> None:
        """A value matching the pattern but not a float is skipped."""
        parser = MetricLineParser()
        fact = parser.parse_line(
            'gitlab_ci_pipeline_last_run_duration_seconds{id="1",project="p",ref="m"} 1.2.3'
        )

        assert fact is None
        assert parser.parse_errors == 1

    def test_nan_duration_is_skipped(self) -> None:
        """NaN fails the strict value pattern."""
        parser = MetricLineParser()
        fact = parser.parse_line(
            'gitlab_ci_pipeline_last_run_duration_seconds{id="1",project="p",ref="m"} NaN'
        )

        assert fact is None


class TestParseEnvironment:
    """Tests for environment information lines."""

    def test_available_environment(self) -> None:
        """Value 1 marks the environment available."""
        parser = MetricLineParser()
        fact = parser.parse_line(
            'gitlab_ci_environment_information{project="p",environment="prod",external_url="https://x"} 1'
        )

        assert isinstance(fact, EnvironmentFact)
        assert fact.project == "p"
        assert fact.name == "prod"
        assert fact.external_url == "https://x"
        assert fact.available is True

    @pytest.mark.parametrize("value", ["0", "2", "10"])
    def test_other_values_are_unavailable(self, value: str) -> None:
        """Any value other than 1 marks the environment unavailable."""
        parser = MetricLineParser()
        fact = parser.parse_line(
            f'gitlab_ci_environment_information{{project="p",environment="prod"}} {value}'
        )

        assert isinstance(fact, EnvironmentFact)
        assert fact.available is False

    def test_missing_environment_labels(self) -> None:
        """Missing name defaults to "Unknown" and URL to empty."""
        parser = MetricLineParser()
        fact = parser.parse_line('gitlab_ci_environment_information{foo="bar"} 1')

        assert isinstance(fact, EnvironmentFact)
        assert fact.project == "Unknown"
        assert fact.name == "Unknown"
        assert fact.external_url == ""


class TestParseText:
    """Tests for parsing whole bodies."""

    def test_empty_text(self) -> None:
        """Empty input yields no facts."""
        parser = MetricLineParser()

        assert list(parser.parse_text("")) == []

    def test_garbage_text(self) -> None:
        """Non-metrics text yields no facts and never raises."""
        parser = MetricLineParser()

        assert list(parser.parse_text("<html>\n<body>Not found</body>\n</html>")) == []

    def test_missing_label_braces_skipped(self) -> None:
        """A known family without a label set is malformed."""
        parser = MetricLineParser()

        assert parser.parse_line("gitlab_ci_pipeline_last_run_status 0") is None
        assert parser.parse_line("gitlab_ci_pipeline_last_run_status{} 0") is None
        assert parser.parse_errors == 2

    def test_sample_counts(self, sample_exposition: str) -> None:
        """Facts are yielded in file order and counted."""
        parser = MetricLineParser()

        facts = list(parser.parse_text(sample_exposition))

        assert [type(f) for f in facts] == [
            StatusFact,
            StatusFact,
            StatusFact,
            DurationFact,
            DurationFact,
            TimestampFact,
            TimestampFact,
            EnvironmentFact,
            EnvironmentFact,
        ]
        assert parser.facts_parsed == 9
        assert parser.parse_errors == 0

    def test_reset_stats(self, sample_exposition: str) -> None:
        """reset_stats clears all counters."""
        parser = MetricLineParser()
        list(parser.parse_text(sample_exposition))

        parser.reset_stats()

        assert parser.facts_parsed == 0
        assert parser.lines_skipped == 0
        assert parser.parse_errors == 0
