"""Tests for report rendering and aggregation."""

import io
import json
import re
import uuid
from concurrent.futures import ThreadPoolExecutor

import pytest

from avdcheck.core.log_config import build_check_logger
from avdcheck.health.models import CheckOutcome, CheckResult, RunReport
from avdcheck.health.reports import (
    HealthReporter,
    ReportGenerator,
    generate_report,
    summarize,
)

LINE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2},\d{3} - (\w+) - (.+)$")


@pytest.fixture
def sample_report():
    """Report with two passes, one blocking fail, one advisory fail and one error."""
    return RunReport(
        id="run-1",
        subscription_id="sub-1",
        results=[
            CheckResult(check_name="HostPoolExistence", outcome=CheckOutcome.PASS,
                        detail="Found 1 host pools: hp-a", resources_evaluated=1),
            CheckResult(check_name="WorkspaceExistence", outcome=CheckOutcome.FAIL,
                        detail="no workspaces"),
            CheckResult(check_name="ImagePackageExistence", outcome=CheckOutcome.FAIL,
                        detail="no image packages", advisory=True),
            CheckResult(check_name="HostAvailability", outcome=CheckOutcome.ERROR,
                        detail="Could not reach Azure"),
            CheckResult(check_name="HostDrainMode", outcome=CheckOutcome.PASS,
                        detail="avd-0: drain mode OFF", resources_evaluated=1),
        ],
    )


@pytest.fixture
def log_stream():
    return io.StringIO()


@pytest.fixture
def check_logger(log_stream):
    return build_check_logger(name=f"test.report.{uuid.uuid4().hex}", stream=log_stream)


class TestSummarize:
    """Test suite for outcome tallies."""

    def test_counts_each_outcome(self, sample_report):
        """Test Pass, Fail and Error are counted separately."""
        summary = summarize(sample_report)

        assert summary.pass_count == 2
        assert summary.fail_count == 2
        assert summary.error_count == 1
        assert summary.total == 5

    def test_reporter_summarize_matches(self, sample_report, check_logger):
        """Test the reporter exposes the same aggregation."""
        assert HealthReporter(check_logger).summarize(sample_report) == summarize(sample_report)

    def test_empty_report(self):
        """Test an empty report yields zero counts."""
        summary = summarize(RunReport(id="empty"))

        assert (summary.pass_count, summary.fail_count, summary.error_count) == (0, 0, 0)


class TestHealthReporter:
    """Test suite for log rendering."""

    def test_one_line_per_result_plus_summary(self, sample_report, check_logger, log_stream):
        """Test each result renders as '<timestamp> - <checkName> - <message>'."""
        HealthReporter(check_logger).render(sample_report)

        lines = log_stream.getvalue().splitlines()
        assert len(lines) == 6

        matches = [LINE_PATTERN.match(line) for line in lines]
        assert all(matches)
        assert [m.group(1) for m in matches] == [
            "HostPoolExistence",
            "WorkspaceExistence",
            "ImagePackageExistence",
            "HostAvailability",
            "HostDrainMode",
            "Summary",
        ]
        assert matches[1].group(2) == "Fail: no workspaces"
        assert matches[2].group(2) == "Fail: no image packages (advisory)"
        assert matches[-1].group(2) == "Pass: 2, Fail: 2, Error: 1"

    def test_render_does_not_alter_outcomes(self, sample_report, check_logger):
        """Test rendering leaves the report untouched."""
        before = sample_report.model_dump()

        HealthReporter(check_logger).render(sample_report)

        assert sample_report.model_dump() == before

    def test_concurrent_renders_do_not_interleave(self, sample_report, check_logger, log_stream):
        """Test reports rendered from several threads keep their lines together."""
        reporter = HealthReporter(check_logger)

        with ThreadPoolExecutor(max_workers=4) as pool:
            list(pool.map(lambda _: reporter.render(sample_report), range(8)))

        lines = log_stream.getvalue().splitlines()
        assert len(lines) == 6 * 8
        assert all(LINE_PATTERN.match(line) for line in lines)
        for start in range(0, len(lines), 6):
            block = [LINE_PATTERN.match(line).group(1) for line in lines[start:start + 6]]
            assert block[0] == "HostPoolExistence"
            assert block[-1] == "Summary"

    def test_log_file_receives_lines(self, sample_report, tmp_path):
        """Test the optional file handler receives the same lines."""
        log_file = tmp_path / "health.log"
        file_logger = build_check_logger(
            name=f"test.report.{uuid.uuid4().hex}",
            log_file=str(log_file),
            stream=io.StringIO(),
        )

        HealthReporter(file_logger).render(sample_report)
        for handler in file_logger.handlers:
            handler.flush()

        assert len(log_file.read_text().splitlines()) == 6


class TestReportGenerator:
    """Test suite for JSON and Markdown output."""

    def test_json_contains_results_and_summary(self, sample_report):
        """Test JSON output includes every result and the tallies."""
        data = json.loads(ReportGenerator(sample_report).to_json())

        assert data["id"] == "run-1"
        assert data["summary"]["passed"] == 2
        assert data["summary"]["errors"] == 1
        assert data["summary"]["is_success"] is False
        assert [r["check_name"] for r in data["results"]][0] == "HostPoolExistence"
        assert data["results"][2]["advisory"] is True

    def test_markdown_lists_each_check(self, sample_report):
        """Test Markdown output has a table row per check."""
        markdown = ReportGenerator(sample_report).to_markdown()

        assert "# AVD Health Check Report" in markdown
        assert "| WorkspaceExistence | Fail | 0 | no workspaces |" in markdown
        assert "Fail (advisory)" in markdown
        assert "**FAILED**" in markdown

    def test_generate_report_dispatch(self, sample_report):
        """Test format dispatch and rejection of unknown formats."""
        assert generate_report(sample_report, "md").startswith("# AVD Health Check Report")
        json.loads(generate_report(sample_report, "json"))

        with pytest.raises(ValueError, match="Unsupported format"):
            generate_report(sample_report, "html")
