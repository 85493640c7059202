"""Report rendering for health check runs.

``HealthReporter`` writes one log line per check result plus a trailing
summary line through an injected logger. ``ReportGenerator`` renders the
same report as JSON or Markdown.
"""

import json
import logging
import threading

from avdcheck.health.models import CheckOutcome, CheckResult, RunReport, RunSummary

SUMMARY_LINE_NAME = "Summary"


def summarize(report: RunReport) -> RunSummary:
    """Count Pass, Fail and Error outcomes in a report."""
    return RunSummary(
        pass_count=sum(1 for r in report.results if r.outcome == CheckOutcome.PASS),
        fail_count=sum(1 for r in report.results if r.outcome == CheckOutcome.FAIL),
        error_count=sum(1 for r in report.results if r.outcome == CheckOutcome.ERROR),
    )


class HealthReporter:
    """Render a RunReport through a logger.

    Writes are serialized so that reports rendered from several threads
    never interleave their lines.
    """

    def __init__(self, logger: logging.Logger):
        self._logger = logger
        self._lock = threading.Lock()

    @staticmethod
    def summarize(report: RunReport) -> RunSummary:
        return summarize(report)

    def render(self, report: RunReport) -> RunSummary:
        """Log every result followed by the summary line.

        Returns:
            The summary that was logged
        """
        summary = summarize(report)
        with self._lock:
            for result in report.results:
                self._log_result(result)
            self._logger.info(
                f"Pass: {summary.pass_count}, Fail: {summary.fail_count}, "
                f"Error: {summary.error_count}",
                extra={"check_name": SUMMARY_LINE_NAME},
            )
        return summary

    def _log_result(self, result: CheckResult) -> None:
        message = f"{result.outcome.value}: {result.detail}"
        if result.outcome == CheckOutcome.PASS:
            level = logging.INFO
        elif result.outcome == CheckOutcome.FAIL and result.advisory:
            level = logging.INFO
            message += " (advisory)"
        elif result.outcome == CheckOutcome.FAIL:
            level = logging.WARNING
        else:
            level = logging.ERROR
        self._logger.log(level, message, extra={"check_name": result.check_name})


class ReportGenerator:
    """Generate JSON and Markdown reports from a run."""

    def __init__(self, report: RunReport):
        self.report = report

    def to_json(self, pretty: bool = True) -> str:
        """Generate JSON report.

        Args:
            pretty: Whether to pretty-print the JSON

        Returns:
            JSON string representation of the report
        """
        summary = summarize(self.report)
        data = {
            "id": self.report.id,
            "subscription_id": self.report.subscription_id,
            "started_at": self.report.started_at.isoformat(),
            "completed_at": self.report.completed_at.isoformat()
            if self.report.completed_at
            else None,
            "summary": {
                "passed": summary.pass_count,
                "failed": summary.fail_count,
                "errors": summary.error_count,
                "total": summary.total,
                "duration_ms": self.report.total_duration_ms,
                "is_success": self.report.is_success,
            },
            "results": [
                {
                    "check_name": r.check_name,
                    "outcome": r.outcome.value,
                    "detail": r.detail,
                    "resources_evaluated": r.resources_evaluated,
                    "advisory": r.advisory,
                    "duration_ms": r.duration_ms,
                    "timestamp": r.timestamp.isoformat(),
                }
                for r in self.report.results
            ],
        }

        if pretty:
            return json.dumps(data, indent=2)
        return json.dumps(data)

    def to_markdown(self) -> str:
        """Generate Markdown report."""
        summary = summarize(self.report)
        lines = [
            "# AVD Health Check Report",
            "",
            f"**Run ID:** `{self.report.id}`",
        ]
        if self.report.subscription_id:
            lines.append(f"**Subscription:** `{self.report.subscription_id}`")
        lines.append(
            f"**Started:** {self.report.started_at.strftime('%Y-%m-%d %H:%M:%S')} UTC"
        )

        lines.extend([
            "",
            "## Summary",
            "",
            f"- **Passed:** {summary.pass_count}",
            f"- **Failed:** {summary.fail_count}",
            f"- **Errors:** {summary.error_count}",
            f"- **Total:** {summary.total}",
            "",
            f"## Overall Status: **{'SUCCESS' if self.report.is_success else 'FAILED'}**",
            "",
            "| Check | Outcome | Resources | Detail |",
            "|---|---|---|---|",
        ])

        for result in self.report.results:
            outcome = result.outcome.value
            if result.advisory and result.outcome == CheckOutcome.FAIL:
                outcome += " (advisory)"
            detail = result.detail.replace("|", "\\|")
            lines.append(
                f"| {result.check_name} | {outcome} | {result.resources_evaluated} | {detail} |"
            )

        return "\n".join(lines)


def generate_report(report: RunReport, format: str = "json") -> str:
    """Generate a report in the specified format.

    Args:
        report: The run report to render
        format: Output format ('json', 'markdown' or 'md')

    Returns:
        Formatted report string

    Raises:
        ValueError: If an unsupported format is specified
    """
    generator = ReportGenerator(report)

    format_mapping = {
        "json": generator.to_json,
        "markdown": generator.to_markdown,
        "md": generator.to_markdown,
    }

    if format not in format_mapping:
        raise ValueError(
            f"Unsupported format: {format}. "
            f"Supported formats: {', '.join(format_mapping.keys())}"
        )

    return format_mapping[format]()
