"""Console rendering of self-test results."""

import logging
from collections.abc import Sequence

import typer

from ipmi_exporter.self_test.models.execution import Invocation
from ipmi_exporter.self_test.models.metric import Metric
from ipmi_exporter.self_test.models.test_result import RunSummary, TestResult

logger = logging.getLogger(__name__)

TABLE_WIDTH = 120
DESCRIPTION_WIDTH = 35
ERROR_WIDTH = 15
ELLIPSIS = "..."
RAW_OUTPUT_LINES = 10


def truncate(text: str, width: int) -> str:
    """Shorten `text` to `width` characters, ending with an ellipsis."""
    if len(text) <= width:
        return text
    return text[: width - len(ELLIPSIS)] + ELLIPSIS


def format_duration(seconds: float) -> str:
    """Render a duration in seconds, or milliseconds below one second."""
    if seconds < 1:
        return f"{seconds * 1000:.3f}ms"
    return f"{seconds:.3f}s"


def excerpt(text: str, max_lines: int = RAW_OUTPUT_LINES) -> str:
    """Return the first lines of `text`, noting how many were dropped."""
    lines = text.strip().splitlines()
    if len(lines) <= max_lines:
        return "\n".join(lines)
    dropped = len(lines) - max_lines
    return "\n".join([*lines[:max_lines], f"... ({dropped} more lines)"])


def format_metric_summary(metric: Metric, invocation: Invocation, raw_output: str) -> str:
    """Describe a metric's descriptor and the command that produced it."""
    desc = metric.descriptor
    lines = [
        f"Metric: {desc}",
        f"Metric Name: {desc.fq_name}",
        f"Description: {desc.help}",
    ]
    if desc.label_names:
        lines.append(f"Available Labels: {{{','.join(desc.label_names)}}}")
    lines.extend(
        [
            "IPMI Command Output:",
            f"  Command: {invocation.command}",
            f"  Args: {invocation.args}",
            "  Raw Output:",
        ]
    )
    lines.extend(f"    {line}" for line in raw_output.splitlines() or [""])
    return "\n".join(lines)


class Reporter:
    """Logs per-test outcomes and prints trace blocks and the summary table."""

    def __init__(self, debug: bool = False) -> None:
        """Initialize reporter; `debug` enables the per-metric blocks."""
        self.debug = debug

    def report_result(self, result: TestResult) -> None:
        """Log a finished test and print its trace or debug block."""
        name = result.test_case.name
        duration = format_duration(result.duration)
        if result.passed:
            logger.info(
                f"Test PASSED: {name} (duration: {duration}, "
                f"metrics: {result.metrics_count})"
            )
        else:
            logger.error(
                f"Test FAILED: {name} (duration: {duration}, error: {result.error})"
            )
            self.print_trace(result)

        if self.debug and result.metrics:
            self.print_debug_metrics(result)

    def print_trace(self, result: TestResult) -> None:
        """Print the trace block of a failed test."""
        typer.echo(f"\n=== FAILED TEST TRACE: {result.test_case.name} ===")
        typer.echo(result.trace)
        typer.echo("=== END TRACE ===\n")

    def print_debug_metrics(self, result: TestResult) -> None:
        """Print the captured metric summaries of a test."""
        typer.echo(f"\n=== DEBUG METRICS: {result.test_case.name} ===")
        typer.echo("\n---\n".join(result.metrics))
        typer.echo("=== END DEBUG METRICS ===\n")

    def print_results_table(
        self, results: Sequence[TestResult], implementation: str
    ) -> RunSummary:
        """Print the fixed-width results table and the summary block."""
        typer.echo("\n" + "=" * TABLE_WIDTH)
        typer.echo(
            f"{'TEST NAME':<25} {'DESCRIPTION':<35} {'STATUS':<8} "
            f"{'DURATION':<12} {'METRICS':<10} {'ERROR':<15}"
        )
        typer.echo("-" * TABLE_WIDTH)

        for result in results:
            status = typer.style(
                f"{'PASS' if result.passed else 'FAIL':<8}",
                fg=typer.colors.GREEN if result.passed else typer.colors.RED,
            )
            description = truncate(result.test_case.description, DESCRIPTION_WIDTH)
            error = truncate(result.error or "", ERROR_WIDTH)
            typer.echo(
                f"{result.test_case.name:<25} {description:<35} {status} "
                f"{format_duration(result.duration):<12} "
                f"{result.metrics_count:<10} {error:<15}"
            )

        summary = RunSummary.from_results(results)
        typer.echo("-" * TABLE_WIDTH)
        typer.echo(
            f"SUMMARY: {summary.passed} PASSED, {summary.failed} FAILED, "
            f"{summary.total} TOTAL"
        )
        typer.echo(f"TOTAL DURATION: {format_duration(summary.duration)}")
        typer.echo(f"IMPLEMENTATION: {implementation}")
        typer.echo("=" * TABLE_WIDTH)
        return summary
