"""Tests for test result models."""

from ipmi_exporter.self_test.collectors.freeipmi import ChassisCollector
from ipmi_exporter.self_test.models.test_case import TestCase
from ipmi_exporter.self_test.models.test_result import RunSummary, TestResult

CASE = TestCase(
    name="chassis_info",
    description="Get chassis information",
    collector=ChassisCollector(),
    expected="chassis info",
)


def make_result(passed: bool, duration: float = 1.0) -> TestResult:
    return TestResult(test_case=CASE, passed=passed, duration=duration)


def test_test_result_minimal() -> None:
    """TestResult accepts minimal required fields."""
    result = make_result(passed=True, duration=0.5)

    assert result.test_case.name == "chassis_info"
    assert result.error is None
    assert result.trace == ""
    assert result.metrics_count == 0
    assert result.metrics == []


def test_test_case_defaults() -> None:
    """TestCase targets the local BMC with the default module."""
    assert CASE.target.is_local
    assert CASE.module == "default"
    assert CASE.collector.name == "chassis"


def test_summary_counts_and_duration() -> None:
    """Passed plus failed always equals total."""
    results = [
        make_result(True, 0.5),
        make_result(False, 1.25),
        make_result(True, 0.25),
    ]

    summary = RunSummary.from_results(results)

    assert summary.passed == 2
    assert summary.failed == 1
    assert summary.total == 3
    assert summary.duration == 2.0
    assert summary.exit_code == 1


def test_summary_all_passed_exit_code() -> None:
    """Exit code is 0 when nothing failed."""
    summary = RunSummary.from_results([make_result(True)])

    assert summary.exit_code == 0


def test_summary_empty() -> None:
    """An empty run has zero counts and exit code 0."""
    summary = RunSummary.from_results([])

    assert (summary.passed, summary.failed, summary.total) == (0, 0, 0)
    assert summary.exit_code == 0
