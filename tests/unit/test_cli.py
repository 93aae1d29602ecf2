"""Tests for CLI entry point."""

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

from typer.testing import CliRunner

from ipmi_exporter.self_test.cli import app
from ipmi_exporter.self_test.collectors.freeipmi import BMCCollector
from ipmi_exporter.self_test.models.execution import ExecutionResult, Invocation
from ipmi_exporter.self_test.models.ipmi_config import Target
from ipmi_exporter.self_test.models.test_case import TestCase
from ipmi_exporter.self_test.models.test_result import TestResult
from ipmi_exporter.self_test.reporter import Reporter

runner = CliRunner()


def make_result(name: str, passed: bool) -> TestResult:
    return TestResult(
        test_case=TestCase(
            name=name, description=f"Run {name}", collector=BMCCollector()
        ),
        passed=passed,
        duration=0.25,
        error=None if passed else "no such device",
        metrics_count=1 if passed else 0,
    )


def mock_runner(results: list[TestResult]) -> MagicMock:
    """TestRunner stand-in returning fixed results."""
    test_runner = MagicMock()
    test_runner.run_all_tests = AsyncMock(return_value=results)
    test_runner.reporter = Reporter()
    return test_runner


def test_main_all_tests_pass() -> None:
    """Main prints the table and exits 0 when every test passes."""
    results = [make_result("bmc_info", True), make_result("sel_info", True)]

    with patch(
        "ipmi_exporter.self_test.cli.TestRunner", return_value=mock_runner(results)
    ) as mock_class:
        result = runner.invoke(app, [])

    assert result.exit_code == 0
    assert "SUMMARY: 2 PASSED, 0 FAILED, 2 TOTAL" in result.stdout
    assert "IMPLEMENTATION: FreeIPMI" in result.stdout
    config = mock_class.call_args[0][0]
    assert config.use_ipmitool is False
    assert config.target.is_local


def test_main_failed_test_exits_1() -> None:
    """Main exits with code 1 when any test fails."""
    results = [make_result("bmc_info", True), make_result("sel_info", False)]

    with patch(
        "ipmi_exporter.self_test.cli.TestRunner", return_value=mock_runner(results)
    ):
        result = runner.invoke(app, [])

    assert result.exit_code == 1
    assert "SUMMARY: 1 PASSED, 1 FAILED, 2 TOTAL" in result.stdout


def test_main_no_tests_to_run() -> None:
    """Main handles case when no collectors are enabled."""
    with patch("ipmi_exporter.self_test.cli.TestRunner", return_value=mock_runner([])):
        result = runner.invoke(app, [])

    assert result.exit_code == 0
    assert "No tests to run" in result.stdout
    assert "SUMMARY" not in result.stdout


def test_main_ipmitool_and_debug_flags() -> None:
    """Flags select the ipmitool provider and debug mode."""
    results = [make_result("bmc_info_ipmitool", True)]

    with patch(
        "ipmi_exporter.self_test.cli.TestRunner", return_value=mock_runner(results)
    ) as mock_class:
        result = runner.invoke(
            app,
            ["--ipmitool", "--debug", "--target", "10.0.0.5", "--command-timeout", "5"],
        )

    assert result.exit_code == 0
    assert "IMPLEMENTATION: ipmitool" in result.stdout
    config = mock_class.call_args[0][0]
    assert config.use_ipmitool is True
    assert config.debug is True
    assert config.target.host == "10.0.0.5"
    assert config.command_timeout == 5.0


def test_main_loads_module_config(tmp_path: Path) -> None:
    """The selected module from the config file reaches the runner."""
    config_file = tmp_path / "ipmi.yml"
    config_file.write_text(
        "modules:\n  remote:\n    user: admin\n    collectors: [sel]\n"
    )
    results = [make_result("sel_info", True)]

    with patch(
        "ipmi_exporter.self_test.cli.TestRunner", return_value=mock_runner(results)
    ) as mock_class:
        result = runner.invoke(
            app, ["--config-file", str(config_file), "--module", "remote"]
        )

    assert result.exit_code == 0
    config = mock_class.call_args[0][0]
    assert config.module == "remote"
    assert config.target.config.user == "admin"
    assert config.target.config.collectors == ["sel"]


def test_main_missing_config_file(tmp_path: Path) -> None:
    """Main exits with error for a config file that doesn't exist."""
    result = runner.invoke(app, ["--config-file", str(tmp_path / "missing.yml")])

    assert result.exit_code == 1
    assert "Config file not found" in result.output


def test_main_unknown_module(tmp_path: Path) -> None:
    """Main exits with error for a module missing from the config file."""
    config_file = tmp_path / "ipmi.yml"
    config_file.write_text("modules:\n  default: {}\n")

    result = runner.invoke(
        app, ["--config-file", str(config_file), "--module", "remote"]
    )

    assert result.exit_code == 1
    assert "Module 'remote' not found" in result.output


def test_main_invalid_timeout() -> None:
    """A non-positive command timeout is rejected."""
    result = runner.invoke(app, ["--command-timeout", "0"])

    assert result.exit_code == 1
    assert "Invalid configuration" in result.output


def test_main_runs_real_registry() -> None:
    """Every registered collector fails on a host without IPMI tools."""

    async def not_found(invocation: Invocation, target: Target) -> ExecutionResult:
        return ExecutionResult(
            status="error", error=f"failed to start {invocation.command}: not found"
        )

    with patch(
        "ipmi_exporter.self_test.executor.CommandExecutor.execute",
        new=AsyncMock(side_effect=not_found),
    ):
        result = runner.invoke(app, [])

    assert result.exit_code == 1
    assert "SUMMARY: 0 PASSED, 8 FAILED, 8 TOTAL" in result.stdout
    assert "=== FAILED TEST TRACE: bmc_info ===" in result.stdout


def test_main_run_failure_exits_1() -> None:
    """An unexpected error from the run is reported instead of a traceback."""
    test_runner = mock_runner([])
    test_runner.run_all_tests = AsyncMock(side_effect=RuntimeError("loop closed"))

    with patch("ipmi_exporter.self_test.cli.TestRunner", return_value=test_runner):
        result = runner.invoke(app, [])

    assert result.exit_code == 1
    assert "Error running tests: loop closed" in result.output
