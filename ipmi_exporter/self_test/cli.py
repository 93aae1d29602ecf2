"""CLI entry point for the IPMI collector self-test."""

import asyncio
import logging
import sys
from pathlib import Path
import typer
from pydantic import ValidationError

from ipmi_exporter.self_test.config_loader import load_module_config
from ipmi_exporter.self_test.models.ipmi_config import (
    LOCAL_TARGET,
    IPMIConfig,
    SelfTestConfig,
    Target,
)
from ipmi_exporter.self_test.runner import TestRunner

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    stream=sys.stderr,
    force=True,
)
logger = logging.getLogger(__name__)

app = typer.Typer()


def build_config(
    use_ipmitool: bool,
    debug: bool,
    target: str,
    config_file: Path | None,
    module: str,
    command_timeout: float,
    sink_capacity: int,
) -> SelfTestConfig:
    """Assemble the run configuration from command line values.

    Raises:
        FileNotFoundError: If `config_file` doesn't exist
        ValueError: If the module configuration or a value is invalid

    """
    module_config = IPMIConfig()
    if config_file is not None:
        module_config = load_module_config(config_file, module)
        logger.info(f"Loaded module '{module}' from {config_file}")

    try:
        return SelfTestConfig(
            use_ipmitool=use_ipmitool,
            debug=debug,
            command_timeout=command_timeout,
            sink_capacity=sink_capacity,
            target=Target(host=target, config=module_config),
            module=module,
        )
    except ValidationError as e:
        raise ValueError(f"Invalid configuration: {e}") from e


@app.command()
def main(
    ipmitool: bool = typer.Option(
        False, "--ipmitool", help="Use the ipmitool collectors instead of FreeIPMI"
    ),
    debug: bool = typer.Option(
        False, "--debug", help="Dump descriptor and raw output of every metric"
    ),
    target: str = typer.Option(
        LOCAL_TARGET, help="Remote BMC host; empty for the local BMC"
    ),
    config_file: Path | None = typer.Option(  # noqa: B008
        None, help="Exporter YAML configuration with a 'modules' section"
    ),
    module: str = typer.Option("default", help="Module to use from the config file"),
    command_timeout: float = typer.Option(
        60.0, help="Seconds before a provider command is killed"
    ),
    sink_capacity: int = typer.Option(100, help="Metric sink capacity"),
) -> None:
    """Exercise every IPMI collector once and report the results."""
    try:
        config = build_config(
            ipmitool,
            debug,
            target,
            config_file,
            module,
            command_timeout,
            sink_capacity,
        )
    except (FileNotFoundError, ValueError) as e:
        logger.error(f"Failed to load configuration: {e}")
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    logger.info("=" * 80)
    logger.info(f"IPMI collector self-test - {config.implementation}")
    logger.info("=" * 80)
    logger.info(f"Target: {target or 'local BMC'}")
    logger.info(f"Module: {module}")
    logger.info(f"Debug: {debug}")

    runner = TestRunner(config)
    try:
        results = asyncio.run(runner.run_all_tests())
    except Exception as e:
        logger.exception("Self-test run failed")
        typer.echo(f"Error running tests: {e}", err=True)
        raise typer.Exit(code=1)

    if not results:
        typer.echo("No tests to run")
        return

    summary = runner.reporter.print_results_table(results, config.implementation)
    if summary.failed:
        logger.error(f"Tests failed: {summary.failed}/{summary.total}")
        raise typer.Exit(code=summary.exit_code)


if __name__ == "__main__":  # pragma: no cover
    app()
