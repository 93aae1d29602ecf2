"""Run every registered collector once and classify the outcome."""

import asyncio
import logging
import time

from ipmi_exporter.self_test.collectors.base import CollectionError
from ipmi_exporter.self_test.executor import CommandExecutor
from ipmi_exporter.self_test.models.execution import ExecutionResult, Invocation
from ipmi_exporter.self_test.models.ipmi_config import SelfTestConfig
from ipmi_exporter.self_test.models.metric import Metric
from ipmi_exporter.self_test.models.test_case import TestCase
from ipmi_exporter.self_test.models.test_result import RunSummary, TestResult
from ipmi_exporter.self_test.registry import CollectorRegistry
from ipmi_exporter.self_test.reporter import (
    Reporter,
    excerpt,
    format_metric_summary,
)
from ipmi_exporter.self_test.sink import MetricSink

logger = logging.getLogger(__name__)


class TestRunner:
    """Executes the self-test suite sequentially against one target."""

    __test__ = False

    def __init__(
        self,
        config: SelfTestConfig,
        executor: CommandExecutor | None = None,
        registry: CollectorRegistry | None = None,
        reporter: Reporter | None = None,
    ) -> None:
        """Initialize runner with explicit configuration and collaborators."""
        self.config = config
        self.executor = executor or CommandExecutor(timeout=config.command_timeout)
        self.registry = registry or CollectorRegistry(config)
        self.reporter = reporter or Reporter(debug=config.debug)
        self.results: list[TestResult] = []

    async def run_all_tests(self) -> list[TestResult]:
        """Run all registered test cases, one after another."""
        test_cases = self.registry.get_test_cases()
        names = [test_case.name for test_case in test_cases]
        if len(names) != len(set(names)):
            raise ValueError(f"Duplicate test case names: {names}")

        logger.info(f"Starting IPMI self-test suite - total tests: {len(test_cases)}")
        for test_case in test_cases:
            result = await self.run_test(test_case)
            self.results.append(result)
            self.reporter.report_result(result)

        return list(self.results)

    async def run_test(self, test_case: TestCase) -> TestResult:
        """Execute, convert, drain and classify a single test case."""
        start = time.monotonic()
        logger.info(f"Running test: {test_case.name} - {test_case.description}")

        invocation: Invocation | None = None
        output: ExecutionResult | None = None
        error: str | None = None
        metrics_count = 0
        summaries: list[str] = []
        trace = ""
        try:
            invocation = test_case.collector.invocation(test_case.target)
            output = await self.executor.execute(invocation, test_case.target)
            metrics_count, kept = await self._convert_and_drain(test_case, output)
        except CollectionError as e:
            error = str(e)
        except Exception as e:
            logger.error(
                f"Collector {test_case.collector!r} raised {type(e).__name__}: {e}",
                exc_info=e,
            )
            error = f"{type(e).__name__}: {e}"
        else:
            trace = (
                f"Command: {invocation.describe()}\n"
                f"Metrics collected: {metrics_count}"
            )
            if self.config.debug and kept:
                summaries = await self._summarize(test_case, invocation, kept)

        if error is not None:
            trace = self._failure_trace(invocation, output, error)

        return TestResult(
            test_case=test_case,
            passed=error is None and metrics_count > 0,
            duration=time.monotonic() - start,
            error=error,
            trace=trace,
            metrics_count=metrics_count,
            metrics=summaries,
        )

    def summary(self) -> RunSummary:
        """Aggregate the results collected so far."""
        return RunSummary.from_results(self.results)

    async def _convert_and_drain(
        self, test_case: TestCase, output: ExecutionResult
    ) -> tuple[int, list[Metric]]:
        """Run the conversion as a producer task while draining the sink.

        Returns the drained count and, in debug mode, the drained metrics.

        Raises:
            CollectionError: If the conversion failed or its reported count
                differs from the number of metrics drained

        """
        sink = MetricSink(self.config.sink_capacity)

        async def produce() -> int:
            """Run the conversion and close the sink when it ends."""
            try:
                return await test_case.collector.convert(output, sink, test_case.target)
            finally:
                await sink.close()

        producer = asyncio.create_task(produce())
        drained = 0
        kept: list[Metric] = []
        async for metric in sink:
            drained += 1
            if self.config.debug:
                kept.append(metric)

        reported = await producer
        if reported != drained:
            raise CollectionError(
                f"collector reported {reported} metrics but emitted {drained}"
            )
        return drained, kept

    async def _summarize(
        self, test_case: TestCase, invocation: Invocation, metrics: list[Metric]
    ) -> list[str]:
        """Build debug summaries, re-running the command once for a raw sample."""
        sample = await self.executor.execute(invocation, test_case.target)
        if sample.ok:
            raw_output = excerpt(sample.text())
        else:
            raw_output = f"<{sample.status}: {sample.error}>"
        return [
            format_metric_summary(metric, invocation, raw_output) for metric in metrics
        ]

    def _failure_trace(
        self,
        invocation: Invocation | None,
        output: ExecutionResult | None,
        error: str,
    ) -> str:
        """Describe where a test failed, with an excerpt of any captured output."""
        lines = []
        if invocation is not None:
            lines.append(f"Command: {invocation.describe()}")
        if output is not None:
            lines.append(f"Execution status: {output.status}")
        lines.append(f"Collection failed: {error}")
        if output is not None and output.output:
            lines.append("Output:")
            lines.append(excerpt(output.text()))
        return "\n".join(lines)
