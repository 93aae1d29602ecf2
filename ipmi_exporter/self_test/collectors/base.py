"""Abstract base class for IPMI collectors."""

from abc import ABC, abstractmethod
from typing import ClassVar

from ipmi_exporter.self_test.models.execution import ExecutionResult, Invocation
from ipmi_exporter.self_test.models.ipmi_config import Target
from ipmi_exporter.self_test.models.metric import Metric
from ipmi_exporter.self_test.sink import MetricSink


class CollectionError(Exception):
    """Raised by `Collector.convert` when no valid metrics can be produced."""


class Collector(ABC):
    """Turns the output of one provider command into metrics."""

    name: ClassVar[str]
    provider: ClassVar[str]
    target_arguments_first: ClassVar[bool] = False

    @abstractmethod
    def command(self) -> str:
        """Return the executable to invoke."""

    @abstractmethod
    def arguments(self) -> list[str]:
        """Return the argument list for the invocation."""

    @abstractmethod
    async def convert(
        self, result: ExecutionResult, sink: MetricSink, target: Target
    ) -> int:
        """Push metrics derived from `result` into `sink`.

        Args:
            result: Output of the command returned by `invocation`
            sink: Channel receiving the metrics
            target: Target the command ran against

        Returns:
            Number of metrics pushed

        Raises:
            CollectionError: If the command failed or its output is unusable

        """

    def target_arguments(self, target: Target) -> list[str]:
        """Provider arguments selecting host, driver and session options."""
        return []

    def secret(self, target: Target) -> str | None:
        """Provider config file content carrying credentials, if any."""
        return None

    def environment(self, target: Target) -> dict[str, str]:
        """Extra environment variables for the provider process."""
        return {}

    def invocation(self, target: Target) -> Invocation:
        """Resolve the command line for a target, honouring module overrides."""
        config = target.config
        command = self.command()
        args = list(config.custom_args.get(self.name, self.arguments()))
        if self.target_arguments_first:
            args = [*self.target_arguments(target), *args]
        else:
            args.extend(self.target_arguments(target))

        wrapper = config.collector_cmd.get(self.name)
        if wrapper:
            args = [command, *args]
            command = wrapper

        return Invocation(
            command=command,
            args=args,
            secret=self.secret(target),
            env=self.environment(target),
        )

    async def emit(self, sink: MetricSink, metrics: list[Metric]) -> int:
        """Push a batch of metrics and return how many were pushed."""
        for metric in metrics:
            await sink.put(metric)
        return len(metrics)

    def require_output(self, result: ExecutionResult) -> str:
        """Return decoded output, raising if the command did not succeed."""
        if result.status == "timeout":
            raise CollectionError(result.error or f"{self.command()} timed out")
        if not result.ok:
            raise CollectionError(result.error or f"{self.command()} failed")
        return result.text()

    def __repr__(self) -> str:
        """Return the class name, used in log messages."""
        return f"{type(self).__name__}()"
