"""Bounded hand-off channel between a collector and the drain loop."""

import asyncio
from collections.abc import AsyncIterator

from ipmi_exporter.self_test.models.metric import Metric

DEFAULT_CAPACITY = 100


class SinkClosedError(RuntimeError):
    """Raised when a metric is pushed into a closed sink."""


class MetricSink:
    """Single-pass bounded channel of metrics.

    A producer pushes with `put` and calls `close` when done; a consumer
    iterates with `async for` until the sink is closed. Producer and
    consumer must run as separate tasks, otherwise a producer emitting more
    than `capacity` metrics blocks forever.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        """Initialize an empty sink with the given number of slots."""
        self.capacity = capacity
        self.pushed = 0
        self._queue: asyncio.Queue[Metric | None] = asyncio.Queue(maxsize=capacity)
        self._closed = False

    @property
    def closed(self) -> bool:
        """Return True once the producer has closed the sink."""
        return self._closed

    async def put(self, metric: Metric) -> None:
        """Push a metric, waiting for a free slot."""
        if self._closed:
            raise SinkClosedError(f"sink closed, rejected {metric.descriptor.fq_name}")
        await self._queue.put(metric)
        self.pushed += 1

    async def close(self) -> None:
        """Mark the end of the stream. Closing twice is a no-op."""
        if self._closed:
            return
        self._closed = True
        await self._queue.put(None)

    async def __aiter__(self) -> AsyncIterator[Metric]:
        """Yield metrics until the sink is closed."""
        while True:
            metric = await self._queue.get()
            if metric is None:
                return
            yield metric
