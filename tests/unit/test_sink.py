"""Tests for the metric sink."""

import asyncio

import pytest

from ipmi_exporter.self_test.models.metric import Descriptor
from ipmi_exporter.self_test.sink import MetricSink, SinkClosedError

POWER = Descriptor(fq_name="ipmi_power_watts", help="Power.", label_names=("id", "name"))


async def test_sink_yields_pushed_metrics_in_order() -> None:
    """Metrics come out in the order they were pushed."""
    sink = MetricSink(capacity=5)
    for i in range(3):
        await sink.put(POWER.new_metric(float(i), str(i), "PSU"))
    await sink.close()

    values = [metric.value async for metric in sink]

    assert values == [0.0, 1.0, 2.0]
    assert sink.pushed == 3
    assert sink.closed is True


async def test_sink_put_after_close_raises() -> None:
    """A closed sink rejects further metrics."""
    sink = MetricSink()
    await sink.close()

    with pytest.raises(SinkClosedError):
        await sink.put(POWER.new_metric(1.0, "1", "PSU"))


async def test_sink_close_twice_is_noop() -> None:
    """Closing twice leaves a single end marker."""
    sink = MetricSink(capacity=2)
    await sink.close()
    await sink.close()

    assert [metric async for metric in sink] == []


async def test_sink_blocks_when_full_without_consumer() -> None:
    """A full sink makes the producer wait for a free slot."""
    sink = MetricSink(capacity=1)
    await sink.put(POWER.new_metric(1.0, "1", "PSU"))

    with pytest.raises(asyncio.TimeoutError):
        await asyncio.wait_for(sink.put(POWER.new_metric(2.0, "2", "PSU")), 0.05)


async def test_sink_concurrent_producer_and_consumer() -> None:
    """A concurrent consumer drains more metrics than the capacity."""
    sink = MetricSink(capacity=2)

    async def produce() -> None:
        for i in range(20):
            await sink.put(POWER.new_metric(float(i), str(i), "PSU"))
        await sink.close()

    producer = asyncio.create_task(produce())
    drained = [metric async for metric in sink]
    await producer

    assert len(drained) == 20
