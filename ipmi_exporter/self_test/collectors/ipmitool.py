"""ipmitool collectors (alternate provider).

Each collector covers the same information category as its FreeIPMI
counterpart and emits the same metric names.
"""

import csv
import io
import logging
from datetime import datetime

from ipmi_exporter.self_test.collectors import metrics as m
from ipmi_exporter.self_test.collectors.base import CollectionError, Collector
from ipmi_exporter.self_test.collectors.parsing import (
    parse_bool,
    parse_key_values,
    parse_number,
    parse_raw_octets,
    require_value,
)
from ipmi_exporter.self_test.models.execution import ExecutionResult
from ipmi_exporter.self_test.models.ipmi_config import Target
from ipmi_exporter.self_test.sink import MetricSink

logger = logging.getLogger(__name__)

IPMITOOL = "ipmitool"
SEL_DIRECTIONS = ("Asserted", "Deasserted")


class IpmitoolCollector(Collector):
    """Base for collectors shelling out to ipmitool.

    Interface options must precede the subcommand, so target arguments are
    placed first.
    """

    provider = "ipmitool"
    target_arguments_first = True

    def command(self) -> str:
        """Return the `ipmitool` executable."""
        return IPMITOOL

    def target_arguments(self, target: Target) -> list[str]:
        """Interface and session options taken from the module configuration."""
        if target.is_local:
            return []
        config = target.config
        interface = "lan" if config.driver.upper() == "LAN" else "lanplus"
        args = ["-I", interface, "-H", target.host]
        if config.user:
            args.extend(["-U", config.user])
        if config.password:
            args.append("-E")
        if config.privilege:
            args.extend(["-L", config.privilege.upper()])
        return args

    def environment(self, target: Target) -> dict[str, str]:
        """Password for `-E`, kept off the command line."""
        if target.is_local or not target.config.password:
            return {}
        return {"IPMI_PASSWORD": target.config.password}


class BMCIpmitoolCollector(IpmitoolCollector):
    """BMC device information from `ipmitool mc info`."""

    name = "bmc"

    def arguments(self) -> list[str]:
        """Return the subcommand of `ipmitool mc info`."""
        return ["mc", "info"]

    async def convert(
        self, result: ExecutionResult, sink: MetricSink, target: Target
    ) -> int:
        """Parse `ipmitool mc info` output into metrics."""
        values = parse_key_values(self.require_output(result))
        firmware = require_value(values, "firmware revision", IPMITOOL)
        manufacturer = require_value(values, "manufacturer id", IPMITOOL)
        return await self.emit(
            sink, [m.BMC_INFO.new_metric(1.0, firmware, manufacturer, "N/A")]
        )


class ChassisIpmitoolCollector(IpmitoolCollector):
    """Chassis power and fault state from `ipmitool chassis status`."""

    name = "chassis"

    def arguments(self) -> list[str]:
        """Return the subcommand of `ipmitool chassis status`."""
        return ["chassis", "status"]

    async def convert(
        self, result: ExecutionResult, sink: MetricSink, target: Target
    ) -> int:
        """Parse `ipmitool chassis status` output into metrics."""
        values = parse_key_values(self.require_output(result))
        power = require_value(values, "system power", IPMITOOL)
        drive_fault = require_value(values, "drive fault", IPMITOOL)
        cooling_fault = require_value(values, "cooling/fan fault", IPMITOOL)
        return await self.emit(
            sink,
            [
                m.CHASSIS_POWER_STATE.new_metric(parse_bool(power)),
                m.CHASSIS_DRIVE_FAULT_STATE.new_metric(1.0 - parse_bool(drive_fault)),
                m.CHASSIS_COOLING_FAULT_STATE.new_metric(
                    1.0 - parse_bool(cooling_fault)
                ),
            ],
        )


class DCMIIpmitoolCollector(IpmitoolCollector):
    """Power consumption from `ipmitool dcmi power reading`."""

    name = "dcmi"

    def arguments(self) -> list[str]:
        """Return the subcommand of `ipmitool dcmi power reading`."""
        return ["dcmi", "power", "reading"]

    async def convert(
        self, result: ExecutionResult, sink: MetricSink, target: Target
    ) -> int:
        """Parse `ipmitool dcmi power reading` output into metrics."""
        values = parse_key_values(self.require_output(result))
        state = values.get("power reading state is", "activated")
        if state.lower() != "activated":
            raise CollectionError(f"power reading state is {state}")

        watts = parse_number(
            require_value(values, "instantaneous power reading", IPMITOOL)
        )
        if watts is None:
            raise CollectionError("instantaneous power reading is not a number")
        return await self.emit(sink, [m.DCMI_POWER_CONSUMPTION.new_metric(watts)])


class IPMIIpmitoolCollector(IpmitoolCollector):
    """Sensor readings from the `ipmitool sensor` table.

    The table carries no sensor IDs; rows are numbered from 1 in output order.
    """

    name = "ipmi"

    def arguments(self) -> list[str]:
        """Return the subcommand of `ipmitool sensor`."""
        return ["sensor"]

    async def convert(
        self, result: ExecutionResult, sink: MetricSink, target: Target
    ) -> int:
        """Parse `ipmitool sensor` output into metrics."""
        excluded = {str(sensor_id) for sensor_id in target.config.exclude_sensor_ids}
        count = 0
        rows = [
            [col.strip() for col in line.split("|")]
            for line in self.require_output(result).splitlines()
            if "|" in line
        ]
        for index, cols in enumerate(rows, start=1):
            if len(cols) < 4:
                raise CollectionError(f"malformed sensor row: {' | '.join(cols)}")
            sensor_id = str(index)
            name, reading, units, status = cols[:4]
            if sensor_id in excluded:
                logger.debug(f"Skipping excluded sensor {sensor_id} ({name})")
                continue

            sensor_type = ""
            if units.lower() == "discrete":
                sensor_type = "discrete"
                reading = _hex_reading(reading)
            count += await self.emit(
                sink, m.sensor_metrics(sensor_id, name, sensor_type, status, reading, units)
            )
        return count


class SELIpmitoolCollector(IpmitoolCollector):
    """SEL size and free space from `ipmitool sel info`."""

    name = "sel"

    def arguments(self) -> list[str]:
        """Return the subcommand of `ipmitool sel info`."""
        return ["sel", "info"]

    async def convert(
        self, result: ExecutionResult, sink: MetricSink, target: Target
    ) -> int:
        """Parse `ipmitool sel info` output into metrics."""
        values = parse_key_values(self.require_output(result))
        entries = parse_number(require_value(values, "entries", IPMITOOL))
        free_space = parse_number(require_value(values, "free space", IPMITOOL))
        if entries is None or free_space is None:
            raise CollectionError("SEL info values are not numbers")
        return await self.emit(
            sink,
            [
                m.SEL_LOGS_COUNT.new_metric(entries),
                m.SEL_FREE_SPACE.new_metric(free_space),
            ],
        )


class SELEventsIpmitoolCollector(IpmitoolCollector):
    """SEL events grouped by assertion direction from `ipmitool -c sel elist`."""

    name = "sel-events"

    def arguments(self) -> list[str]:
        """Return the subcommand of `ipmitool -c sel elist`."""
        return ["-c", "sel", "elist"]

    async def convert(
        self, result: ExecutionResult, sink: MetricSink, target: Target
    ) -> int:
        """Parse `ipmitool -c sel elist` output into metrics."""
        states: list[str] = []
        timestamps: list[datetime] = []
        for row in csv.reader(io.StringIO(self.require_output(result))):
            if not row:
                continue
            if len(row) < 6:
                raise CollectionError(f"malformed SEL row: {','.join(row)}")
            date, time, direction = row[1].strip(), row[2].strip(), row[-1].strip()
            states.append(direction)
            try:
                timestamps.append(datetime.strptime(f"{date} {time}", "%m/%d/%Y %H:%M:%S"))
            except ValueError:
                logger.debug(f"Unparseable SEL timestamp: {date} {time}")
        return await self.emit(
            sink, m.sel_event_metrics(states, timestamps, SEL_DIRECTIONS)
        )


class BMCWatchdogIpmitoolCollector(IpmitoolCollector):
    """Watchdog timer state from `ipmitool mc watchdog get`."""

    name = "bmc-watchdog"

    def arguments(self) -> list[str]:
        """Return the subcommand of `ipmitool mc watchdog get`."""
        return ["mc", "watchdog", "get"]

    async def convert(
        self, result: ExecutionResult, sink: MetricSink, target: Target
    ) -> int:
        """Parse `ipmitool mc watchdog get` output into metrics."""
        values = parse_key_values(self.require_output(result))
        timer = require_value(values, "watchdog timer is", IPMITOOL)
        timer_use = require_value(values, "watchdog timer use", IPMITOOL)
        timer_use = timer_use.split("(")[0].strip()
        pretimeout = parse_number(require_value(values, "pre-timeout interval", IPMITOOL))
        initial = parse_number(require_value(values, "initial countdown", IPMITOOL))
        current = parse_number(require_value(values, "present countdown", IPMITOOL))
        if pretimeout is None or initial is None or current is None:
            raise CollectionError("watchdog intervals are not numbers")
        return await self.emit(
            sink,
            [
                m.WATCHDOG_TIMER_STATE.new_metric(parse_bool(timer)),
                m.WATCHDOG_TIMER_USE_STATE.new_metric(1.0, timer_use),
                m.WATCHDOG_PRETIMEOUT_INTERVAL.new_metric(pretimeout),
                m.WATCHDOG_INITIAL_COUNTDOWN.new_metric(initial),
                m.WATCHDOG_CURRENT_COUNTDOWN.new_metric(current),
            ],
        )


class SMLANModeIpmitoolCollector(IpmitoolCollector):
    """Supermicro LAN mode from `ipmitool raw`.

    ipmitool strips the completion code, so the response is the data octet.
    """

    name = "sm-lan-mode"

    def arguments(self) -> list[str]:
        """Return the subcommand of `ipmitool raw 0x30 0x70 0x0c 0`."""
        return ["raw", "0x30", "0x70", "0x0c", "0"]

    async def convert(
        self, result: ExecutionResult, sink: MetricSink, target: Target
    ) -> int:
        """Parse `ipmitool raw 0x30 0x70 0x0c 0` output into metrics."""
        octets = parse_raw_octets(self.require_output(result))
        if len(octets) != 1:
            raise CollectionError(f"unexpected number of octets: {octets}")
        try:
            mode = int(octets[0], 16)
        except ValueError:
            raise CollectionError(f"invalid LAN mode octet: {octets[0]}") from None
        return await self.emit(sink, [m.LAN_MODE.new_metric(float(mode))])


def _hex_reading(reading: str) -> str:
    """Convert a discrete reading like '0x0100' to its decimal string."""
    try:
        return str(int(reading, 16))
    except ValueError:
        return reading
