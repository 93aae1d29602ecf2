"""FreeIPMI collectors (standard provider)."""

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

SEL_STATES = ("Nominal", "Warning", "Critical")


class FreeIPMICollector(Collector):
    """Base for collectors shelling out to the FreeIPMI tools."""

    provider = "freeipmi"

    def target_arguments(self, target: Target) -> list[str]:
        """Session options taken from the module configuration."""
        config = target.config
        args: list[str] = []
        if not target.is_local:
            args.extend(["-h", target.host])
        if config.driver:
            args.append(f"--driver-type={config.driver}")
        if config.privilege:
            args.append(f"--privilege-level={config.privilege}")
        if config.timeout:
            args.append(f"--session-timeout={config.timeout}")
        if config.workaround_flags:
            args.append(f"--workaround-flags={','.join(config.workaround_flags)}")
        return args

    def secret(self, target: Target) -> str | None:
        """Credentials are passed in a FreeIPMI config file, never on argv."""
        if target.is_local or not target.config.has_credentials():
            return None
        config = target.config
        return f"username {config.user}\npassword {config.password}\n"


class BMCCollector(FreeIPMICollector):
    """BMC device information from `bmc-info`."""

    name = "bmc"

    def command(self) -> str:
        """Return the `bmc-info` executable."""
        return "bmc-info"

    def arguments(self) -> list[str]:
        """Return the default arguments for `bmc-info`."""
        return []

    async def convert(
        self, result: ExecutionResult, sink: MetricSink, target: Target
    ) -> int:
        """Parse `bmc-info` output into metrics."""
        values = parse_key_values(self.require_output(result))
        firmware = require_value(values, "firmware revision", self.command())
        manufacturer = require_value(values, "manufacturer id", self.command())
        system_firmware = values.get("system firmware version", "N/A")
        return await self.emit(
            sink, [m.BMC_INFO.new_metric(1.0, firmware, manufacturer, system_firmware)]
        )


class ChassisCollector(FreeIPMICollector):
    """Chassis power and fault state from `ipmi-chassis`."""

    name = "chassis"

    def command(self) -> str:
        """Return the `ipmi-chassis` executable."""
        return "ipmi-chassis"

    def arguments(self) -> list[str]:
        """Return the default arguments for `ipmi-chassis`."""
        return ["--get-chassis-status"]

    async def convert(
        self, result: ExecutionResult, sink: MetricSink, target: Target
    ) -> int:
        """Parse `ipmi-chassis` output into metrics."""
        values = parse_key_values(self.require_output(result))
        power = require_value(values, "system power", self.command())
        drive_fault = require_value(values, "drive fault", self.command())
        cooling_fault = require_value(
            values, "cooling/fan fault detected", self.command()
        )
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


class DCMICollector(FreeIPMICollector):
    """Power consumption from `ipmi-dcmi`."""

    name = "dcmi"

    def command(self) -> str:
        """Return the `ipmi-dcmi` executable."""
        return "ipmi-dcmi"

    def arguments(self) -> list[str]:
        """Return the default arguments for `ipmi-dcmi`."""
        return ["--get-system-power-statistics"]

    async def convert(
        self, result: ExecutionResult, sink: MetricSink, target: Target
    ) -> int:
        """Parse `ipmi-dcmi` output into metrics."""
        values = parse_key_values(self.require_output(result))
        measurement = values.get("power measurement", "Active")
        if measurement.lower() != "active":
            raise CollectionError(f"power measurement is {measurement}")

        watts = parse_number(require_value(values, "current power", self.command()))
        if watts is None:
            raise CollectionError("current power reading is not a number")
        return await self.emit(sink, [m.DCMI_POWER_CONSUMPTION.new_metric(watts)])


class IPMICollector(FreeIPMICollector):
    """Sensor readings from `ipmimonitoring`."""

    name = "ipmi"

    def command(self) -> str:
        """Return the `ipmimonitoring` executable."""
        return "ipmimonitoring"

    def arguments(self) -> list[str]:
        """Return the default arguments for `ipmimonitoring`."""
        return [
            "-Q",
            "--ignore-unrecognized-events",
            "--comma-separated-output",
            "--no-header-output",
            "--sdr-cache-recreate",
            "--output-event-bitmask",
            "--output-sensor-state",
        ]

    async def convert(
        self, result: ExecutionResult, sink: MetricSink, target: Target
    ) -> int:
        """Parse `ipmimonitoring` output into metrics."""
        excluded = {str(sensor_id) for sensor_id in target.config.exclude_sensor_ids}
        count = 0
        for row in csv.reader(io.StringIO(self.require_output(result))):
            if not row:
                continue
            if len(row) < 6:
                raise CollectionError(f"malformed sensor row: {','.join(row)}")
            sensor_id, name, sensor_type, state, reading, units = (
                field.strip() for field in row[:6]
            )
            if sensor_id in excluded:
                logger.debug(f"Skipping excluded sensor {sensor_id} ({name})")
                continue
            count += await self.emit(
                sink, m.sensor_metrics(sensor_id, name, sensor_type, state, reading, units)
            )
        return count


class SELCollector(FreeIPMICollector):
    """SEL size and free space from `ipmi-sel --info`."""

    name = "sel"

    def command(self) -> str:
        """Return the `ipmi-sel` executable."""
        return "ipmi-sel"

    def arguments(self) -> list[str]:
        """Return the default arguments for `ipmi-sel`."""
        return ["--info"]

    async def convert(
        self, result: ExecutionResult, sink: MetricSink, target: Target
    ) -> int:
        """Parse `ipmi-sel` output into metrics."""
        values = parse_key_values(self.require_output(result))
        entries = parse_number(
            require_value(values, "number of log entries", self.command())
        )
        free_space = parse_number(
            require_value(values, "free space remaining", self.command())
        )
        if entries is None or free_space is None:
            raise CollectionError("SEL info values are not numbers")
        return await self.emit(
            sink,
            [
                m.SEL_LOGS_COUNT.new_metric(entries),
                m.SEL_FREE_SPACE.new_metric(free_space),
            ],
        )


class SELEventsCollector(FreeIPMICollector):
    """SEL events grouped by state from `ipmi-sel`."""

    name = "sel-events"

    def command(self) -> str:
        """Return the `ipmi-sel` executable."""
        return "ipmi-sel"

    def arguments(self) -> list[str]:
        """Return the default arguments for `ipmi-sel`."""
        return [
            "-Q",
            "--comma-separated-output",
            "--no-header-output",
            "--output-event-state",
            "--interpret-oem-data",
            "--entity-sensor-names",
        ]

    async def convert(
        self, result: ExecutionResult, sink: MetricSink, target: Target
    ) -> int:
        """Parse `ipmi-sel` output into metrics."""
        states: list[str] = []
        timestamps: list[datetime] = []
        for row in csv.reader(io.StringIO(self.require_output(result))):
            if not row:
                continue
            if len(row) < 7:
                raise CollectionError(f"malformed SEL row: {','.join(row)}")
            date, time, state = row[1].strip(), row[2].strip(), row[5].strip()
            states.append(state)
            try:
                timestamps.append(datetime.strptime(f"{date} {time}", "%b-%d-%Y %H:%M:%S"))
            except ValueError:
                logger.debug(f"Unparseable SEL timestamp: {date} {time}")
        return await self.emit(sink, m.sel_event_metrics(states, timestamps, SEL_STATES))


class BMCWatchdogCollector(FreeIPMICollector):
    """Watchdog timer state from `bmc-watchdog --get`."""

    name = "bmc-watchdog"

    def command(self) -> str:
        """Return the `bmc-watchdog` executable."""
        return "bmc-watchdog"

    def arguments(self) -> list[str]:
        """Return the default arguments for `bmc-watchdog`."""
        return ["--get"]

    async def convert(
        self, result: ExecutionResult, sink: MetricSink, target: Target
    ) -> int:
        """Parse `bmc-watchdog` output into metrics."""
        values = parse_key_values(self.require_output(result))
        timer = require_value(values, "timer", self.command())
        timer_use = require_value(values, "timer use", self.command())
        pretimeout = parse_number(
            require_value(values, "pre-timeout interval", self.command())
        )
        initial = parse_number(require_value(values, "initial countdown", self.command()))
        current = parse_number(require_value(values, "current countdown", self.command()))
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


class SMLANModeCollector(FreeIPMICollector):
    """Supermicro LAN mode from a raw OEM command."""

    name = "sm-lan-mode"

    def command(self) -> str:
        """Return the `ipmi-raw` executable."""
        return "ipmi-raw"

    def arguments(self) -> list[str]:
        """Return the default arguments for `ipmi-raw`."""
        return ["0x0", "0x30", "0x70", "0x0C", "0"]

    async def convert(
        self, result: ExecutionResult, sink: MetricSink, target: Target
    ) -> int:
        """Parse `ipmi-raw` output into metrics."""
        octets = parse_raw_octets(self.require_output(result))
        if len(octets) != 3:
            raise CollectionError(f"unexpected number of octets: {octets}")
        if octets[0] != "70" or octets[1] != "00":
            raise CollectionError(f"unexpected raw response: {octets}")
        try:
            mode = int(octets[2], 16)
        except ValueError:
            raise CollectionError(f"invalid LAN mode octet: {octets[2]}") from None
        return await self.emit(sink, [m.LAN_MODE.new_metric(float(mode))])
