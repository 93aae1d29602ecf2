"""Metric descriptors shared by the FreeIPMI and ipmitool collectors."""

from collections import Counter
from collections.abc import Iterable
from datetime import datetime

from ipmi_exporter.self_test.collectors.parsing import (
    parse_number,
    sensor_kind,
    sensor_state,
)
from ipmi_exporter.self_test.models.metric import Descriptor, Metric

BMC_INFO = Descriptor(
    fq_name="ipmi_bmc_info",
    help="Constant metric with value '1' providing details about the BMC.",
    label_names=("firmware_revision", "manufacturer_id", "system_firmware_version"),
)

CHASSIS_POWER_STATE = Descriptor(
    fq_name="ipmi_chassis_power_state",
    help="Current power state (1=on, 0=off).",
)
CHASSIS_DRIVE_FAULT_STATE = Descriptor(
    fq_name="ipmi_chassis_drive_fault_state",
    help="Current drive fault state (1=false, 0=true).",
)
CHASSIS_COOLING_FAULT_STATE = Descriptor(
    fq_name="ipmi_chassis_cooling_fault_state",
    help="Current cooling fault state (1=false, 0=true).",
)

DCMI_POWER_CONSUMPTION = Descriptor(
    fq_name="ipmi_dcmi_power_consumption_watts",
    help="Current power consumption in Watts.",
)

SEL_LOGS_COUNT = Descriptor(
    fq_name="ipmi_sel_logs_count",
    help="Current number of log entries in the SEL.",
)
SEL_FREE_SPACE = Descriptor(
    fq_name="ipmi_sel_free_space_bytes",
    help="Current free space remaining for new SEL entries.",
)
SEL_EVENTS_BY_STATE = Descriptor(
    fq_name="ipmi_sel_events_count_by_state",
    help="Number of SEL events grouped by state.",
    label_names=("state",),
)
SEL_EVENTS_LATEST_TIMESTAMP = Descriptor(
    fq_name="ipmi_sel_events_latest_timestamp",
    help="Timestamp of the newest SEL event.",
)

WATCHDOG_TIMER_STATE = Descriptor(
    fq_name="ipmi_bmc_watchdog_timer_state",
    help="Watchdog timer running (1: running, 0: stopped).",
)
WATCHDOG_TIMER_USE_STATE = Descriptor(
    fq_name="ipmi_bmc_watchdog_timer_use_state",
    help="Watchdog timer use (1: active, 0: inactive).",
    label_names=("name",),
)
WATCHDOG_PRETIMEOUT_INTERVAL = Descriptor(
    fq_name="ipmi_bmc_watchdog_pretimeout_interval_seconds",
    help="Pre-timeout interval in seconds.",
)
WATCHDOG_INITIAL_COUNTDOWN = Descriptor(
    fq_name="ipmi_bmc_watchdog_initial_countdown_seconds",
    help="Initial countdown in seconds.",
)
WATCHDOG_CURRENT_COUNTDOWN = Descriptor(
    fq_name="ipmi_bmc_watchdog_current_countdown_seconds",
    help="Current countdown in seconds.",
)

LAN_MODE = Descriptor(
    fq_name="ipmi_config_lan_mode",
    help="Returns the current LAN mode (0=dedicated, 1=shared, 2=failover).",
)

SENSOR_LABELS = ("id", "name")

# kind -> (value descriptor, state descriptor)
SENSOR_DESCRIPTORS = {
    "temperature": (
        Descriptor(
            fq_name="ipmi_temperature_celsius",
            help="Temperature reading in degree Celsius.",
            label_names=SENSOR_LABELS,
        ),
        Descriptor(
            fq_name="ipmi_temperature_state",
            help="Reported state of a temperature sensor (0=nominal, 1=warning, 2=critical).",
            label_names=SENSOR_LABELS,
        ),
    ),
    "fan": (
        Descriptor(
            fq_name="ipmi_fan_speed_rpm",
            help="Fan speed in rotations per minute.",
            label_names=SENSOR_LABELS,
        ),
        Descriptor(
            fq_name="ipmi_fan_speed_state",
            help="Reported state of a fan speed sensor (0=nominal, 1=warning, 2=critical).",
            label_names=SENSOR_LABELS,
        ),
    ),
    "voltage": (
        Descriptor(
            fq_name="ipmi_voltage_volts",
            help="Voltage reading in Volts.",
            label_names=SENSOR_LABELS,
        ),
        Descriptor(
            fq_name="ipmi_voltage_state",
            help="Reported state of a voltage sensor (0=nominal, 1=warning, 2=critical).",
            label_names=SENSOR_LABELS,
        ),
    ),
    "current": (
        Descriptor(
            fq_name="ipmi_current_amperes",
            help="Current reading in Amperes.",
            label_names=SENSOR_LABELS,
        ),
        Descriptor(
            fq_name="ipmi_current_state",
            help="Reported state of a current sensor (0=nominal, 1=warning, 2=critical).",
            label_names=SENSOR_LABELS,
        ),
    ),
    "power": (
        Descriptor(
            fq_name="ipmi_power_watts",
            help="Power reading in Watts.",
            label_names=SENSOR_LABELS,
        ),
        Descriptor(
            fq_name="ipmi_power_state",
            help="Reported state of a power sensor (0=nominal, 1=warning, 2=critical).",
            label_names=SENSOR_LABELS,
        ),
    ),
}

SENSOR_VALUE = Descriptor(
    fq_name="ipmi_sensor_value",
    help="Generic data read from an IPMI sensor of unknown type.",
    label_names=(*SENSOR_LABELS, "type"),
)
SENSOR_STATE = Descriptor(
    fq_name="ipmi_sensor_state",
    help="Indicates the severity of the state reported by an IPMI sensor (0=nominal, 1=warning, 2=critical).",
    label_names=(*SENSOR_LABELS, "type"),
)


def sensor_metrics(
    sensor_id: str,
    name: str,
    sensor_type: str,
    state: str,
    reading: str,
    units: str,
) -> list[Metric]:
    """Build the value and state metrics for one sensor row.

    Readings that are not numeric ('N/A', 'na') only produce the state metric.
    """
    value = None
    if reading.strip().lower() not in {"n/a", "na"}:
        value = parse_number(reading)
    kind = sensor_kind(sensor_type, units)
    metrics: list[Metric] = []

    if kind is None:
        if value is not None:
            metrics.append(SENSOR_VALUE.new_metric(value, sensor_id, name, sensor_type))
        metrics.append(
            SENSOR_STATE.new_metric(sensor_state(state), sensor_id, name, sensor_type)
        )
        return metrics

    value_desc, state_desc = SENSOR_DESCRIPTORS[kind]
    if value is not None:
        metrics.append(value_desc.new_metric(value, sensor_id, name))
    metrics.append(state_desc.new_metric(sensor_state(state), sensor_id, name))
    return metrics


def sel_event_metrics(
    states: Iterable[str],
    timestamps: Iterable[datetime],
    known_states: tuple[str, ...],
) -> list[Metric]:
    """Build per-state event counts and the newest event timestamp."""
    counts = Counter(states)
    metrics = [
        SEL_EVENTS_BY_STATE.new_metric(float(counts.get(state, 0)), state)
        for state in known_states
    ]
    for state in sorted(set(counts) - set(known_states)):
        metrics.append(SEL_EVENTS_BY_STATE.new_metric(float(counts[state]), state))

    latest = max(timestamps, default=None)
    if latest is not None:
        metrics.append(SEL_EVENTS_LATEST_TIMESTAMP.new_metric(latest.timestamp()))
    return metrics

