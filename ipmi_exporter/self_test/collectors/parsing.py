"""Helpers shared by the provider output parsers."""

import math
import re

from ipmi_exporter.self_test.collectors.base import CollectionError

_NUMBER = re.compile(r"[-+]?\d+(?:\.\d+)?")


def parse_key_values(output: str, separator: str = ":") -> dict[str, str]:
    """Parse 'Key  : Value' lines into a dict keyed by lower-cased key."""
    values: dict[str, str] = {}
    for line in output.splitlines():
        if separator not in line:
            continue
        key, value = line.split(separator, 1)
        key = key.strip().lower()
        if key and key not in values:
            values[key] = value.strip()
    return values


def require_value(values: dict[str, str], key: str, command: str) -> str:
    """Return `values[key]` or raise a CollectionError naming the command."""
    try:
        return values[key]
    except KeyError:
        raise CollectionError(f"{command}: '{key}' not found in output") from None


def parse_number(value: str) -> float | None:
    """Extract the first number from a value such as '120 Watts'."""
    match = _NUMBER.search(value)
    if match is None:
        return None
    return float(match.group())


def parse_bool(value: str) -> float:
    """Map provider booleans to 1/0."""
    value = value.strip().lower()
    if value in {"true", "on", "yes", "running", "started/running", "active"}:
        return 1.0
    if value in {"false", "off", "no", "stopped", "inactive"}:
        return 0.0
    raise CollectionError(f"unexpected boolean value '{value}'")


def sensor_state(state: str) -> float:
    """Map a provider sensor state to 0 (nominal), 1 (warning) or 2 (critical)."""
    state = state.strip().lower()
    if state in {"nominal", "ok"}:
        return 0.0
    if state in {"warning", "nc"}:
        return 1.0
    if state in {"critical", "cr", "nr"}:
        return 2.0
    return math.nan


def sensor_kind(sensor_type: str, units: str) -> str | None:
    """Classify a sensor as temperature, fan, voltage, current or power."""
    sensor_type = sensor_type.strip().lower()
    units = units.strip().lower()
    if sensor_type == "temperature" or units in {"c", "degrees c"}:
        return "temperature"
    if sensor_type == "fan" or units == "rpm":
        return "fan"
    if sensor_type == "voltage" or units in {"v", "volts"}:
        return "voltage"
    if sensor_type == "current" or units in {"a", "amps"}:
        return "current"
    if units in {"w", "watts"}:
        return "power"
    return None


def parse_raw_octets(output: str) -> list[str]:
    """Split a raw response into upper-case hex octets."""
    text = output.strip()
    if text.lower().startswith("rcvd:"):
        text = text[5:]
    return [octet.upper().zfill(2) for octet in text.split()]
