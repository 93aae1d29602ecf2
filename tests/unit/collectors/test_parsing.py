"""Tests for provider output parsing helpers."""

import math

import pytest

from ipmi_exporter.self_test.collectors.base import CollectionError
from ipmi_exporter.self_test.collectors.parsing import (
    parse_bool,
    parse_key_values,
    parse_number,
    parse_raw_octets,
    require_value,
    sensor_kind,
    sensor_state,
)


def test_parse_key_values() -> None:
    """Keys are lower-cased and the first occurrence wins."""
    output = (
        "Firmware Revision : 1.71\n"
        "IPMI Version: 2.0\n"
        "firmware revision : 9\n"
        "no separator\n"
    )

    values = parse_key_values(output)

    assert values == {"firmware revision": "1.71", "ipmi version": "2.0"}


def test_parse_key_values_keeps_later_separators() -> None:
    """Only the first separator splits key and value."""
    assert parse_key_values("Time : 10:00:00") == {"time": "10:00:00"}


def test_require_value_missing() -> None:
    """A missing key names the command in the error."""
    with pytest.raises(CollectionError, match="ipmi-sel: 'entries' not found"):
        require_value({}, "entries", "ipmi-sel")


@pytest.mark.parametrize(
    ("value", "expected"),
    [("340 Watts", 340.0), ("-1.5 V", -1.5), ("15824 bytes", 15824.0), ("N/A", None)],
)
def test_parse_number(value: str, expected: float | None) -> None:
    assert parse_number(value) == expected


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("on", 1.0),
        ("Started/Running", 1.0),
        ("TRUE", 1.0),
        ("off", 0.0),
        ("Stopped", 0.0),
    ],
)
def test_parse_bool(value: str, expected: float) -> None:
    assert parse_bool(value) == expected


def test_parse_bool_unknown() -> None:
    """Unknown booleans are a collection error."""
    with pytest.raises(CollectionError):
        parse_bool("maybe")


def test_sensor_state() -> None:
    """States map to severity levels; unknown states are NaN."""
    assert sensor_state("Nominal") == 0.0
    assert sensor_state("ok") == 0.0
    assert sensor_state("Warning") == 1.0
    assert sensor_state("nc") == 1.0
    assert sensor_state("Critical") == 2.0
    assert sensor_state("nr") == 2.0
    assert math.isnan(sensor_state("N/A"))


@pytest.mark.parametrize(
    ("sensor_type", "units", "expected"),
    [
        ("Temperature", "C", "temperature"),
        ("", "degrees C", "temperature"),
        ("Fan", "RPM", "fan"),
        ("", "Volts", "voltage"),
        ("Current", "A", "current"),
        ("Power Supply", "W", "power"),
        ("Power Supply", "N/A", None),
        ("discrete", "discrete", None),
    ],
)
def test_sensor_kind(sensor_type: str, units: str, expected: str | None) -> None:
    assert sensor_kind(sensor_type, units) == expected


def test_parse_raw_octets() -> None:
    """Raw responses are split into upper-case two-digit octets."""
    assert parse_raw_octets("rcvd: 70 0 c1\n") == ["70", "00", "C1"]
    assert parse_raw_octets(" 01\n") == ["01"]
    assert parse_raw_octets("") == []
