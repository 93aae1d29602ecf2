"""Enumerate the self-test cases for the selected provider."""

import logging

from ipmi_exporter.self_test.collectors import freeipmi, ipmitool
from ipmi_exporter.self_test.collectors.base import Collector
from ipmi_exporter.self_test.models.ipmi_config import SelfTestConfig
from ipmi_exporter.self_test.models.test_case import TestCase

logger = logging.getLogger(__name__)

# (name, description, expected, FreeIPMI collector, ipmitool collector)
_CATEGORIES: list[tuple[str, str, str, type[Collector], type[Collector]]] = [
    (
        "bmc_info",
        "Get BMC device information",
        "BMC device info",
        freeipmi.BMCCollector,
        ipmitool.BMCIpmitoolCollector,
    ),
    (
        "chassis_info",
        "Get chassis information",
        "chassis info",
        freeipmi.ChassisCollector,
        ipmitool.ChassisIpmitoolCollector,
    ),
    (
        "dcmi_info",
        "Get DCMI power management information",
        "DCMI power data",
        freeipmi.DCMICollector,
        ipmitool.DCMIIpmitoolCollector,
    ),
    (
        "ipmi_sensor",
        "Get IPMI sensor readings",
        "sensor readings",
        freeipmi.IPMICollector,
        ipmitool.IPMIIpmitoolCollector,
    ),
    (
        "sel_info",
        "Get System Event Log information",
        "SEL entries",
        freeipmi.SELCollector,
        ipmitool.SELIpmitoolCollector,
    ),
    (
        "sel_events",
        "Get System Event Log events",
        "SEL events",
        freeipmi.SELEventsCollector,
        ipmitool.SELEventsIpmitoolCollector,
    ),
    (
        "bmc_watchdog",
        "Get BMC watchdog timer information",
        "watchdog info",
        freeipmi.BMCWatchdogCollector,
        ipmitool.BMCWatchdogIpmitoolCollector,
    ),
    (
        "sm_lan_mode",
        "Get shared memory LAN mode information",
        "LAN mode data",
        freeipmi.SMLANModeCollector,
        ipmitool.SMLANModeIpmitoolCollector,
    ),
]


class CollectorRegistry:
    """Builds the test cases of exactly one provider set."""

    def __init__(self, config: SelfTestConfig) -> None:
        """Initialize registry with the run configuration."""
        self.config = config

    def get_test_cases(self) -> list[TestCase]:
        """Return the test cases for the configured provider.

        Collectors missing from a non-empty `collectors` list in the module
        configuration are skipped.
        """
        use_ipmitool = self.config.use_ipmitool
        enabled = set(self.config.target.config.collectors)
        test_cases: list[TestCase] = []

        for name, description, expected, standard, alternate in _CATEGORIES:
            collector_class = alternate if use_ipmitool else standard
            if enabled and collector_class.name not in enabled:
                logger.debug(f"Skipping disabled collector: {collector_class.name}")
                continue

            if use_ipmitool:
                name = f"{name}_ipmitool"
                description = f"{description} (ipmitool)"

            test_cases.append(
                TestCase(
                    name=name,
                    description=description,
                    collector=collector_class(),
                    target=self.config.target,
                    module=self.config.module,
                    expected=expected,
                )
            )

        logger.info(
            f"Registered {len(test_cases)} {self.config.implementation} test cases"
        )
        return test_cases
