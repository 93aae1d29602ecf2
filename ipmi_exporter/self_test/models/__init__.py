"""Data models for configuration, command execution and metrics.

`TestCase`, `TestResult` and `RunSummary` reference collectors and live in
their own submodules (`models.test_case`, `models.test_result`).
"""

from ipmi_exporter.self_test.models.execution import ExecutionResult, Invocation
from ipmi_exporter.self_test.models.ipmi_config import (
    LOCAL_TARGET,
    IPMIConfig,
    SelfTestConfig,
    Target,
)
from ipmi_exporter.self_test.models.metric import Descriptor, Metric

__all__ = [
    "LOCAL_TARGET",
    "Descriptor",
    "ExecutionResult",
    "IPMIConfig",
    "Invocation",
    "Metric",
    "SelfTestConfig",
    "Target",
]
