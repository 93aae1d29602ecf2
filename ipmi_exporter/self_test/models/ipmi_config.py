"""Configuration models for IPMI targets and the self-test run."""

from pydantic import BaseModel, ConfigDict, Field

LOCAL_TARGET = ""


class IPMIConfig(BaseModel):
    """Module configuration for one IPMI target, as found under `modules:`."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    user: str = Field(default="", description="BMC user name (remote targets)")
    password: str = Field(
        default="", alias="pass", description="BMC password (remote targets)"
    )
    privilege: str = Field(default="", description="Privilege level, e.g. 'user'")
    driver: str = Field(default="", description="Driver type, e.g. 'LAN_2_0'")
    timeout: int = Field(default=0, description="Session timeout in milliseconds")
    workaround_flags: list[str] = Field(
        default_factory=list, description="Provider workaround flags"
    )
    collectors: list[str] = Field(
        default_factory=list,
        description="Collector names to run; empty means all collectors",
    )
    exclude_sensor_ids: list[int] = Field(
        default_factory=list, description="Sensor IDs dropped from sensor metrics"
    )
    collector_cmd: dict[str, str] = Field(
        default_factory=dict, description="Per-collector executable override"
    )
    custom_args: dict[str, list[str]] = Field(
        default_factory=dict, description="Per-collector argument list override"
    )

    def has_credentials(self) -> bool:
        """Return True if a user or password is configured."""
        return bool(self.user or self.password)


class Target(BaseModel):
    """A BMC-reachable host plus its connection configuration."""

    model_config = ConfigDict(frozen=True)

    host: str = Field(default=LOCAL_TARGET, description="BMC host, empty for local")
    config: IPMIConfig = Field(default_factory=IPMIConfig)

    @property
    def is_local(self) -> bool:
        """Return True when the target is the local BMC."""
        return self.host == LOCAL_TARGET


class SelfTestConfig(BaseModel):
    """Run-wide settings handed to the registry and the runner."""

    model_config = ConfigDict(frozen=True)

    use_ipmitool: bool = Field(
        default=False, description="Use the ipmitool collectors instead of FreeIPMI"
    )
    debug: bool = Field(default=False, description="Capture per-metric summaries")
    command_timeout: float = Field(
        default=60.0, gt=0, description="Seconds before an external command is killed"
    )
    sink_capacity: int = Field(
        default=100, gt=0, description="Number of slots in the metric sink"
    )
    target: Target = Field(default_factory=Target)
    module: str = Field(default="default", description="Module name for test cases")

    @property
    def implementation(self) -> str:
        """Human-readable label of the active provider set."""
        return "ipmitool" if self.use_ipmitool else "FreeIPMI"
