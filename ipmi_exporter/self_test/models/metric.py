"""Metric and descriptor models emitted by collectors."""

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Descriptor(BaseModel):
    """Structural metadata of a metric, independent of its value."""

    model_config = ConfigDict(frozen=True)

    fq_name: str = Field(..., description="Fully-qualified metric name")
    help: str = Field(..., description="Help text")
    label_names: tuple[str, ...] = Field(
        default=(), description="Ordered variable label names"
    )

    def __str__(self) -> str:
        """Render the descriptor as shown in debug output."""
        labels = ",".join(self.label_names)
        return (
            f'Desc{{fqName: "{self.fq_name}", help: "{self.help}", '
            f"constLabels: {{}}, variableLabels: {{{labels}}}}}"
        )

    def new_metric(self, value: float, *label_values: str) -> "Metric":
        """Build a metric for this descriptor."""
        return Metric(descriptor=self, value=value, label_values=label_values)


class Metric(BaseModel):
    """A single sample: descriptor, label values and value."""

    model_config = ConfigDict(frozen=True)

    descriptor: Descriptor
    value: float
    label_values: tuple[str, ...] = ()

    @model_validator(mode="after")
    def _check_labels(self) -> "Metric":
        """Require one label value per label name."""
        if len(self.label_values) != len(self.descriptor.label_names):
            raise ValueError(
                f"{self.descriptor.fq_name}: expected "
                f"{len(self.descriptor.label_names)} label values, "
                f"got {len(self.label_values)}"
            )
        return self
