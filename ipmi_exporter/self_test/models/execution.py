"""Models for external command invocations and their results."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class Invocation(BaseModel):
    """A fully resolved external command ready to be executed."""

    model_config = ConfigDict(frozen=True)

    command: str = Field(..., description="Executable name or path")
    args: list[str] = Field(default_factory=list, description="Argument list")
    secret: str | None = Field(
        default=None,
        description="Provider config file content passed via a private temp file",
    )
    secret_flag: str = Field(
        default="--config-file", description="Flag that receives the secret file path"
    )
    env: dict[str, str] = Field(
        default_factory=dict, description="Extra environment variables"
    )

    def describe(self) -> str:
        """Render the command line without secrets."""
        return " ".join([self.command, *self.args])


class ExecutionResult(BaseModel):
    """Raw captured output of one command plus its outcome."""

    model_config = ConfigDict(frozen=True)

    status: Literal["ok", "error", "timeout"] = Field(
        ..., description="Execution outcome"
    )
    output: bytes = Field(default=b"", description="Captured standard output")
    error: str | None = Field(default=None, description="Failure details")

    @property
    def ok(self) -> bool:
        """Return True if the command ran and exited with status 0."""
        return self.status == "ok"

    def text(self) -> str:
        """Decode the captured output."""
        return self.output.decode(errors="replace")
