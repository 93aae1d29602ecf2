"""Run external IPMI provider commands."""

import asyncio
import contextlib
import logging
import os
import tempfile
from pathlib import Path

from ipmi_exporter.self_test.models.execution import ExecutionResult, Invocation
from ipmi_exporter.self_test.models.ipmi_config import Target

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 60.0


class CommandExecutor:
    """Spawns one provider process per call and captures its output.

    `execute` never raises: start failures, non-zero exits and timeouts are
    all reported through the returned `ExecutionResult`.
    """

    def __init__(self, timeout: float = DEFAULT_TIMEOUT) -> None:
        """Initialize executor with a per-command timeout in seconds."""
        self.timeout = timeout

    async def execute(self, invocation: Invocation, target: Target) -> ExecutionResult:
        """Run the invocation against the target and capture stdout."""
        host = target.host or "local BMC"
        logger.debug(f"Executing '{invocation.describe()}' against {host}")

        secret_path: Path | None = None
        args = list(invocation.args)
        try:
            if invocation.secret is not None:
                secret_path = _write_secret(invocation.secret)
                args.extend([invocation.secret_flag, str(secret_path)])
            return await self._run(invocation.command, args, invocation.env)
        except OSError as e:
            logger.debug(f"Could not prepare '{invocation.command}': {e}")
            return ExecutionResult(
                status="error", error=f"failed to run {invocation.command}: {e}"
            )
        finally:
            if secret_path is not None:
                secret_path.unlink(missing_ok=True)

    async def _run(
        self, command: str, args: list[str], extra_env: dict[str, str]
    ) -> ExecutionResult:
        """Spawn the process, wait for it within the timeout and classify the exit."""
        env = {**os.environ, **extra_env} if extra_env else None
        try:
            process = await asyncio.create_subprocess_exec(
                command,
                *args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                env=env,
            )
        except (OSError, ValueError) as e:
            return ExecutionResult(
                status="error", error=f"failed to start {command}: {e}"
            )

        try:
            stdout, stderr = await asyncio.wait_for(
                process.communicate(), timeout=self.timeout
            )
        except asyncio.TimeoutError:
            with contextlib.suppress(ProcessLookupError):
                process.kill()
            await process.wait()
            logger.warning(f"{command} timed out after {self.timeout}s")
            return ExecutionResult(
                status="timeout",
                error=f"{command} timed out after {self.timeout}s",
            )

        if process.returncode != 0:
            detail = stderr.decode(errors="replace").strip()
            return ExecutionResult(
                status="error",
                output=stdout,
                error=f"{command} exited with code {process.returncode}: {detail}",
            )

        return ExecutionResult(status="ok", output=stdout)


def _write_secret(content: str) -> Path:
    """Write provider credentials to a file only the current user can read."""
    fd, name = tempfile.mkstemp(prefix="ipmi-selftest-", suffix=".conf")
    with os.fdopen(fd, "w") as f:
        f.write(content)
    return Path(name)
