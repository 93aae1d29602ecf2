"""Tests for the command executor."""

import sys
from pathlib import Path

from ipmi_exporter.self_test.executor import CommandExecutor
from ipmi_exporter.self_test.models.execution import Invocation
from ipmi_exporter.self_test.models.ipmi_config import Target


def python(code: str, **kwargs: object) -> Invocation:
    return Invocation(command=sys.executable, args=["-c", code], **kwargs)


async def test_execute_success_captures_stdout() -> None:
    """A zero exit status yields an ok result with stdout."""
    result = await CommandExecutor().execute(python("print('hello')"), Target())

    assert result.status == "ok"
    assert result.ok is True
    assert result.text().strip() == "hello"
    assert result.error is None


async def test_execute_nonzero_exit() -> None:
    """A non-zero exit is an error carrying stderr."""
    code = "import sys; sys.stderr.write('no ipmi device'); sys.exit(3)"
    result = await CommandExecutor().execute(python(code), Target())

    assert result.status == "error"
    assert result.ok is False
    assert "exited with code 3" in (result.error or "")
    assert "no ipmi device" in (result.error or "")


async def test_execute_missing_command() -> None:
    """A command that cannot be started is an error, not an exception."""
    invocation = Invocation(command="/nonexistent/bmc-info")
    result = await CommandExecutor().execute(invocation, Target())

    assert result.status == "error"
    assert "failed to start /nonexistent/bmc-info" in (result.error or "")


async def test_execute_timeout() -> None:
    """A hung command is killed and reported as a timeout."""
    executor = CommandExecutor(timeout=0.2)
    result = await executor.execute(python("import time; time.sleep(10)"), Target())

    assert result.status == "timeout"
    assert "timed out after 0.2s" in (result.error or "")


async def test_execute_secret_file_is_private_and_removed() -> None:
    """Secrets reach the command through a temporary file deleted afterwards."""
    code = (
        "import os, stat, sys; path = sys.argv[2]; "
        "print(path); print(oct(stat.S_IMODE(os.stat(path).st_mode))); "
        "print(open(path).read())"
    )
    invocation = python(code, secret="username admin\npassword s3cret\n")

    result = await CommandExecutor().execute(invocation, Target(host="bmc1"))

    lines = result.text().splitlines()
    assert result.status == "ok"
    assert lines[1] == "0o600"
    assert "username admin" in lines
    assert "password s3cret" in lines
    assert not Path(lines[0]).exists()


async def test_execute_extra_environment() -> None:
    """Extra environment variables are visible to the command."""
    invocation = python(
        "import os; print(os.environ['IPMI_PASSWORD'])",
        env={"IPMI_PASSWORD": "s3cret"},
    )

    result = await CommandExecutor().execute(invocation, Target(host="bmc1"))

    assert result.text().strip() == "s3cret"


async def test_execute_invalid_argument_is_error_result() -> None:
    """Arguments the OS rejects are reported as a start failure."""
    invocation = Invocation(command="bmc-info", args=["bad\x00arg"])

    result = await CommandExecutor().execute(invocation, Target())

    assert result.status == "error"
    assert "failed to start bmc-info" in (result.error or "")
