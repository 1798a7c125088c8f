"""Run an external tool attached to the controlling terminal.

The child inherits stdin, stdout and stderr so interactive sessions (ssh,
mosh, telnet) behave as if launched directly from the shell.
"""

from __future__ import annotations

import signal
import subprocess
from typing import TYPE_CHECKING

import structlog

from jumpdeck.exceptions import ConnectionCancelledError, SubprocessFailedError

if TYPE_CHECKING:
    from jumpdeck.connectors.base import CommandSpec

log = structlog.get_logger(__name__)

# Seconds to wait for the child after forwarding SIGINT before escalating.
INTERRUPT_GRACE = 3.0
TERMINATE_GRACE = 2.0


def _stop(process: subprocess.Popen) -> None:
    if process.poll() is not None:
        return
    try:
        process.send_signal(signal.SIGINT)
        process.wait(timeout=INTERRUPT_GRACE)
        return
    except subprocess.TimeoutExpired:
        pass
    process.terminate()
    try:
        process.wait(timeout=TERMINATE_GRACE)
    except subprocess.TimeoutExpired:
        process.kill()
        process.wait()


def run_attached(spec: CommandSpec) -> int:
    """Run ``spec`` in the foreground and return its exit code.

    Raises:
        SubprocessFailedError: If the executable cannot be started (exit code 127)
        ConnectionCancelledError: If the operator interrupts the session
    """
    log.debug("process_starting", executable=spec.executable, args=len(spec.argv) - 1)
    try:
        process = subprocess.Popen(spec.argv, env=spec.environment())
    except FileNotFoundError:
        raise SubprocessFailedError(
            f"{spec.executable}: command not found",
            exit_code=127,
            command=spec.executable,
        ) from None
    except PermissionError as e:
        raise SubprocessFailedError(
            f"{spec.executable}: {e.strerror}", exit_code=126, command=spec.executable
        ) from e

    try:
        returncode = process.wait()
    except KeyboardInterrupt:
        _stop(process)
        raise ConnectionCancelledError() from None

    if returncode == -signal.SIGINT:
        raise ConnectionCancelledError()
    log.debug("process_exited", executable=spec.executable, returncode=returncode)
    return returncode
