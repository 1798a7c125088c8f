"""
Connection dispatcher: runs one connection attempt for an effective profile.

Each attempt moves through ``ConnectionState``::

    IDLE -> DISPATCHING -> LAUNCHED -> SUCCEEDED | FAILED | CANCELLED

DISPATCHING covers connector lookup, password retrieval and argument
assembly; LAUNCHED means the external tool owns the terminal. Nothing is
retried here. Persisting usage statistics is left to the caller, which only
does it after SUCCEEDED.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING

import click
import structlog

from jumpdeck.connectors.base import CommandSpec
from jumpdeck.connectors.ssh import SSHConnector
from jumpdeck.enums import ConnectionState, Protocol
from jumpdeck.exceptions import (
    ConnectionCancelledError,
    ConnectorNotFoundError,
    CredentialError,
    ProfileValidationError,
    SubprocessFailedError,
)
from jumpdeck.utils.process import run_attached

if TYPE_CHECKING:
    from jumpdeck.connectors.base import Connector
    from jumpdeck.connectors.registry import ConnectorRegistry
    from jumpdeck.credentials.selector import CredentialBackendSelector
    from jumpdeck.profiles.models import Profile

log = structlog.get_logger(__name__)

Runner = Callable[[CommandSpec], int]
Notifier = Callable[[str], None]


def _echo_notice(message: str) -> None:
    click.echo(click.style("Note: ", fg="yellow") + message, err=True)


def fetch_password(selector: CredentialBackendSelector, profile_name: str) -> str:
    """Stored password for ``profile_name``, or "" if it cannot be retrieved.

    A backend failure is not fatal: the connection proceeds without a secret
    and the tool falls back to agent or interactive authentication.
    """
    try:
        return selector.get_password(profile_name)
    except (CredentialError, ValueError) as e:
        log.warning("password_retrieval_failed", profile=profile_name, error=str(e))
        return ""


@dataclass
class ConnectionAttempt:
    """Outcome record of one connection attempt.

    Attributes:
        profile: Name of the profile connected to
        protocol: Protocol used
        state: Current lifecycle state
        exit_code: Exit code of the external tool once it has exited
        started_at: When the tool was launched
        finished_at: When the attempt reached a terminal state
    """

    profile: str
    protocol: str
    state: ConnectionState = ConnectionState.IDLE
    exit_code: int | None = None
    started_at: datetime | None = None
    finished_at: datetime | None = None
    notices: list[str] = field(default_factory=list)

    def transition(self, state: ConnectionState) -> None:
        if self.state.is_terminal:
            raise RuntimeError(f"attempt already finished ({self.state})")
        self.state = state
        if state is ConnectionState.LAUNCHED:
            self.started_at = datetime.now(UTC)
        elif state.is_terminal:
            self.finished_at = datetime.now(UTC)

    @property
    def duration(self) -> float | None:
        """Seconds between launch and finish, if both happened."""
        if self.started_at is None or self.finished_at is None:
            return None
        return (self.finished_at - self.started_at).total_seconds()


class ConnectionDispatcher:
    """Connects effective profiles through the registered connectors.

    Example:
        >>> dispatcher = ConnectionDispatcher(create_default_registry(), selector)
        >>> attempt = dispatcher.connect(config.get_profile("web"))
        >>> attempt.state
        <ConnectionState.SUCCEEDED: 'succeeded'>
    """

    def __init__(
        self,
        registry: ConnectorRegistry,
        selector: CredentialBackendSelector,
        runner: Runner = run_attached,
        notify: Notifier = _echo_notice,
    ) -> None:
        self.registry = registry
        self.selector = selector
        self.runner = runner
        self.notify = notify

    def connect(self, profile: Profile, no_forward: bool = False) -> ConnectionAttempt:
        """Run a connection for ``profile`` in the foreground.

        Args:
            profile: Effective (inheritance-resolved) profile
            no_forward: Drop the profile's port forwards for this attempt

        Returns:
            The attempt in state SUCCEEDED

        Raises:
            ConnectorNotFoundError: If no connector handles the protocol
            SubprocessFailedError: If the tool exits non-zero
            ConnectionCancelledError: If the operator interrupts the session
        """
        attempt = ConnectionAttempt(profile=profile.name, protocol=profile.protocol)
        attempt.transition(ConnectionState.DISPATCHING)

        if no_forward and profile.has_forwards:
            profile = profile.without_forwards()

        try:
            connector = self.registry.get(profile.protocol)
        except ConnectorNotFoundError:
            attempt.transition(ConnectionState.FAILED)
            raise
        secret = fetch_password(self.selector, profile.name)
        spec = connector.execute(profile, secret)
        return self._launch(attempt, profile, connector, spec)

    def run_command(self, profile: Profile, command: list[str], tty: bool = False) -> ConnectionAttempt:
        """Run ``command`` on an SSH profile's host and wait for it.

        Raises:
            ProfileValidationError: If ``profile`` is not an SSH profile
            SubprocessFailedError: If ssh exits non-zero (the remote status)
            ConnectionCancelledError: If the operator interrupts the command
        """
        if profile.protocol != Protocol.SSH.value:
            raise ProfileValidationError(
                f"run only supports SSH profiles (got {profile.protocol})", field="protocol"
            )
        attempt = ConnectionAttempt(profile=profile.name, protocol=profile.protocol)
        attempt.transition(ConnectionState.DISPATCHING)

        try:
            connector = self.registry.get(Protocol.SSH)
            if not isinstance(connector, SSHConnector):
                raise ConnectorNotFoundError(f"{Protocol.SSH.value} (remote commands)")
        except ConnectorNotFoundError:
            attempt.transition(ConnectionState.FAILED)
            raise
        secret = fetch_password(self.selector, profile.name)
        spec = connector.execute_command(profile, command, secret, tty=tty)
        return self._launch(attempt, profile, connector, spec)

    def _launch(
        self, attempt: ConnectionAttempt, profile: Profile, connector: Connector, spec: CommandSpec
    ) -> ConnectionAttempt:
        for notice in spec.notices:
            attempt.notices.append(notice)
            self.notify(notice)

        attempt.transition(ConnectionState.LAUNCHED)
        log.info(
            "connection_launched",
            profile=profile.name,
            protocol=profile.protocol,
            executable=spec.executable,
            password_injected=spec.injects_password,
        )

        try:
            exit_code = self.runner(spec)
        except ConnectionCancelledError:
            attempt.transition(ConnectionState.CANCELLED)
            log.info("connection_cancelled", profile=profile.name)
            raise
        except SubprocessFailedError as e:
            attempt.exit_code = e.exit_code
            attempt.transition(ConnectionState.FAILED)
            raise

        attempt.exit_code = exit_code
        if exit_code != 0:
            attempt.transition(ConnectionState.FAILED)
            log.info("connection_failed", profile=profile.name, exit_code=exit_code)
            raise SubprocessFailedError(
                f"{spec.executable} exited with status {exit_code}",
                exit_code=exit_code,
                command=spec.executable,
                hint=connector.failure_hint(spec, exit_code),
            )

        attempt.transition(ConnectionState.SUCCEEDED)
        log.info("connection_finished", profile=profile.name, duration=attempt.duration)
        return attempt
