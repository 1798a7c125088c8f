"""Connector interface and the command description connectors produce."""

from __future__ import annotations

import os
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from jumpdeck.enums import Protocol
from jumpdeck.profiles.models import Profile


@dataclass
class CommandSpec:
    """A ready-to-run external command.

    Attributes:
        argv: Full argument vector; argv[0] is the executable
        env: Variables added to the inherited environment
        notices: Messages to show the user once before launching
        injects_password: True when a password helper feeds the secret
    """

    argv: list[str]
    env: dict[str, str] = field(default_factory=dict)
    notices: list[str] = field(default_factory=list)
    injects_password: bool = False

    @property
    def executable(self) -> str:
        return self.argv[0]

    def environment(self) -> dict[str, str] | None:
        """Environment for the child process, or None to inherit unchanged."""
        if not self.env:
            return None
        return {**os.environ, **self.env}


class Connector(ABC):
    """Translates an effective profile and its secret into a CommandSpec."""

    protocol: Protocol

    @property
    def name(self) -> str:
        return self.protocol.value

    @abstractmethod
    def execute(self, profile: Profile, secret: str = "") -> CommandSpec:
        """Build the command for ``profile``.

        Args:
            profile: Effective (inheritance-resolved) profile
            secret: Stored password, "" when none
        """

    def unused_secret_notices(self, secret: str) -> list[str]:
        """Notice for connectors that have no way to pass a stored password on."""
        if not secret:
            return []
        return [
            f"A password is stored for this profile, but {self.name} connections cannot use it automatically.\n"
            "  Enter it yourself if the remote side asks for one."
        ]

    def failure_hint(self, spec: CommandSpec, exit_code: int) -> str | None:
        """Explain a non-zero exit code, if this connector knows what it means."""
        return None
