"""SFTP connector."""

import shutil

from jumpdeck.enums import Protocol
from jumpdeck.profiles.models import Profile

from .base import CommandSpec, Connector
from .ssh import PASSWORD_AUTH_OPTIONS, password_command, sshpass_failure_hint


class SFTPConnector(Connector):
    """Runs ``sftp``. Forwards and jump hosts go through ``-o`` options.

    Stored passwords are injected the same way as for ssh.
    """

    protocol = Protocol.SFTP

    def __init__(self, which=shutil.which) -> None:
        self._which = which

    def execute(self, profile: Profile, secret: str = "") -> CommandSpec:
        use_password = bool(secret) and not profile.identity_file

        args = ["sftp"]
        if profile.port > 0:
            args += ["-P", str(profile.port)]
        if profile.identity_file:
            args += ["-i", profile.identity_file]
        if profile.proxy_jump:
            args += ["-o", f"ProxyJump={profile.proxy_jump}"]

        for option, forwards in (
            ("LocalForward", profile.local_forwards),
            ("RemoteForward", profile.remote_forwards),
            ("DynamicForward", profile.dynamic_forwards),
        ):
            for forward in forwards:
                if forward:
                    args += ["-o", f"{option}={forward}"]

        if use_password:
            for option in PASSWORD_AUTH_OPTIONS:
                args += ["-o", option]

        args += profile.extra_args
        args.append(profile.target)

        if not use_password:
            return CommandSpec(argv=args)
        return password_command(args, secret, which=self._which)

    def failure_hint(self, spec: CommandSpec, exit_code: int) -> str | None:
        return sshpass_failure_hint(spec, exit_code)
