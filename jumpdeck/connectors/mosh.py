"""Mosh connector."""

from jumpdeck.enums import Protocol
from jumpdeck.profiles.models import Profile

from .base import CommandSpec, Connector
from .quoting import shell_quote


class MoshConnector(Connector):
    """Runs ``mosh``.

    SSH options travel inside the single ``--ssh=`` string, which mosh hands
    to a shell, so the identity path and jump spec are shell-quoted there.
    """

    protocol = Protocol.MOSH

    def execute(self, profile: Profile, secret: str = "") -> CommandSpec:
        args = ["mosh"]

        ssh_options = []
        if profile.port > 0 and profile.port != 22:
            ssh_options += ["-p", str(profile.port)]
        if profile.identity_file:
            ssh_options += ["-i", shell_quote(profile.identity_file)]
        if profile.proxy_jump:
            ssh_options += ["-J", shell_quote(profile.proxy_jump)]
        if ssh_options:
            args.append("--ssh=" + " ".join(["ssh", *ssh_options]))

        if profile.mosh_server:
            args.append(f"--server={profile.mosh_server}")

        args += profile.extra_args
        args.append(profile.target)

        if profile.remote_command:
            args += ["--", profile.remote_command]
        return CommandSpec(argv=args, notices=self.unused_secret_notices(secret))
