"""SSH connector, with password injection through ``sshpass``."""

from __future__ import annotations

import shutil

from jumpdeck.enums import Protocol
from jumpdeck.profiles.models import Profile

from .base import CommandSpec, Connector
from .quoting import build_remote_command

SSHPASS_BINARY = "sshpass"

# Force password auth so sshpass has a prompt to answer
PASSWORD_AUTH_OPTIONS = (
    "PreferredAuthentications=password",
    "PubkeyAuthentication=no",
    "ChallengeResponseAuthentication=no",
    "ConnectTimeout=10",
)

SSHPASS_MISSING_NOTICE = (
    "Password is stored but 'sshpass' is not installed.\n"
    "  Install it for automatic password injection:\n"
    "  macOS:   brew install hudochenkov/sshpass/sshpass\n"
    "  Linux:   sudo apt-get install sshpass  (or sudo yum install sshpass)\n"
    "  You will be prompted for the password below."
)


def build_ssh_args(profile: Profile, password_auth: bool = False, tty: bool | None = None) -> list[str]:
    """``ssh`` arguments (without the executable) for ``profile``.

    ``tty`` forces or suppresses ``-t``; by default a TTY is requested
    whenever a remote command is sent.
    """
    args: list[str] = []
    if profile.port > 0:
        args += ["-p", str(profile.port)]
    if profile.username:
        args += ["-l", profile.username]
    if profile.identity_file:
        args += ["-i", profile.identity_file]
    if profile.proxy_jump:
        args += ["-J", profile.proxy_jump]

    for flag, forwards in (
        ("-L", profile.local_forwards),
        ("-R", profile.remote_forwards),
        ("-D", profile.dynamic_forwards),
    ):
        for forward in forwards:
            if forward:
                args += [flag, forward]

    for assignment in profile.set_env:
        if assignment:
            args += ["-o", f"SetEnv={assignment}"]

    if password_auth:
        for option in PASSWORD_AUTH_OPTIONS:
            args += ["-o", option]

    args += profile.extra_args

    remote_command = build_remote_command(profile)
    if tty is None:
        tty = bool(remote_command)
    if tty:
        args.append("-t")
    args.append(profile.host)
    if remote_command:
        args.append(remote_command)
    return args


def password_command(tool_argv: list[str], secret: str, which=shutil.which) -> CommandSpec:
    """Wrap ``tool_argv`` in ``sshpass -e`` so ``secret`` answers the password prompt.

    Falls back to the bare command plus a notice when ``sshpass`` is missing.
    """
    sshpass = which(SSHPASS_BINARY)
    if sshpass:
        return CommandSpec(
            argv=[sshpass, "-e", *tool_argv],
            env={"SSHPASS": secret.strip()},
            injects_password=True,
        )
    return CommandSpec(argv=tool_argv, notices=[SSHPASS_MISSING_NOTICE])


def sshpass_failure_hint(spec: CommandSpec, exit_code: int) -> str | None:
    """Meaning of an ``sshpass`` exit status, for commands it wrapped."""
    if not spec.injects_password:
        return None
    if exit_code == 5:
        return (
            "Authentication failed. The stored password may be incorrect.\n"
            "  Update it with: jumpdeck password set <profile>"
        )
    if exit_code == 6:
        return "Host key verification failed."
    return None


class SSHConnector(Connector):
    """Runs ``ssh``.

    When a password is stored and no identity file is configured, the
    password is fed by ``sshpass -e`` through the ``SSHPASS`` environment
    variable, never on the command line. Without ``sshpass`` the user gets a
    notice and ssh prompts interactively. The password is injected even when
    ``use_agent`` is set, since ssh may fall back to password auth.
    """

    protocol = Protocol.SSH

    def __init__(self, which=shutil.which) -> None:
        self._which = which

    def _build(self, profile: Profile, secret: str, tty: bool | None = None) -> CommandSpec:
        use_password = bool(secret) and not profile.identity_file
        args = build_ssh_args(profile, password_auth=use_password, tty=tty)

        if not use_password:
            return CommandSpec(argv=["ssh", *args])
        return password_command(["ssh", *args], secret, which=self._which)

    def execute(self, profile: Profile, secret: str = "") -> CommandSpec:
        return self._build(profile, secret)

    def execute_command(self, profile: Profile, command: list[str], secret: str = "", tty: bool = False) -> CommandSpec:
        """Build a non-interactive ``ssh`` run of ``command`` on ``profile``'s host.

        Port forwards are dropped; ``remote_dir`` still applies.
        """
        run_profile = profile.without_forwards().model_copy(update={"remote_command": " ".join(command)})
        return self._build(run_profile, secret, tty=tty)

    def failure_hint(self, spec: CommandSpec, exit_code: int) -> str | None:
        return sshpass_failure_hint(spec, exit_code)

