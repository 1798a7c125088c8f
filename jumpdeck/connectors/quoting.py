"""Shell quoting for strings that end up inside a composite shell command."""

from jumpdeck.profiles.models import Profile

LOGIN_SHELL = "exec $SHELL -l"


def shell_quote(value: str) -> str:
    """Quote ``value`` as a single POSIX shell word.

    Always wraps in single quotes; an embedded ``'`` becomes ``'"'"'``.

    >>> shell_quote("/path/with spaces")
    "'/path/with spaces'"
    """
    return "'" + value.replace("'", "'\"'\"'") + "'"


def build_remote_command(profile: Profile) -> str:
    """Command to run on the remote host after connecting.

    ``cd <dir>`` and the remote command are joined with ``&&`` so a failed
    ``cd`` aborts the command. A directory without a command starts a login
    shell there.

    Returns:
        The remote command string, or "" when nothing is configured
    """
    parts = []
    if profile.remote_dir:
        parts.append(f"cd {shell_quote(profile.remote_dir)}")

    if profile.remote_command:
        parts.append(profile.remote_command)
    elif profile.remote_dir:
        parts.append(LOGIN_SHELL)

    return " && ".join(parts)
