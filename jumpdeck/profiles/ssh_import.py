"""Build profiles from an OpenSSH client config (``~/.ssh/config``).

Every concrete ``Host`` alias becomes one ssh profile. Patterns containing
wildcards or negations are skipped; their settings still apply to the
aliases they match, since each alias is looked up the way ``ssh`` would.
"""

from __future__ import annotations

import os
from pathlib import Path

import paramiko
import structlog

from jumpdeck.enums import Protocol
from jumpdeck.exceptions import ConfigurationError
from jumpdeck.profiles.models import Profile

log = structlog.get_logger(__name__)

SSH_CONFIG_PATH = "~/.ssh/config"
IMPORTED_DESCRIPTION = "imported from ssh config"
PATTERN_CHARS = set("*?! ")


def default_ssh_config_path() -> Path:
    return Path(SSH_CONFIG_PATH).expanduser()


def _is_pattern(host: str) -> bool:
    return bool(PATTERN_CHARS & set(host))


def profiles_from_ssh_config(path: Path | str, group: str = "", prefix: str = "") -> list[Profile]:
    """Profiles for each concrete host alias in the ssh config at ``path``.

    Args:
        path: OpenSSH client config file
        group: Group assigned to every imported profile
        prefix: Prepended to each alias to form the profile name

    Raises:
        ConfigurationError: If the file is missing or cannot be parsed
    """
    config_file = Path(path).expanduser()
    if not config_file.exists():
        raise ConfigurationError(f"ssh config not found: {config_file}")

    try:
        ssh_config = paramiko.SSHConfig.from_path(str(config_file))
    except (OSError, paramiko.ssh_exception.ConfigParseError) as e:
        raise ConfigurationError(f"Cannot parse ssh config {config_file}: {e}") from e

    profiles = []
    for host in sorted(ssh_config.get_hostnames()):
        if _is_pattern(host):
            continue
        entry = ssh_config.lookup(host)

        port = 0
        if entry.get("port"):
            try:
                port = int(entry["port"])
            except ValueError:
                log.warning("ssh_config_bad_port", host=host, port=entry["port"])

        identity_files = entry.get("identityfile") or []
        profiles.append(
            Profile(
                name=f"{prefix}{host}",
                protocol=Protocol.SSH.value,
                host=entry.get("hostname") or host,
                port=port,
                username=entry.get("user", ""),
                identity_file=os.path.expanduser(identity_files[0]) if identity_files else "",
                proxy_jump=entry.get("proxyjump", ""),
                group=group,
                description=IMPORTED_DESCRIPTION,
            )
        )

    log.debug("ssh_config_parsed", path=str(config_file), profiles=len(profiles))
    return profiles
