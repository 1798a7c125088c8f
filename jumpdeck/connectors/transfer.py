"""File transfer commands (``scp``, ``rsync``) built from SSH-family profiles.

Paths use the scp convention ``<profile>:<remote-path>``; exactly one side of
a transfer must be remote.
"""

from __future__ import annotations

import shlex
from dataclasses import dataclass
from typing import cast

from jumpdeck.enums import Protocol
from jumpdeck.exceptions import ProfileValidationError
from jumpdeck.profiles.models import Profile

from .base import CommandSpec

TRANSFER_PROTOCOLS = (Protocol.SSH.value, Protocol.SFTP.value)


@dataclass(frozen=True)
class TransferPath:
    """One side of a transfer.

    Attributes:
        path: Local path, or the path on the remote host
        profile: Profile name for remote paths, None for local ones
    """

    path: str
    profile: str | None = None

    @property
    def is_remote(self) -> bool:
        return self.profile is not None


def parse_transfer_path(value: str) -> TransferPath:
    """Split ``profile:path``; anything else is a local path.

    Single-letter prefixes followed by ``\\`` or ``/`` are Windows drive
    letters, and a prefix containing ``/`` is a local path with a colon in it.
    """
    idx = value.find(":")
    if idx <= 0:
        return TransferPath(path=value)
    prefix = value[:idx]
    if "/" in prefix:
        return TransferPath(path=value)
    if idx == 1 and len(value) > 2 and value[2] in ("\\", "/"):
        return TransferPath(path=value)
    return TransferPath(path=value[idx + 1 :], profile=prefix)


def split_transfer(source: str, destination: str) -> tuple[TransferPath, TransferPath, str]:
    """Parse both sides and return them with the profile name involved.

    Raises:
        ProfileValidationError: If both or neither side is remote
    """
    src, dst = parse_transfer_path(source), parse_transfer_path(destination)
    if src.is_remote and dst.is_remote:
        raise ProfileValidationError("cannot transfer between two remote hosts")
    if not src.is_remote and not dst.is_remote:
        raise ProfileValidationError("at least one path must be remote (profile:path)")
    remote = src if src.is_remote else dst
    return src, dst, cast(str, remote.profile)


def _require_ssh_family(profile: Profile, tool: str) -> None:
    if profile.protocol not in TRANSFER_PROTOCOLS:
        raise ProfileValidationError(
            f"{tool} only works with SSH/SFTP profiles (got {profile.protocol})", field="protocol"
        )


def _endpoints(profile: Profile, src: TransferPath, dst: TransferPath) -> tuple[str, str]:
    if src.is_remote:
        return f"{profile.target}:{src.path}", dst.path
    return src.path, f"{profile.target}:{dst.path}"


def build_scp_command(
    profile: Profile,
    src: TransferPath,
    dst: TransferPath,
    recursive: bool = False,
    preserve: bool = False,
) -> CommandSpec:
    """``scp`` command copying between ``src`` and ``dst`` for ``profile``."""
    _require_ssh_family(profile, "scp")

    args = ["scp"]
    if recursive:
        args.append("-r")
    if preserve:
        args.append("-p")
    if profile.port > 0 and profile.port != 22:
        args += ["-P", str(profile.port)]
    if profile.identity_file:
        args += ["-i", profile.identity_file]
    if profile.proxy_jump:
        args += ["-o", f"ProxyJump={profile.proxy_jump}"]

    args += _endpoints(profile, src, dst)
    return CommandSpec(argv=args)


def build_rsync_command(
    profile: Profile,
    src: TransferPath,
    dst: TransferPath,
    delete: bool = False,
    dry_run: bool = False,
    verbose: bool = False,
    progress: bool = False,
    excludes: tuple[str, ...] | list[str] = (),
) -> CommandSpec:
    """``rsync -a`` command syncing ``src`` to ``dst`` over ssh.

    The ``-e`` value is parsed by a shell on rsync's side, so the identity
    path and jump spec are quoted there.
    """
    _require_ssh_family(profile, "rsync")

    args = ["rsync", "-a"]
    if verbose:
        args.append("-v")
    if progress:
        args.append("--progress")
    if delete:
        args.append("--delete")
    if dry_run:
        args.append("--dry-run")
    for pattern in excludes:
        args += ["--exclude", pattern]

    ssh_parts = ["ssh"]
    if profile.port > 0 and profile.port != 22:
        ssh_parts += ["-p", str(profile.port)]
    if profile.identity_file:
        ssh_parts += ["-i", shlex.quote(profile.identity_file)]
    if profile.proxy_jump:
        ssh_parts += ["-J", shlex.quote(profile.proxy_jump)]
    args += ["-e", " ".join(ssh_parts)]

    source, destination = _endpoints(profile, src, dst)
    if not source.endswith(("/", ":")) and src.path in (".", ".."):
        source += "/"
    args += [source, destination]
    return CommandSpec(argv=args)
