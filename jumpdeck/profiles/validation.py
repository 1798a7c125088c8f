"""Checks applied to a profile before it is persisted.

Validation is separate from inheritance resolution: effective profiles built
on the fly by :func:`jumpdeck.profiles.inheritance.resolve_profile` are never
validated.
"""

from __future__ import annotations

from jumpdeck.enums import Protocol
from jumpdeck.exceptions import ProfileValidationError
from jumpdeck.profiles.inheritance import merge_profiles
from jumpdeck.profiles.models import Profile

DEFAULT_PORTS: dict[Protocol, int] = {
    Protocol.SSH: 22,
    Protocol.SFTP: 22,
    Protocol.MOSH: 22,
    Protocol.TELNET: 23,
}


def default_port(protocol: Protocol | str) -> int:
    """Conventional port for ``protocol``; 0 for protocols without one (ssm, gcloud)."""
    try:
        return DEFAULT_PORTS.get(Protocol(protocol), 0)
    except ValueError:
        return 0


def validate_profile(profile: Profile, parent: Profile | None = None) -> Profile:
    """Validate ``profile`` and fill in its default port.

    Args:
        profile: Profile about to be stored
        parent: Resolved parent when ``profile.extends`` is set. Protocol and
            host may then come from the parent, and the port stays 0 so it
            keeps being inherited.

    Returns:
        Validated copy of ``profile``

    Raises:
        ProfileValidationError: Naming the violated constraint
    """
    if not profile.name.strip():
        raise ProfileValidationError("profile name is required", field="name")

    effective = merge_profiles(parent, profile) if parent is not None else profile

    try:
        protocol = Protocol(effective.protocol)
    except ValueError as e:
        raise ProfileValidationError(f"unsupported protocol: {effective.protocol}", field="protocol") from e

    if not effective.host.strip():
        raise ProfileValidationError("host is required", field="host")

    if profile.port <= 0:
        port = default_port(protocol) if parent is None else 0
        return profile.model_copy(update={"port": port})
    return profile.model_copy()
