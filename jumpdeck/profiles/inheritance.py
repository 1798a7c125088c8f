"""Profile inheritance resolution.

A profile with ``extends: <parent>`` inherits every field it leaves empty from
its parent, transitively. Merge rules, applied per field:

- strings: the child's value wins when non-empty
- port: the child's value wins when non-zero
- lists: the child's list replaces the parent's when non-empty (never merged)
- booleans: always the child's value; an explicit ``false`` cannot be told
  apart from "unset", so a child always turns an inherited ``true`` off
- name, lastUsed, useCount: always the child's own values
- extends: cleared on the result

Cyclic ``extends`` graphs never raise or loop: resolution stops at the first
revisited name and returns what has been merged so far.
"""

from __future__ import annotations

from collections.abc import Mapping

import structlog

from jumpdeck.profiles.models import Profile

log = structlog.get_logger(__name__)

STRING_FIELDS = (
    "protocol",
    "host",
    "username",
    "identity_file",
    "group",
    "description",
    "proxy_jump",
    "remote_command",
    "remote_dir",
    "instance_id",
    "aws_region",
    "aws_profile",
    "gcp_project",
    "gcp_zone",
    "mosh_server",
)

NUMERIC_FIELDS = ("port",)

LIST_FIELDS = (
    "tags",
    "extra_args",
    "local_forwards",
    "remote_forwards",
    "dynamic_forwards",
    "set_env",
)

CHILD_ONLY_FIELDS = (
    "use_agent",
    "favorite",
    "gcp_use_tunnel",
    "last_used",
    "use_count",
)


def merge_profiles(parent: Profile, child: Profile) -> Profile:
    """Merge one level: ``child`` overrides ``parent`` field by field.

    Args:
        parent: Already-resolved parent profile
        child: Profile that extends ``parent``

    Returns:
        New profile carrying the child's name and an empty ``extends``
    """
    update: dict[str, object] = {"name": child.name, "extends": ""}

    for field in STRING_FIELDS:
        value = getattr(child, field)
        if value != "":
            update[field] = value

    for field in NUMERIC_FIELDS:
        value = getattr(child, field)
        if value != 0:
            update[field] = value

    for field in LIST_FIELDS:
        value = getattr(child, field)
        if value:
            update[field] = list(value)

    for field in CHILD_ONLY_FIELDS:
        update[field] = getattr(child, field)

    return parent.model_copy(update=update, deep=True)


def _resolve(profiles: Mapping[str, Profile], profile: Profile, visited: set[str]) -> Profile:
    if not profile.extends:
        return profile

    if profile.name in visited:
        log.debug("profile_inheritance_cycle", profile=profile.name, extends=profile.extends)
        return profile
    visited.add(profile.name)

    parent = profiles.get(profile.extends)
    if parent is None:
        log.debug("profile_parent_missing", profile=profile.name, extends=profile.extends)
        return profile.model_copy(update={"extends": ""})

    if parent.extends:
        parent = _resolve(profiles, parent, visited)

    return merge_profiles(parent, profile)


def resolve_profile(profiles: Mapping[str, Profile], name: str) -> Profile | None:
    """Resolve ``name`` into its effective profile.

    Args:
        profiles: Stored profiles keyed by name
        name: Profile to resolve

    Returns:
        The effective profile, with ``extends`` empty, or None if ``name``
        is not in ``profiles``
    """
    profile = profiles.get(name)
    if profile is None:
        return None
    if not profile.extends:
        return profile

    return _resolve(profiles, profile, set())
