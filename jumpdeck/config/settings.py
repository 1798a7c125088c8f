"""
Configuration for jumpdeck: process settings and the persisted profile store.

``JumpdeckSettings`` reads ``JUMPDECK_*`` environment variables through
pydantic-settings. ``Config`` is the YAML document holding every profile and
the default credential backend; it is loaded once per command, mutated in
memory and written back atomically.

Example config.yaml::

    defaultBackend: keyring
    profiles:
      bastion:
        name: bastion
        protocol: ssh
        host: bastion.example.com
        username: ops
      web:
        name: web
        extends: bastion
        host: web.internal
        proxyJump: ops@bastion.example.com
"""

from __future__ import annotations

import os
import tempfile
from collections.abc import Iterable
from pathlib import Path

import structlog
import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from jumpdeck.exceptions import ConfigurationError, ProfileNotFoundError
from jumpdeck.profiles.inheritance import resolve_profile
from jumpdeck.profiles.models import Profile
from jumpdeck.profiles.validation import validate_profile

log = structlog.get_logger(__name__)

APP_DIR_NAME = "jumpdeck"
CONFIG_FILE_NAME = "config.yaml"


class JumpdeckSettings(BaseSettings):
    """Process-level settings taken from the environment.

    Attributes:
        credentials_backend: Forced credential backend
            (``JUMPDECK_CREDENTIALS_BACKEND``); overrides the config default
        config: Explicit config file path (``JUMPDECK_CONFIG``)
        log_level: Minimum log level (``JUMPDECK_LOG_LEVEL``)
    """

    model_config = SettingsConfigDict(env_prefix="JUMPDECK_", case_sensitive=False)

    credentials_backend: str | None = None
    config: Path | None = None
    log_level: str = "WARNING"


def default_config_dir() -> Path:
    """``$XDG_CONFIG_HOME/jumpdeck``, falling back to ``~/.config/jumpdeck``."""
    config_home = os.environ.get("XDG_CONFIG_HOME", "").strip()
    if not config_home:
        return Path.home() / ".config" / APP_DIR_NAME
    return Path(config_home) / APP_DIR_NAME


def default_config_path() -> Path:
    """Path of the config file, honouring ``JUMPDECK_CONFIG``."""
    settings = JumpdeckSettings()
    if settings.config is not None:
        return settings.config
    return default_config_dir() / CONFIG_FILE_NAME


class Config(BaseModel):
    """The persisted profile store.

    Profiles are keyed by name. ``get_profile`` returns the effective
    (inheritance-resolved) profile; ``get_raw_profile`` returns it as stored,
    for editing.
    """

    model_config = ConfigDict(populate_by_name=True)

    profiles: dict[str, Profile] = Field(default_factory=dict)
    default_backend: str | None = Field(default=None, alias="defaultBackend")

    def get_profile(self, name: str) -> Profile:
        """Effective profile for ``name``.

        Raises:
            ProfileNotFoundError: If no such profile is stored
        """
        profile = resolve_profile(self.profiles, name)
        if profile is None:
            raise ProfileNotFoundError(name)
        return profile

    def get_raw_profile(self, name: str) -> Profile:
        """Stored profile for ``name`` without inheritance applied.

        Raises:
            ProfileNotFoundError: If no such profile is stored
        """
        try:
            return self.profiles[name]
        except KeyError:
            raise ProfileNotFoundError(name) from None

    def upsert_profile(self, profile: Profile) -> Profile:
        """Validate and store ``profile``, replacing any profile of the same name.

        Returns:
            The validated profile as stored

        Raises:
            ProfileValidationError: The store is left unchanged
        """
        parent = None
        if profile.extends:
            parent = resolve_profile(self.profiles, profile.extends)
        validated = validate_profile(profile, parent=parent)
        self.profiles[validated.name] = validated
        return validated

    def record_usage(self, profile: Profile) -> Profile:
        """Store ``profile``'s usage counters on its stored (unresolved) entry.

        The stored entry keeps its own ``extends`` and fields; only
        ``lastUsed``/``useCount`` are copied over.
        """
        stored = self.get_raw_profile(profile.name)
        updated = stored.model_copy(update={"last_used": profile.last_used, "use_count": profile.use_count})
        self.profiles[profile.name] = updated
        return updated

    def delete_profile(self, name: str) -> bool:
        """Remove ``name``; returns False if it was not stored."""
        if name in self.profiles:
            del self.profiles[name]
            return True
        return False

    def import_profiles(self, profiles: Iterable[Profile], overwrite: bool = False) -> tuple[int, int]:
        """Store ``profiles`` as given, without validation.

        Existing names are skipped unless ``overwrite`` is set. Children may
        arrive before their parents, so entries are validated on use, not here.

        Returns:
            ``(imported, skipped)`` counts
        """
        imported = skipped = 0
        for profile in profiles:
            if profile.name in self.profiles and not overwrite:
                skipped += 1
                continue
            self.profiles[profile.name] = profile
            imported += 1
        return imported, skipped

    def list_profiles(self) -> list[Profile]:
        """Stored profiles ordered by group, then name."""
        return sorted(self.profiles.values(), key=lambda p: (p.group, p.name))

    def to_yaml_dict(self) -> dict:
        data: dict = {}
        if self.default_backend:
            data["defaultBackend"] = self.default_backend
        data["profiles"] = {name: profile.to_yaml_dict() for name, profile in sorted(self.profiles.items())}
        return data


def load_config(path: Path | str | None = None) -> Config:
    """Load the config file.

    A missing file yields an empty config. Profiles are named by their
    mapping key; a conflicting ``name`` inside an entry is replaced.

    Raises:
        ConfigurationError: If the file cannot be read, parsed or validated
    """
    config_file = Path(path) if path else default_config_path()
    if not config_file.exists():
        log.debug("config_not_found", path=str(config_file))
        return Config()

    try:
        with open(config_file) as f:
            raw = yaml.safe_load(f)
    except OSError as e:
        raise ConfigurationError(f"Cannot read configuration file: {config_file}") from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML syntax in {config_file}: {e}") from e

    if raw is None:
        return Config()
    if not isinstance(raw, dict):
        raise ConfigurationError("Configuration must be a YAML object, not a list or scalar")

    profiles = raw.get("profiles") or {}
    if not isinstance(profiles, dict):
        raise ConfigurationError("'profiles' must be a mapping of name to profile")
    for key, entry in profiles.items():
        if not isinstance(entry, dict):
            continue
        if entry.get("name") and entry["name"] != key:
            log.warning("profile_name_mismatch", key=key, name=entry["name"])
        entry["name"] = key

    try:
        return Config.model_validate(raw)
    except ValidationError as e:
        raise ConfigurationError(f"Failed to validate configuration: {e}") from e


def save_config(config: Config, path: Path | str | None = None) -> Path:
    """Write ``config`` atomically (private temp file, then rename).

    There is no cross-process locking: two concurrent writers each rename a
    complete file into place and the later one wins.

    Returns:
        Path that was written

    Raises:
        ConfigurationError: If the file cannot be written
    """
    config_file = Path(path) if path else default_config_path()
    temp_name = None

    try:
        config_file.parent.mkdir(mode=0o700, parents=True, exist_ok=True)
        content = yaml.safe_dump(config.to_yaml_dict(), sort_keys=False, default_flow_style=False)
        # One temp file per writer; mkstemp creates it 0600
        fd, temp_name = tempfile.mkstemp(dir=config_file.parent, prefix=f".{config_file.name}.")
        with os.fdopen(fd, "w") as f:
            f.write(content)
        os.replace(temp_name, config_file)
    except OSError as e:
        if temp_name is not None:
            Path(temp_name).unlink(missing_ok=True)
        raise ConfigurationError(f"Failed to save configuration to {config_file}: {e}") from e

    log.debug("config_saved", path=str(config_file), profiles=len(config.profiles))
    return config_file
