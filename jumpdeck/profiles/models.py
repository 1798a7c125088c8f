"""Connection profile model.

A profile is a named, persisted description of how to reach one remote target
via one protocol. Profiles are stored in the YAML config under camelCase keys
(``identityFile``, ``proxyJump``, ...); Python code uses snake_case attributes.

Example:
    >>> profile = Profile(name="web", protocol="ssh", host="web.example.com")
    >>> profile.target
    'web.example.com'
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Profile(BaseModel):
    """A stored connection profile.

    ``protocol`` is kept as a plain string so that a config file naming an
    unknown protocol still loads; the value is checked by
    :func:`jumpdeck.profiles.validation.validate_profile` before the profile
    is persisted, and by the connector registry when connecting.

    ``port == 0`` means "use the protocol default". When ``extends`` names a
    parent, this profile is a template reference and must be resolved with
    :func:`jumpdeck.profiles.inheritance.resolve_profile` before use.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str
    protocol: str = ""
    host: str = ""
    port: int = 0
    username: str = ""
    identity_file: str = Field(default="", alias="identityFile")
    use_agent: bool = Field(default=False, alias="useAgent")
    extra_args: list[str] = Field(default_factory=list, alias="extraArgs")
    group: str = ""
    description: str = ""
    favorite: bool = False
    last_used: datetime | None = Field(default=None, alias="lastUsed")
    use_count: int = Field(default=0, alias="useCount")
    proxy_jump: str = Field(default="", alias="proxyJump")
    tags: list[str] = Field(default_factory=list)
    local_forwards: list[str] = Field(default_factory=list, alias="localForwards")
    remote_forwards: list[str] = Field(default_factory=list, alias="remoteForwards")
    dynamic_forwards: list[str] = Field(default_factory=list, alias="dynamicForwards")

    # On-connect automation
    remote_command: str = Field(default="", alias="remoteCommand")
    remote_dir: str = Field(default="", alias="remoteDir")
    set_env: list[str] = Field(default_factory=list, alias="setEnv")

    # AWS SSM
    aws_region: str = Field(default="", alias="awsRegion")
    aws_profile: str = Field(default="", alias="awsProfile")
    instance_id: str = Field(default="", alias="instanceId")

    # Mosh
    mosh_server: str = Field(default="", alias="moshServer")

    # GCP gcloud
    gcp_project: str = Field(default="", alias="gcpProject")
    gcp_zone: str = Field(default="", alias="gcpZone")
    gcp_use_tunnel: bool = Field(default=False, alias="gcpUseTunnel")

    extends: str = ""

    @property
    def target(self) -> str:
        """``user@host`` when a username is set, otherwise ``host``."""
        if self.username:
            return f"{self.username}@{self.host}"
        return self.host

    @property
    def has_forwards(self) -> bool:
        return bool(self.local_forwards or self.remote_forwards or self.dynamic_forwards)

    def without_forwards(self) -> Profile:
        """Copy of this profile with every port forward removed."""
        return self.model_copy(update={"local_forwards": [], "remote_forwards": [], "dynamic_forwards": []})

    def to_yaml_dict(self) -> dict[str, Any]:
        """Serialize for the config file: camelCase keys, defaults omitted."""
        data = self.model_dump(by_alias=True, exclude_defaults=True, mode="json")
        data["name"] = self.name
        return data
