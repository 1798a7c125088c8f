"""Connection profiles: model, inheritance resolution and validation."""

from jumpdeck.profiles.inheritance import merge_profiles, resolve_profile
from jumpdeck.profiles.models import Profile
from jumpdeck.profiles.validation import default_port, validate_profile

__all__ = [
    "Profile",
    "default_port",
    "merge_profiles",
    "resolve_profile",
    "validate_profile",
]
