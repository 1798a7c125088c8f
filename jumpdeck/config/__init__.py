"""Configuration for jumpdeck.

Key Components:
    - JumpdeckSettings: ``JUMPDECK_*`` environment settings (pydantic-settings)
    - Config: the persisted YAML profile store
    - load_config / save_config: YAML I/O with atomic writes

Example:
    >>> from jumpdeck.config import load_config
    >>> config = load_config()
    >>> profile = config.get_profile("web")
"""

from jumpdeck.config.settings import (
    Config,
    JumpdeckSettings,
    default_config_dir,
    default_config_path,
    load_config,
    save_config,
)

__all__ = [
    "Config",
    "JumpdeckSettings",
    "default_config_dir",
    "default_config_path",
    "load_config",
    "save_config",
]
