"""Persistent user overrides (volume paths, image tags) for dbrunner.

Example:
    >>> from dbrunner.store import ConfigStore
    >>> store = ConfigStore("/tmp/dbrunner/config.json")
    >>> store.get_image_tag("postgresql") is None
    True
"""

from .lib import (
    MAX_TAG_LENGTH,
    ConfigCorruptError,
    ConfigSaveError,
    ConfigStore,
    InvalidTagError,
    PathNotFoundError,
    read_config,
    validate_tag,
    write_config,
)
from .models import UserConfig

__all__ = [
    "UserConfig",
    "ConfigStore",
    "MAX_TAG_LENGTH",
    # Errors
    "ConfigCorruptError",
    "ConfigSaveError",
    "PathNotFoundError",
    "InvalidTagError",
    # Disk I/O
    "read_config",
    "write_config",
    "validate_tag",
]
