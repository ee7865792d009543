"""JSON-backed store for per-database user overrides.

The store owns a single cached `UserConfig` guarded by a lock. The document is
read from disk at most once per store; every successful mutation writes the
full document back before returning.

Example:
    >>> from dbrunner.store import ConfigStore
    >>> store = ConfigStore.default()
    >>> store.set_image_tag(DatabaseKind.POSTGRESQL, "16-alpine")
    '16-alpine'
    >>> store.resolve_image(DatabaseKind.POSTGRESQL)
    'postgres:16-alpine'
"""

from __future__ import annotations

import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Callable

from pydantic import ValidationError

from dbrunner.catalog import DatabaseKind, image_ref
from dbrunner.config import get_config_file
from dbrunner.core import DBRunnerError

from .models import UserConfig

logger = logging.getLogger(__name__)

MAX_TAG_LENGTH = 100
_FORBIDDEN_TAG_CHARS = (":", "/")


# =============================================================================
# Errors
# =============================================================================


class ConfigCorruptError(DBRunnerError):
    """The config file exists but is not a valid config document."""

    def __init__(self, path: Path, reason: str):
        super().__init__(f"Config file {path} is unreadable: {reason}")
        self.path = path
        self.reason = reason


class ConfigSaveError(DBRunnerError):
    """The config document could not be written to disk."""


class PathNotFoundError(DBRunnerError):
    """A volume path does not exist on the filesystem."""

    def __init__(self, path: str):
        super().__init__(f"Path does not exist: {path}")
        self.path = path


class InvalidTagError(DBRunnerError):
    """An image tag looks like a full image reference or is too long."""

    def __init__(self, tag: str):
        super().__init__(
            "Invalid tag format. Tag should be version/variant only (e.g., '16-alpine')"
        )
        self.tag = tag


# =============================================================================
# Disk I/O
# =============================================================================


def read_config(path: Path) -> UserConfig:
    """Read a config document.

    Returns an empty config when the file does not exist.

    Raises:
        ConfigCorruptError: If the file cannot be read or does not match the schema.
    """
    if not path.exists():
        logger.debug(f"No config file at {path}, using defaults")
        return UserConfig()

    try:
        raw = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigCorruptError(path, str(e)) from e

    try:
        return UserConfig.model_validate_json(raw)
    except ValidationError as e:
        raise ConfigCorruptError(path, f"{e.error_count()} validation error(s)") from e


def write_config(path: Path, config: UserConfig) -> None:
    """Write a config document, creating the parent directory.

    The document goes to a sibling temp file which is then moved over `path`,
    so a failed write never leaves a truncated config behind.

    Raises:
        ConfigSaveError: If the file cannot be written.
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        handle = tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
        )
    except OSError as e:
        raise ConfigSaveError(str(e)) from e

    tmp_path = Path(handle.name)
    try:
        with handle:
            handle.write(config.model_dump_json(indent=2))
        os.replace(tmp_path, path)
    except OSError as e:
        tmp_path.unlink(missing_ok=True)
        raise ConfigSaveError(str(e)) from e


def validate_tag(tag: str) -> None:
    """Reject tags that would corrupt the `image:tag` reference.

    Raises:
        InvalidTagError: If the tag contains ':' or '/' or is too long.
    """
    if any(ch in tag for ch in _FORBIDDEN_TAG_CHARS) or len(tag) > MAX_TAG_LENGTH:
        raise InvalidTagError(tag)


# =============================================================================
# Store
# =============================================================================


class ConfigStore:
    """Load-once, write-through cache of the user config.

    All reads and writes hold one lock for the duration of the operation,
    so concurrent callers never observe a half-applied mutation.

    Attributes:
        path: Location of the JSON document.
    """

    def __init__(self, path: Path | str):
        self.path = Path(path)
        self._lock = threading.Lock()
        self._config: UserConfig | None = None
        self._load_error: ConfigCorruptError | None = None

    @classmethod
    def default(cls) -> "ConfigStore":
        """Create a store at the platform config location."""
        return cls(get_config_file())

    # ---- Loading -------------------------------------------------------------

    def _ensure_loaded(self) -> UserConfig:
        # Caller holds self._lock.
        if self._config is None:
            try:
                self._config = read_config(self.path)
            except ConfigCorruptError as e:
                logger.warning(f"{e}. Falling back to default configuration.")
                self._load_error = e
                self._config = UserConfig()
        return self._config

    def load(self) -> UserConfig:
        """Return a copy of the current config, reading the file on first use."""
        with self._lock:
            return self._ensure_loaded().model_copy(deep=True)

    def take_load_error(self) -> ConfigCorruptError | None:
        """Return the load error once, then forget it."""
        with self._lock:
            self._ensure_loaded()
            error, self._load_error = self._load_error, None
            return error

    # ---- Reads ---------------------------------------------------------------

    def get_volume_path(self, kind: DatabaseKind | str) -> str | None:
        key = DatabaseKind.from_name(kind).value
        with self._lock:
            return self._ensure_loaded().volume_path(key)

    def get_image_tag(self, kind: DatabaseKind | str) -> str | None:
        key = DatabaseKind.from_name(kind).value
        with self._lock:
            return self._ensure_loaded().image_tag(key)

    def resolve_image(self, kind: DatabaseKind | str) -> str:
        """Image reference with the user's tag, or the catalog default."""
        kind = DatabaseKind.from_name(kind)
        return image_ref(kind, self.get_image_tag(kind))

    # ---- Mutations -----------------------------------------------------------

    def _mutate(self, change: Callable[[UserConfig], object]) -> None:
        with self._lock:
            updated = self._ensure_loaded().model_copy(deep=True)
            change(updated)
            write_config(self.path, updated)
            self._config = updated

    def set_volume_path(self, kind: DatabaseKind | str, path: str | os.PathLike | None) -> str | None:
        """Set or clear the host volume path for a database.

        An empty path removes the override.

        Returns:
            The stored absolute path, or None when the override was cleared.

        Raises:
            PathNotFoundError: If a non-empty path does not exist.
            ConfigSaveError: If the document could not be persisted.
        """
        key = DatabaseKind.from_name(kind).value
        raw = str(path).strip() if path is not None else ""

        if not raw:
            self._mutate(lambda config: config.volume_paths.pop(key, None))
            logger.info(f"Cleared volume path for {key}")
            return None

        try:
            candidate = Path(raw).expanduser()
        except RuntimeError as e:
            # "~user" for an unknown user, or no resolvable home directory
            raise PathNotFoundError(raw) from e
        if not candidate.exists():
            raise PathNotFoundError(raw)

        resolved = os.path.abspath(candidate)
        self._mutate(lambda config: config.volume_paths.__setitem__(key, resolved))
        logger.info(f"Volume path for {key} set to {resolved}")
        return resolved

    def set_image_tag(self, kind: DatabaseKind | str, tag: str | None) -> str | None:
        """Set or clear the image tag for a database.

        An empty tag removes the override and reverts to the catalog default.

        Returns:
            The stored tag, or None when reverted to the default.

        Raises:
            InvalidTagError: If the tag contains ':' or '/' or exceeds 100 characters.
            ConfigSaveError: If the document could not be persisted.
        """
        key = DatabaseKind.from_name(kind).value
        trimmed = (tag or "").strip()

        if not trimmed:
            self._mutate(lambda config: config.image_tags.pop(key, None))
            logger.info(f"Reverted {key} to default image tag")
            return None

        validate_tag(trimmed)
        self._mutate(lambda config: config.image_tags.__setitem__(key, trimmed))
        logger.info(f"Image tag for {key} set to {trimmed}")
        return trimmed


__all__ = [
    "MAX_TAG_LENGTH",
    "ConfigStore",
    "ConfigCorruptError",
    "ConfigSaveError",
    "PathNotFoundError",
    "InvalidTagError",
    "read_config",
    "write_config",
    "validate_tag",
]
