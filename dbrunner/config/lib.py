"""Environment-driven settings for dbrunner.

Every tunable is declared once as an `EnvVar` member carrying its variable
name, default, type and category. Callers read values through
`get_environment()`, which applies an explicit override first, then the
process environment, then the declared default.

Example:
    >>> from dbrunner.config import EnvVar, get_environment
    >>> get_environment(EnvVar.DOCKER_BIN)
    'docker'
    >>> get_environment(EnvVar.LOG_TAIL, override=500)
    500
"""

from __future__ import annotations

import os
import sys
import tempfile
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Callable, overload

APP_DIR_NAME = "dbrunner"
CONFIG_FILE_NAME = "config.json"

# =============================================================================
# Declarations
# =============================================================================


@dataclass(frozen=True)
class EnvConfig:
    """Declaration of one DBRUNNER_* variable.

    Attributes:
        name: Variable name as read from the process environment.
        default: Value used when the variable is unset, empty or malformed.
            None means the caller computes a fallback (see the path helpers).
        var_type: Target type: str, int or Path.
        description: Shown by `python . env`.
        category: One of paths, docker, logging.
    """

    name: str
    default: Any
    var_type: type
    description: str = ""
    category: str = "general"


class EnvVar(Enum):
    """Settings recognised by dbrunner, grouped by category.

    Categories:
        - paths: Where the user config and generated compose files live
        - docker: Container runtime invocation
        - logging: Log output
    """

    # -------------------------------------------------------------------------
    # Paths
    # -------------------------------------------------------------------------
    CONFIG_DIR = EnvConfig(
        name="DBRUNNER_CONFIG_DIR",
        default=None,  # Computed from platform conventions
        var_type=Path,
        description="Directory holding config.json (volume paths, image tags)",
        category="paths",
    )
    COMPOSE_DIR = EnvConfig(
        name="DBRUNNER_COMPOSE_DIR",
        default=None,  # System temp directory
        var_type=Path,
        description="Directory for generated per-database compose files",
        category="paths",
    )

    # -------------------------------------------------------------------------
    # Docker
    # -------------------------------------------------------------------------
    DOCKER_BIN = EnvConfig(
        name="DBRUNNER_DOCKER_BIN",
        default="docker",
        var_type=str,
        description="Container runtime CLI (must support `compose`, `ps`, `logs`)",
        category="docker",
    )
    LOG_TAIL = EnvConfig(
        name="DBRUNNER_LOG_TAIL",
        default=100,
        var_type=int,
        description="Default number of container log lines to fetch",
        category="docker",
    )

    # -------------------------------------------------------------------------
    # Logging
    # -------------------------------------------------------------------------
    LOG_LEVEL = EnvConfig(
        name="DBRUNNER_LOG_LEVEL",
        default="INFO",
        var_type=str,
        description="Logging level (DEBUG, INFO, WARNING, ERROR)",
        category="logging",
    )


# =============================================================================
# Resolution
# =============================================================================


def _to_path(raw: str) -> Path:
    return Path(raw).expanduser()


_CONVERTERS: dict[type, Callable[[str], Any]] = {
    str: str,
    int: int,
    Path: _to_path,
}


def _convert_value(raw: str | None, var_type: type, default: Any) -> Any:
    """Turn a raw environment string into `var_type`.

    Unset, empty and unparseable values all yield `default`.
    """
    if not raw:
        return default
    convert = _CONVERTERS.get(var_type, str)
    try:
        return convert(raw)
    except ValueError:
        return default


@overload
def get_environment(env_var: EnvVar, override: int) -> int: ...
@overload
def get_environment(env_var: EnvVar, override: str) -> str: ...
@overload
def get_environment(env_var: EnvVar, override: Path) -> Path: ...
@overload
def get_environment(env_var: EnvVar, override: None = None) -> Any: ...


def get_environment(env_var: EnvVar, override: Any = None) -> Any:
    """Resolve a setting: override, then environment, then declared default.

    Example:
        >>> get_environment(EnvVar.LOG_TAIL)
        100
        >>> get_environment(EnvVar.LOG_TAIL, override=20)
        20
    """
    if override is not None:
        return override

    declared: EnvConfig = env_var.value
    return _convert_value(os.environ.get(declared.name), declared.var_type, declared.default)


def get_environment_info(env_var: EnvVar) -> EnvConfig:
    """Declared name, default, type and category of a setting."""
    return env_var.value


def list_environment_variables(category: str | None = None) -> list[EnvVar]:
    """Settings in declaration order, restricted to `category` when given."""
    members = list(EnvVar)
    if category is None:
        return members
    return [member for member in members if member.value.category == category]


# =============================================================================
# Path Resolution
# =============================================================================


def _platform_config_root() -> Path:
    """Return the per-user configuration root for the running platform."""
    if sys.platform.startswith("win"):
        appdata = os.environ.get("APPDATA")
        if appdata:
            return Path(appdata)
        return Path.home() / "AppData" / "Roaming"

    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support"

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg)
    return Path.home() / ".config"


def get_config_dir(override: Path | str | None = None) -> Path:
    """Get the directory holding the persisted user config.

    Resolution: override > DBRUNNER_CONFIG_DIR > {platform config root}/dbrunner
    """
    if override is not None:
        return Path(override)

    env_path = get_environment(EnvVar.CONFIG_DIR)
    if env_path:
        return env_path

    return _platform_config_root() / APP_DIR_NAME


def get_config_file(override: Path | str | None = None) -> Path:
    """Get the path of config.json inside the config directory."""
    return get_config_dir(override) / CONFIG_FILE_NAME


def get_compose_dir(override: Path | str | None = None) -> Path:
    """Get the directory for generated compose files.

    Resolution: override > DBRUNNER_COMPOSE_DIR > system temp directory
    """
    if override is not None:
        return Path(override)

    env_path = get_environment(EnvVar.COMPOSE_DIR)
    if env_path:
        return env_path

    return Path(tempfile.gettempdir())


__all__ = [
    # Core types
    "EnvConfig",
    "EnvVar",
    # Main interface
    "get_environment",
    "get_environment_info",
    "list_environment_variables",
    # Paths
    "APP_DIR_NAME",
    "CONFIG_FILE_NAME",
    "get_config_dir",
    "get_config_file",
    "get_compose_dir",
]
