"""Centralized configuration management for dbrunner.

Provides unified access to environment-driven settings via `get_environment()`.

Example:
    >>> from dbrunner.config import EnvVar, get_environment, get_config_file
    >>>
    >>> docker_bin = get_environment(EnvVar.DOCKER_BIN)  # "docker"
    >>> config_path = get_config_file()  # ~/.config/dbrunner/config.json
    >>>
    >>> for var in list_environment_variables("paths"):
    ...     info = get_environment_info(var)
    ...     print(f"{info.name}: {info.description}")

Environment Variable Categories:
    paths: Config directory and generated compose file directory
    docker: Container runtime binary and log tail size
    logging: Log level
"""

from .lib import (
    APP_DIR_NAME,
    CONFIG_FILE_NAME,
    # Core types
    EnvConfig,
    EnvVar,
    # Paths
    get_compose_dir,
    get_config_dir,
    get_config_file,
    # Main interface
    get_environment,
    get_environment_info,
    # Introspection
    list_environment_variables,
)

__all__ = [
    # Core types
    "EnvConfig",
    "EnvVar",
    # Main interface
    "get_environment",
    "get_environment_info",
    # Paths
    "APP_DIR_NAME",
    "CONFIG_FILE_NAME",
    "get_config_dir",
    "get_config_file",
    "get_compose_dir",
    # Introspection
    "list_environment_variables",
]
