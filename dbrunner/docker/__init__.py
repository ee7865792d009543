"""Docker CLI helpers for dbrunner.

This module provides the command builders and client used to drive
`docker compose`, `docker ps` and `docker logs`.
"""

from .exec import (
    STATUS_RUNNING,
    STATUS_STOPPED,
    DockerClient,
    ExternalCommandFailed,
    StatusUnknownError,
    build_compose_command,
    build_logs_command,
    build_status_command,
    parse_status_output,
)

__all__ = [
    "STATUS_RUNNING",
    "STATUS_STOPPED",
    "DockerClient",
    "ExternalCommandFailed",
    "StatusUnknownError",
    "build_compose_command",
    "build_logs_command",
    "build_status_command",
    "parse_status_output",
]
