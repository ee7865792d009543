"""Docker CLI invocation helpers.

Builds `docker compose`, `docker ps` and `docker logs` command lines and runs
them with captured output. Non-zero exits become exceptions carrying the
runtime's stderr so callers can show it verbatim.
"""

import logging
import subprocess
from pathlib import Path

from dbrunner.config import EnvVar, get_environment
from dbrunner.core import DBRunnerError

logger = logging.getLogger(__name__)

STATUS_RUNNING = "running"
STATUS_STOPPED = "stopped"


class ExternalCommandFailed(DBRunnerError):
    """The container runtime exited with a non-zero status.

    Attributes:
        command: The command line that was run.
        returncode: Exit status.
        stderr: Captured standard error, unmodified.
    """

    def __init__(self, command: list[str], returncode: int, stderr: str = ""):
        detail = stderr.strip() or f"{' '.join(command)} exited with status {returncode}"
        super().__init__(detail)
        self.command = command
        self.returncode = returncode
        self.stderr = stderr


class StatusUnknownError(DBRunnerError):
    """The runtime could not report a container's state."""


# =============================================================================
# Command Builders
# =============================================================================


def build_compose_command(
    command: list[str],
    project: str,
    compose_file: Path | None = None,
    docker_bin: str = "docker",
) -> list[str]:
    """Build a docker compose command.

    Args:
        command: Compose subcommand and arguments (e.g. ["up", "-d"]).
        project: Compose project name.
        compose_file: Compose file to pass with -f, if any.
        docker_bin: Runtime CLI binary.

    Returns:
        Complete command as list of strings.
    """
    args = [docker_bin, "compose", "-p", project]
    if compose_file is not None:
        args.extend(["-f", str(compose_file)])
    args.extend(command)
    return args


def build_status_command(container: str, docker_bin: str = "docker") -> list[str]:
    """Build a `docker ps` query for one container's status line."""
    return [
        docker_bin,
        "ps",
        "-a",
        "--filter",
        f"name=^{container}$",
        "--format",
        "{{.Status}}",
    ]


def build_logs_command(container: str, tail_lines: int, docker_bin: str = "docker") -> list[str]:
    """Build a `docker logs --tail` command."""
    return [docker_bin, "logs", "--tail", str(tail_lines), container]


def parse_status_output(stdout: str) -> str:
    """Map `docker ps --format {{.Status}}` output to running/stopped."""
    if "Up" in stdout:
        return STATUS_RUNNING
    return STATUS_STOPPED


# =============================================================================
# Client
# =============================================================================


class DockerClient:
    """Thin wrapper over the docker CLI.

    Attributes:
        docker_bin: Runtime binary, from DBRUNNER_DOCKER_BIN by default.
    """

    def __init__(self, docker_bin: str | None = None):
        self.docker_bin: str = get_environment(EnvVar.DOCKER_BIN, override=docker_bin)

    def _run(self, args: list[str]) -> subprocess.CompletedProcess:
        """Run a command with captured text output.

        Raises:
            OSError: If the binary cannot be executed.
        """
        logger.info(f"Running: {' '.join(args)}")
        return subprocess.run(
            args,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
        )

    def _run_checked(self, args: list[str]) -> subprocess.CompletedProcess:
        result = self._run(args)
        if result.returncode != 0:
            logger.error(f"Command failed ({result.returncode}): {result.stderr.strip()}")
            raise ExternalCommandFailed(args, result.returncode, result.stderr or "")
        return result

    def compose_up(self, compose_file: Path, project: str) -> subprocess.CompletedProcess:
        """Bring a compose file up in detached mode.

        Raises:
            ExternalCommandFailed: On non-zero exit.
            OSError: If docker cannot be executed.
        """
        args = build_compose_command(["up", "-d"], project, compose_file, self.docker_bin)
        return self._run_checked(args)

    def compose_down(
        self, project: str, compose_file: Path | None = None
    ) -> subprocess.CompletedProcess:
        """Bring a compose project down.

        The project name is enough to find the containers, so the compose file
        is optional.

        Raises:
            ExternalCommandFailed: On non-zero exit.
            OSError: If docker cannot be executed.
        """
        args = build_compose_command(["down"], project, compose_file, self.docker_bin)
        return self._run_checked(args)

    def container_status(self, container: str) -> str:
        """Return "running" or "stopped" for a container name.

        Raises:
            StatusUnknownError: If the runtime could not be queried.
        """
        args = build_status_command(container, self.docker_bin)
        try:
            result = self._run(args)
        except OSError as e:
            raise StatusUnknownError(f"Failed to query {container}: {e}") from e

        if result.returncode != 0:
            raise StatusUnknownError(
                f"Failed to query {container}: {(result.stderr or '').strip()}"
            )
        return parse_status_output(result.stdout or "")

    def container_logs(self, container: str, tail_lines: int) -> str:
        """Return the last lines of a container's output.

        Docker writes container stderr to its own stderr, so both streams are
        combined, stderr first.

        Raises:
            ExternalCommandFailed: If the container does not exist.
            OSError: If docker cannot be executed.
        """
        result = self._run_checked(build_logs_command(container, tail_lines, self.docker_bin))
        parts = [part for part in (result.stderr, result.stdout) if part]
        return "\n".join(parts)


__all__ = [
    "STATUS_RUNNING",
    "STATUS_STOPPED",
    "ExternalCommandFailed",
    "StatusUnknownError",
    "DockerClient",
    "build_compose_command",
    "build_status_command",
    "build_logs_command",
    "parse_status_output",
]
