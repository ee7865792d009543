"""Database lifecycle orchestration for dbrunner.

`DatabaseRunner` is the API a front-end talks to: it combines the catalog,
the user's overrides and the docker client to list, start, stop and inspect
databases. Every mutating call returns a `CommandResult` whose message is
meant to be shown to the user as-is.

Example:
    >>> runner = DatabaseRunner.default()
    >>> result = runner.start("postgresql")
    >>> print(result.message)
    PostgreSQL started successfully
"""

from __future__ import annotations

import logging
import threading
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Callable

from dbrunner.catalog import DatabaseKind, entry_for, list_kinds, project_name
from dbrunner.compose import (
    build_for_store,
    compose_file_path,
    render_compose,
    write_compose_file,
)
from dbrunner.config import EnvVar, get_environment
from dbrunner.connection import ConnectionDescriptor, describe
from dbrunner.docker import (
    STATUS_STOPPED,
    DockerClient,
    ExternalCommandFailed,
    StatusUnknownError,
)
from dbrunner.store import (
    ConfigSaveError,
    ConfigStore,
    InvalidTagError,
    PathNotFoundError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommandResult:
    """Outcome of a user-triggered operation."""

    success: bool
    message: str

    @classmethod
    def ok(cls, message: str) -> "CommandResult":
        return cls(True, message)

    @classmethod
    def fail(cls, message: str) -> "CommandResult":
        return cls(False, message)


@dataclass
class DatabaseInfo:
    """One row of the database overview.

    Attributes:
        kind: Database kind.
        name: Display name.
        status: "running" or "stopped".
        port: Published port.
        image: Resolved image reference.
        volume_path: Custom host volume path, if configured.
    """

    kind: DatabaseKind
    name: str
    status: str
    port: int
    image: str
    volume_path: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["kind"] = self.kind.value
        if self.volume_path is None:
            del data["volume_path"]
        return data


class DatabaseRunner:
    """Start, stop and inspect database containers.

    Start and stop hold a per-kind guard: a second call for the same database
    while one is in flight is rejected, while different databases can run
    concurrently.

    Attributes:
        store: User overrides.
        docker: Container runtime client.
        compose_dir: Directory for generated compose files (None: default).
    """

    def __init__(
        self,
        store: ConfigStore,
        docker: DockerClient | None = None,
        compose_dir: Path | str | None = None,
    ):
        self.store = store
        self.docker = docker or DockerClient()
        self.compose_dir = compose_dir
        self._in_flight = {kind: threading.Lock() for kind in DatabaseKind}

    @classmethod
    def default(cls) -> "DatabaseRunner":
        """Runner using the platform config file and the docker CLI."""
        return cls(ConfigStore.default())

    # ---- Helpers -------------------------------------------------------------

    def compose_path(self, kind: DatabaseKind) -> Path:
        return compose_file_path(kind, self.compose_dir)

    def _guarded(self, kind: DatabaseKind, action: Callable[[], CommandResult]) -> CommandResult:
        guard = self._in_flight[kind]
        if not guard.acquire(blocking=False):
            name = entry_for(kind).display_name
            return CommandResult.fail(f"{name} already has an operation in progress")
        try:
            return action()
        finally:
            guard.release()

    def take_config_warning(self) -> str | None:
        """Message for a config file that failed to load, reported once."""
        error = self.store.take_load_error()
        return str(error) if error else None

    # ---- Overview ------------------------------------------------------------

    def list_databases(self) -> list[DatabaseInfo]:
        """All databases with resolved image, port, volume and live status."""
        rows = []
        for kind in list_kinds():
            entry = entry_for(kind)
            rows.append(
                DatabaseInfo(
                    kind=kind,
                    name=entry.display_name,
                    status=self.status(kind),
                    port=entry.port,
                    image=self.store.resolve_image(kind),
                    volume_path=self.store.get_volume_path(kind),
                )
            )
        return rows

    # ---- Lifecycle -----------------------------------------------------------

    def start(self, kind: DatabaseKind | str) -> CommandResult:
        """Generate the compose file and bring the database up detached."""
        try:
            kind = DatabaseKind.from_name(kind)
        except ValueError:
            return CommandResult.fail(f"Unknown database: {kind}")
        return self._guarded(kind, lambda: self._start(kind))

    def _start(self, kind: DatabaseKind) -> CommandResult:
        name = entry_for(kind).display_name
        document = build_for_store(kind, self.store)
        path = self.compose_path(kind)

        try:
            write_compose_file(document, path)
        except OSError as e:
            logger.error(f"Failed to write {path}: {e}")
            return CommandResult.fail(f"Failed to create compose file: {e}")

        try:
            self.docker.compose_up(path, project_name(kind))
        except ExternalCommandFailed as e:
            return CommandResult.fail(e.stderr or str(e))
        except OSError as e:
            logger.error(f"Failed to run docker: {e}")
            return CommandResult.fail(f"Failed to start database: {e}")

        logger.info(f"{name} started using {path}")
        return CommandResult.ok(f"{name} started successfully")

    def stop(self, kind: DatabaseKind | str) -> CommandResult:
        """Bring the database down. Stopping a stopped database succeeds."""
        try:
            kind = DatabaseKind.from_name(kind)
        except ValueError:
            return CommandResult.fail(f"Unknown database: {kind}")
        return self._guarded(kind, lambda: self._stop(kind))

    def _stop(self, kind: DatabaseKind) -> CommandResult:
        name = entry_for(kind).display_name
        path = self.compose_path(kind)
        compose_file = path if path.exists() else None

        try:
            self.docker.compose_down(project_name(kind), compose_file)
        except ExternalCommandFailed as e:
            if self.status(kind) == STATUS_STOPPED:
                logger.warning(f"compose down failed for stopped {name}: {e}")
                return CommandResult.ok(f"{name} is not running")
            return CommandResult.fail(e.stderr or str(e))
        except OSError as e:
            logger.error(f"Failed to run docker: {e}")
            return CommandResult.fail(f"Failed to stop database: {e}")

        if compose_file is not None:
            try:
                compose_file.unlink(missing_ok=True)
            except OSError as e:
                logger.warning(f"Could not remove {compose_file}: {e}")

        return CommandResult.ok(f"{name} stopped successfully")

    def status(self, kind: DatabaseKind | str) -> str:
        """Return "running" or "stopped". Query failures read as stopped.

        Raises:
            ValueError: If the name is not a supported database.
        """
        kind = DatabaseKind.from_name(kind)
        container = entry_for(kind).container_name
        try:
            return self.docker.container_status(container)
        except StatusUnknownError as e:
            logger.warning(f"{e}; reporting {container} as stopped")
            return STATUS_STOPPED

    def logs(self, kind: DatabaseKind | str, tail_lines: int | None = None) -> str:
        """Last lines of container output, or an error description.

        Args:
            kind: Database kind or name.
            tail_lines: Number of lines. Defaults to DBRUNNER_LOG_TAIL.

        Raises:
            ValueError: If the name is not a supported database.
        """
        kind = DatabaseKind.from_name(kind)
        container = entry_for(kind).container_name
        tail = get_environment(EnvVar.LOG_TAIL, override=tail_lines)

        try:
            text = self.docker.container_logs(container, tail)
        except ExternalCommandFailed as e:
            return f"Container not running or not found: {e.stderr or e}"
        except OSError as e:
            return f"Failed to get logs: {e}"

        return text or "No logs available"

    # ---- Overrides -----------------------------------------------------------

    def get_volume_path(self, kind: DatabaseKind | str) -> str | None:
        return self.store.get_volume_path(kind)

    def set_volume_path(self, kind: DatabaseKind | str, path: str | None) -> CommandResult:
        """Set or clear (empty path) the host volume for a database."""
        try:
            kind = DatabaseKind.from_name(kind)
        except ValueError:
            return CommandResult.fail(f"Unknown database: {kind}")
        name = entry_for(kind).display_name

        try:
            stored = self.store.set_volume_path(kind, path)
        except PathNotFoundError as e:
            return CommandResult.fail(str(e))
        except ConfigSaveError as e:
            return CommandResult.fail(f"Failed to save config: {e}")

        if stored is None:
            return CommandResult.ok(f"Reset {name} to default volume")
        return CommandResult.ok(f"Volume path set for {name}")

    def get_image_tag(self, kind: DatabaseKind | str) -> str | None:
        return self.store.get_image_tag(kind)

    def set_image_tag(self, kind: DatabaseKind | str, tag: str | None) -> CommandResult:
        """Set or clear (empty tag) the image tag for a database."""
        try:
            kind = DatabaseKind.from_name(kind)
        except ValueError:
            return CommandResult.fail(f"Unknown database: {kind}")
        name = entry_for(kind).display_name

        try:
            stored = self.store.set_image_tag(kind, tag)
        except InvalidTagError as e:
            return CommandResult.fail(str(e))
        except ConfigSaveError as e:
            return CommandResult.fail(f"Failed to save config: {e}")

        if stored is None:
            return CommandResult.ok(f"Reset {name} to default image tag")
        return CommandResult.ok(f"Image tag set for {name}")

    # ---- Derived views -------------------------------------------------------

    def connection_info(
        self, kind: DatabaseKind | str, port: int | None = None
    ) -> ConnectionDescriptor:
        return describe(DatabaseKind.from_name(kind), port)

    def compose_preview(self, kind: DatabaseKind | str) -> str:
        """The compose YAML `start` would write, without writing it."""
        kind = DatabaseKind.from_name(kind)
        return render_compose(build_for_store(kind, self.store))


__all__ = [
    "CommandResult",
    "DatabaseInfo",
    "DatabaseRunner",
]
