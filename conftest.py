"""Root pytest configuration and fixtures.

This module provides:
- Environment setup (loads .env, isolates DBRUNNER_* variables per test)
- A fake docker binary for exercising the runtime client without Docker
- Config store and runner fixtures
- Auto-skip for tests that need a real Docker daemon
"""

from __future__ import annotations

import shutil
import subprocess
from pathlib import Path
from typing import Callable

import pytest
from dotenv import load_dotenv

from dbrunner.config import EnvVar
from dbrunner.docker import DockerClient
from dbrunner.runner import DatabaseRunner
from dbrunner.store import ConfigStore

# Load environment variables from .env file
load_dotenv()


# =============================================================================
# Docker Availability (Private Functions)
# =============================================================================


def _is_docker_available() -> bool:
    """Check if Docker daemon is running."""
    if shutil.which("docker") is None:
        return False
    try:
        result = subprocess.run(
            ["docker", "info"],
            capture_output=True,
            timeout=5,
        )
        return result.returncode == 0
    except (subprocess.TimeoutExpired, OSError):
        return False


# =============================================================================
# Pytest Hooks
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]):
    """Auto-skip tests marked with docker when the daemon is unavailable."""
    if not any("docker" in item.keywords for item in items):
        return

    docker_available = _is_docker_available()
    skip_docker = pytest.mark.skip(reason="Docker not available")

    for item in items:
        if "docker" in item.keywords and not docker_available:
            item.add_marker(skip_docker)


# =============================================================================
# Environment Isolation
# =============================================================================


@pytest.fixture(autouse=True)
def _isolated_environment(
    monkeypatch: pytest.MonkeyPatch, tmp_path_factory: pytest.TempPathFactory
) -> None:
    """Keep tests away from the user's config and compose directories."""
    for var in EnvVar:
        monkeypatch.delenv(var.value.name, raising=False)

    sandbox = tmp_path_factory.mktemp("dbrunner-env")
    monkeypatch.setenv(EnvVar.CONFIG_DIR.value.name, str(sandbox / "config"))
    monkeypatch.setenv(EnvVar.COMPOSE_DIR.value.name, str(sandbox / "compose"))


# =============================================================================
# Fake Docker
# =============================================================================


class FakeDocker:
    """Stand-in for `subprocess.run` that records docker invocations.

    Calls are classified into actions ("up", "down", "ps", "logs") so tests
    can script the response for each one.

    Attributes:
        calls: Every argument list received, in order.
    """

    def __init__(self) -> None:
        self.calls: list[list[str]] = []
        self._handlers: dict[str, Callable[..., subprocess.CompletedProcess]] = {}

    @staticmethod
    def action_of(args: list[str]) -> str:
        if len(args) > 1 and args[1] == "compose":
            for action in ("up", "down"):
                if action in args:
                    return action
            return "compose"
        return args[1] if len(args) > 1 else ""

    @staticmethod
    def completed(
        args: list[str], returncode: int = 0, stdout: str = "", stderr: str = ""
    ) -> subprocess.CompletedProcess:
        return subprocess.CompletedProcess(args, returncode, stdout=stdout, stderr=stderr)

    def default_response(self, args: list[str]) -> subprocess.CompletedProcess:
        return self.completed(args)

    def handle(self, action: str, handler: Callable[..., subprocess.CompletedProcess]) -> None:
        """Route an action to a custom callable taking (args, **kwargs)."""
        self._handlers[action] = handler

    def respond(self, action: str, returncode: int = 0, stdout: str = "", stderr: str = "") -> None:
        """Return a fixed result for an action."""
        self.handle(
            action,
            lambda args, **kwargs: self.completed(args, returncode, stdout, stderr),
        )

    def raise_on(self, action: str, exc: BaseException) -> None:
        """Raise an exception for an action, e.g. a missing binary."""

        def _raise(args, **kwargs):
            raise exc

        self.handle(action, _raise)

    def __call__(self, args: list[str], **kwargs) -> subprocess.CompletedProcess:
        self.calls.append(list(args))
        handler = self._handlers.get(self.action_of(args))
        if handler is None:
            return self.default_response(args)
        return handler(args, **kwargs)


@pytest.fixture
def fake_docker(monkeypatch: pytest.MonkeyPatch) -> FakeDocker:
    """Replace subprocess.run in the docker client with a FakeDocker."""
    fake = FakeDocker()
    monkeypatch.setattr("dbrunner.docker.exec.subprocess.run", fake)
    return fake


# =============================================================================
# Store and Runner Fixtures
# =============================================================================


@pytest.fixture
def config_path(tmp_path: Path) -> Path:
    """Location of a not-yet-existing config file."""
    return tmp_path / "config" / "config.json"


@pytest.fixture
def store(config_path: Path) -> ConfigStore:
    return ConfigStore(config_path)


@pytest.fixture
def runner(store: ConfigStore, fake_docker: FakeDocker, tmp_path: Path) -> DatabaseRunner:
    """Runner wired to the fake docker binary and a temp compose directory."""
    return DatabaseRunner(store, DockerClient(), compose_dir=tmp_path / "compose")
