"""Lifecycle tests against a real Docker daemon.

Uses Redis since it is the smallest image. Auto-skipped when Docker is not
available.
"""

import time

import pytest

from dbrunner.catalog import DatabaseKind
from dbrunner.runner import DatabaseRunner
from dbrunner.store import ConfigStore

pytestmark = [pytest.mark.integration, pytest.mark.docker]


def _wait_for(runner: DatabaseRunner, kind: DatabaseKind, expected: str, timeout: float = 60.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if runner.status(kind) == expected:
            return True
        time.sleep(1)
    return False


@pytest.fixture
def live_runner(config_path, tmp_path):
    runner = DatabaseRunner(ConfigStore(config_path), compose_dir=tmp_path / "compose")
    yield runner
    runner.stop(DatabaseKind.REDIS)


def test_redis_start_status_stop(live_runner: DatabaseRunner):
    result = live_runner.start(DatabaseKind.REDIS)
    if not result.success:
        pytest.skip(f"Could not start Redis: {result.message}")

    assert _wait_for(live_runner, DatabaseKind.REDIS, "running")
    assert live_runner.compose_path(DatabaseKind.REDIS).exists()

    assert live_runner.stop(DatabaseKind.REDIS).success
    assert live_runner.status(DatabaseKind.REDIS) == "stopped"
    assert not live_runner.compose_path(DatabaseKind.REDIS).exists()


def test_stop_is_idempotent(live_runner: DatabaseRunner):
    assert live_runner.stop(DatabaseKind.REDIS).success
    assert live_runner.stop(DatabaseKind.REDIS).success


def test_logs_for_missing_container(live_runner: DatabaseRunner):
    live_runner.stop(DatabaseKind.REDIS)
    text = live_runner.logs(DatabaseKind.REDIS, 10)
    assert text.startswith("Container not running or not found:")
