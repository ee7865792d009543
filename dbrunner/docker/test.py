"""Tests for docker CLI helpers."""

from pathlib import Path

import pytest

from .exec import (
    DockerClient,
    ExternalCommandFailed,
    StatusUnknownError,
    build_compose_command,
    build_logs_command,
    build_status_command,
    parse_status_output,
)


@pytest.mark.unit
class TestCommandBuilders:
    """Command line construction."""

    def test_compose_up(self) -> None:
        args = build_compose_command(["up", "-d"], "dbrunner-redis", Path("/tmp/x.yml"))
        assert args == [
            "docker", "compose", "-p", "dbrunner-redis", "-f", "/tmp/x.yml", "up", "-d",
        ]

    def test_compose_without_file(self) -> None:
        args = build_compose_command(["down"], "dbrunner-redis")
        assert args == ["docker", "compose", "-p", "dbrunner-redis", "down"]

    def test_custom_binary(self) -> None:
        assert build_compose_command(["down"], "p", docker_bin="podman")[0] == "podman"

    def test_status(self) -> None:
        args = build_status_command("dbrunner-redis")
        assert args[:3] == ["docker", "ps", "-a"]
        assert "name=^dbrunner-redis$" in args
        assert args[-1] == "{{.Status}}"

    def test_logs(self) -> None:
        assert build_logs_command("dbrunner-mysql", 50) == [
            "docker", "logs", "--tail", "50", "dbrunner-mysql",
        ]


@pytest.mark.unit
class TestParseStatus:
    """Status line interpretation."""

    @pytest.mark.parametrize(
        "output, expected",
        [
            ("Up 3 minutes (healthy)\n", "running"),
            ("Up Less than a second", "running"),
            ("Exited (0) 2 hours ago", "stopped"),
            ("Created", "stopped"),
            ("", "stopped"),
        ],
    )
    def test_parse(self, output: str, expected: str) -> None:
        assert parse_status_output(output) == expected


@pytest.mark.unit
class TestDockerClient:
    """Client behavior against a fake docker binary."""

    def test_binary_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DBRUNNER_DOCKER_BIN", "podman")
        assert DockerClient().docker_bin == "podman"

    def test_explicit_binary_wins(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DBRUNNER_DOCKER_BIN", "podman")
        assert DockerClient("nerdctl").docker_bin == "nerdctl"

    def test_compose_up_success(self, fake_docker, tmp_path: Path) -> None:
        DockerClient().compose_up(tmp_path / "c.yml", "dbrunner-redis")
        assert fake_docker.calls[-1][-2:] == ["up", "-d"]

    def test_compose_up_failure_keeps_stderr(self, fake_docker, tmp_path: Path) -> None:
        fake_docker.respond("up", returncode=1, stderr="pull access denied\n")
        with pytest.raises(ExternalCommandFailed) as exc_info:
            DockerClient().compose_up(tmp_path / "c.yml", "dbrunner-redis")
        assert exc_info.value.stderr == "pull access denied\n"
        assert exc_info.value.returncode == 1
        assert str(exc_info.value) == "pull access denied"

    def test_failure_without_stderr_has_message(self, fake_docker) -> None:
        fake_docker.respond("down", returncode=3)
        with pytest.raises(ExternalCommandFailed, match="exited with status 3"):
            DockerClient().compose_down("dbrunner-redis")

    def test_status_running(self, fake_docker) -> None:
        fake_docker.respond("ps", stdout="Up 5 seconds (health: starting)\n")
        assert DockerClient().container_status("dbrunner-redis") == "running"

    def test_status_query_failure(self, fake_docker) -> None:
        fake_docker.respond("ps", returncode=1, stderr="Cannot connect to the Docker daemon")
        with pytest.raises(StatusUnknownError, match="Cannot connect"):
            DockerClient().container_status("dbrunner-redis")

    def test_status_missing_binary(self, fake_docker) -> None:
        fake_docker.raise_on("ps", FileNotFoundError("docker"))
        with pytest.raises(StatusUnknownError):
            DockerClient().container_status("dbrunner-redis")

    def test_logs_combines_streams(self, fake_docker) -> None:
        fake_docker.respond("logs", stdout="ready to accept connections", stderr="warning: x")
        assert DockerClient().container_logs("dbrunner-redis", 10) == (
            "warning: x\nready to accept connections"
        )

    def test_logs_missing_binary_propagates(self, fake_docker) -> None:
        fake_docker.raise_on("logs", FileNotFoundError("docker"))
        with pytest.raises(OSError):
            DockerClient().container_logs("dbrunner-redis", 10)
