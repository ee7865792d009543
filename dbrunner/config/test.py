"""Tests for dbrunner.config: settings resolution and config paths."""

import sys
import tempfile
from pathlib import Path

import pytest

from .lib import (
    EnvConfig,
    EnvVar,
    get_compose_dir,
    get_config_dir,
    get_config_file,
    get_environment,
    get_environment_info,
    list_environment_variables,
)

# =============================================================================
# Settings resolution
# =============================================================================


class TestGetEnvironment:
    """Override, environment and default precedence."""

    @pytest.mark.unit
    def test_returns_default_when_not_set(self, monkeypatch):
        """Unset variable yields the declared default."""
        monkeypatch.delenv("DBRUNNER_LOG_TAIL", raising=False)
        assert get_environment(EnvVar.LOG_TAIL) == 100

    @pytest.mark.unit
    def test_override_takes_priority(self, monkeypatch):
        """Explicit override ignores the environment."""
        monkeypatch.setenv("DBRUNNER_LOG_TAIL", "9999")
        assert get_environment(EnvVar.LOG_TAIL, override=5) == 5

    @pytest.mark.unit
    def test_env_var_overrides_default(self, monkeypatch):
        """A set variable beats the declared default."""
        monkeypatch.setenv("DBRUNNER_LOG_TAIL", "250")
        result = get_environment(EnvVar.LOG_TAIL)
        assert result == 250
        assert isinstance(result, int)

    @pytest.mark.unit
    def test_invalid_int_returns_default(self, monkeypatch):
        """Non-numeric LOG_TAIL falls back to 100."""
        monkeypatch.setenv("DBRUNNER_LOG_TAIL", "lots")
        assert get_environment(EnvVar.LOG_TAIL) == 100

    @pytest.mark.unit
    def test_string_type(self, monkeypatch):
        """String settings are returned unchanged."""
        monkeypatch.setenv("DBRUNNER_DOCKER_BIN", "podman")
        assert get_environment(EnvVar.DOCKER_BIN) == "podman"

    @pytest.mark.unit
    def test_empty_value_uses_default(self, monkeypatch):
        """An exported but empty variable falls back to the default."""
        monkeypatch.setenv("DBRUNNER_DOCKER_BIN", "")
        assert get_environment(EnvVar.DOCKER_BIN) == "docker"

    @pytest.mark.unit
    def test_path_type(self, monkeypatch, tmp_path):
        """Path variables are converted to Path."""
        monkeypatch.setenv("DBRUNNER_CONFIG_DIR", str(tmp_path))
        result = get_environment(EnvVar.CONFIG_DIR)
        assert isinstance(result, Path)
        assert result == tmp_path


class TestGetEnvironmentInfo:
    """get_environment_info()."""

    @pytest.mark.unit
    def test_returns_env_config(self):
        """Metadata is the declared EnvConfig."""
        info = get_environment_info(EnvVar.LOG_TAIL)
        assert isinstance(info, EnvConfig)
        assert info.name == "DBRUNNER_LOG_TAIL"
        assert info.default == 100
        assert info.var_type is int
        assert info.category == "docker"

    @pytest.mark.unit
    def test_all_names_are_prefixed(self):
        """Every variable lives under the DBRUNNER_ namespace."""
        for var in EnvVar:
            assert var.value.name.startswith("DBRUNNER_")


class TestListEnvironmentVariables:
    """list_environment_variables() and categories."""

    @pytest.mark.unit
    def test_list_all(self):
        assert list_environment_variables() == list(EnvVar)

    @pytest.mark.unit
    def test_filter_by_category(self):
        path_vars = list_environment_variables("paths")
        assert EnvVar.CONFIG_DIR in path_vars
        assert EnvVar.COMPOSE_DIR in path_vars
        assert EnvVar.DOCKER_BIN not in path_vars

    @pytest.mark.unit
    def test_unknown_category_is_empty(self):
        assert list_environment_variables("nope") == []


# =============================================================================
# Tests for path resolution
# =============================================================================


class TestConfigPaths:
    """Tests for config and compose directory resolution."""

    @pytest.mark.unit
    def test_override_wins(self, monkeypatch, tmp_path):
        monkeypatch.setenv("DBRUNNER_CONFIG_DIR", "/somewhere/else")
        assert get_config_dir(tmp_path) == tmp_path

    @pytest.mark.unit
    def test_env_var_used(self, monkeypatch, tmp_path):
        monkeypatch.setenv("DBRUNNER_CONFIG_DIR", str(tmp_path))
        assert get_config_file() == tmp_path / "config.json"

    @pytest.mark.unit
    def test_xdg_config_home_on_linux(self, monkeypatch, tmp_path):
        monkeypatch.delenv("DBRUNNER_CONFIG_DIR", raising=False)
        monkeypatch.setattr(sys, "platform", "linux")
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
        assert get_config_dir() == tmp_path / "dbrunner"

    @pytest.mark.unit
    def test_appdata_on_windows(self, monkeypatch, tmp_path):
        monkeypatch.delenv("DBRUNNER_CONFIG_DIR", raising=False)
        monkeypatch.setattr(sys, "platform", "win32")
        monkeypatch.setenv("APPDATA", str(tmp_path))
        assert get_config_dir() == tmp_path / "dbrunner"

    @pytest.mark.unit
    def test_compose_dir_defaults_to_tempdir(self, monkeypatch):
        monkeypatch.delenv("DBRUNNER_COMPOSE_DIR", raising=False)
        assert get_compose_dir() == Path(tempfile.gettempdir())

    @pytest.mark.unit
    def test_compose_dir_from_env(self, monkeypatch, tmp_path):
        monkeypatch.setenv("DBRUNNER_COMPOSE_DIR", str(tmp_path))
        assert get_compose_dir() == tmp_path
