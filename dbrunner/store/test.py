"""Tests for the user config store."""

import json
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from unittest.mock import patch

import pytest

from dbrunner.catalog import DatabaseKind

from .lib import (
    ConfigCorruptError,
    ConfigSaveError,
    ConfigStore,
    InvalidTagError,
    PathNotFoundError,
    read_config,
    validate_tag,
)
from .models import UserConfig


def _read_json(path: Path) -> dict:
    return json.loads(path.read_text(encoding="utf-8"))


# =============================================================================
# Model
# =============================================================================


@pytest.mark.unit
class TestUserConfig:
    """Schema tolerance of the persisted document."""

    def test_defaults_are_empty(self) -> None:
        config = UserConfig()
        assert config.volume_paths == {}
        assert config.image_tags == {}

    def test_missing_image_tags_defaults_to_empty(self) -> None:
        config = UserConfig.model_validate_json('{"volume_paths": {"redis": "/data"}}')
        assert config.image_tags == {}
        assert config.volume_path("redis") == "/data"

    def test_unknown_keys_ignored(self) -> None:
        config = UserConfig.model_validate({"theme": "dark", "image_tags": {}})
        assert not hasattr(config, "theme")

    def test_empty_values_read_as_unset(self) -> None:
        config = UserConfig(volume_paths={"mysql": ""}, image_tags={"mysql": ""})
        assert config.volume_path("mysql") is None
        assert config.image_tag("mysql") is None


# =============================================================================
# Loading
# =============================================================================


@pytest.mark.unit
class TestLoad:
    """Loading behavior, including recovery from bad files."""

    def test_missing_file_gives_defaults(self, config_path: Path) -> None:
        store = ConfigStore(config_path)
        assert store.load() == UserConfig()
        assert store.take_load_error() is None
        assert not config_path.exists()

    def test_reads_existing_file(self, config_path: Path) -> None:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        config_path.write_text(
            json.dumps({"volume_paths": {}, "image_tags": {"redis": "7"}}),
            encoding="utf-8",
        )
        store = ConfigStore(config_path)
        assert store.get_image_tag(DatabaseKind.REDIS) == "7"

    def test_corrupt_json_falls_back_and_reports_once(self, config_path: Path) -> None:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        config_path.write_text("{not json", encoding="utf-8")
        store = ConfigStore(config_path)

        assert store.load() == UserConfig()
        error = store.take_load_error()
        assert isinstance(error, ConfigCorruptError)
        assert error.path == config_path
        assert store.take_load_error() is None

    def test_schema_mismatch_is_corrupt(self, config_path: Path) -> None:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        config_path.write_text('{"volume_paths": ["/a", "/b"]}', encoding="utf-8")
        with pytest.raises(ConfigCorruptError):
            read_config(config_path)

    def test_top_level_array_is_corrupt(self, config_path: Path) -> None:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        config_path.write_text("[]", encoding="utf-8")
        with pytest.raises(ConfigCorruptError):
            read_config(config_path)

    def test_invalid_utf8_falls_back_and_reports_once(self, config_path: Path) -> None:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        config_path.write_bytes(b'{"image_tags": {"redis": "\xff\xfe"}}')
        store = ConfigStore(config_path)

        assert store.get_image_tag(DatabaseKind.REDIS) is None
        assert isinstance(store.take_load_error(), ConfigCorruptError)
        assert store.take_load_error() is None
        assert store.set_image_tag(DatabaseKind.REDIS, "7") == "7"

    def test_file_read_only_once(self, config_path: Path) -> None:
        store = ConfigStore(config_path)
        with patch("dbrunner.store.lib.read_config", wraps=read_config) as spy:
            store.get_image_tag("redis")
            store.get_volume_path("redis")
            store.load()
        assert spy.call_count == 1

    def test_load_returns_copy(self, store: ConfigStore) -> None:
        snapshot = store.load()
        snapshot.image_tags["redis"] = "hacked"
        assert store.get_image_tag(DatabaseKind.REDIS) is None


# =============================================================================
# Image tags
# =============================================================================


@pytest.mark.unit
class TestImageTags:
    """Tag overrides and validation."""

    def test_round_trip(self, store: ConfigStore) -> None:
        assert store.set_image_tag(DatabaseKind.POSTGRESQL, "16-alpine") == "16-alpine"
        assert store.get_image_tag(DatabaseKind.POSTGRESQL) == "16-alpine"
        assert store.resolve_image(DatabaseKind.POSTGRESQL) == "postgres:16-alpine"

    def test_empty_reverts_to_default(self, store: ConfigStore) -> None:
        store.set_image_tag(DatabaseKind.POSTGRESQL, "16-alpine")
        assert store.set_image_tag(DatabaseKind.POSTGRESQL, "") is None
        assert store.get_image_tag(DatabaseKind.POSTGRESQL) is None
        assert store.resolve_image(DatabaseKind.POSTGRESQL) == "postgres:18-alpine"
        assert "postgresql" not in _read_json(store.path)["image_tags"]

    def test_whitespace_is_trimmed(self, store: ConfigStore) -> None:
        assert store.set_image_tag("redis", "  7.2  ") == "7.2"
        assert store.get_image_tag("redis") == "7.2"

    def test_whitespace_only_reverts(self, store: ConfigStore) -> None:
        store.set_image_tag("redis", "7.2")
        assert store.set_image_tag("redis", "   ") is None
        assert store.get_image_tag("redis") is None

    @pytest.mark.parametrize("tag", ["postgres:16", "library/postgres", "a" * 101])
    def test_invalid_tags_rejected(self, store: ConfigStore, tag: str) -> None:
        store.set_image_tag(DatabaseKind.POSTGRESQL, "15")
        before = store.path.read_text(encoding="utf-8")

        with pytest.raises(InvalidTagError):
            store.set_image_tag(DatabaseKind.POSTGRESQL, tag)

        assert store.get_image_tag(DatabaseKind.POSTGRESQL) == "15"
        assert store.path.read_text(encoding="utf-8") == before

    def test_max_length_accepted(self) -> None:
        validate_tag("a" * 100)

    def test_accepts_display_names(self, store: ConfigStore) -> None:
        store.set_image_tag("MongoDB", "7")
        assert store.get_image_tag(DatabaseKind.MONGODB) == "7"
        assert _read_json(store.path)["image_tags"] == {"mongodb": "7"}


# =============================================================================
# Volume paths
# =============================================================================


@pytest.mark.unit
class TestVolumePaths:
    """Volume path overrides and validation."""

    def test_set_existing_path(self, store: ConfigStore, tmp_path: Path) -> None:
        data_dir = tmp_path / "pgdata"
        data_dir.mkdir()
        assert store.set_volume_path(DatabaseKind.POSTGRESQL, str(data_dir)) == str(data_dir)
        assert store.get_volume_path(DatabaseKind.POSTGRESQL) == str(data_dir)
        assert _read_json(store.path)["volume_paths"] == {"postgresql": str(data_dir)}

    def test_nonexistent_path_rejected(self, store: ConfigStore, tmp_path: Path) -> None:
        data_dir = tmp_path / "existing"
        data_dir.mkdir()
        store.set_volume_path(DatabaseKind.MYSQL, data_dir)

        with pytest.raises(PathNotFoundError) as exc_info:
            store.set_volume_path(DatabaseKind.MYSQL, "/nonexistent/xyz")

        assert exc_info.value.path == "/nonexistent/xyz"
        assert "Path does not exist" in str(exc_info.value)
        assert store.get_volume_path(DatabaseKind.MYSQL) == str(data_dir)

    def test_empty_path_clears_key(self, store: ConfigStore, tmp_path: Path) -> None:
        store.set_volume_path(DatabaseKind.REDIS, tmp_path)
        assert store.set_volume_path(DatabaseKind.REDIS, "") is None
        assert store.get_volume_path(DatabaseKind.REDIS) is None
        assert _read_json(store.path)["volume_paths"] == {}

    def test_relative_path_made_absolute(
        self, store: ConfigStore, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        (tmp_path / "rel").mkdir()
        monkeypatch.chdir(tmp_path)
        stored = store.set_volume_path(DatabaseKind.REDIS, "rel")
        assert stored is not None
        assert Path(stored).is_absolute()
        assert Path(stored) == tmp_path / "rel"

    def test_unknown_home_directory_rejected(self, store: ConfigStore) -> None:
        with pytest.raises(PathNotFoundError) as exc_info:
            store.set_volume_path(DatabaseKind.POSTGRESQL, "~nosuchuser_dbrunner/data")
        assert exc_info.value.path == "~nosuchuser_dbrunner/data"
        assert store.get_volume_path(DatabaseKind.POSTGRESQL) is None


# =============================================================================
# Persistence
# =============================================================================


@pytest.mark.unit
class TestPersistence:
    """Write-through and failure handling."""

    def test_new_store_sees_previous_writes(self, config_path: Path, tmp_path: Path) -> None:
        first = ConfigStore(config_path)
        first.set_image_tag(DatabaseKind.MYSQL, "8.4")
        first.set_volume_path(DatabaseKind.MYSQL, tmp_path)

        second = ConfigStore(config_path)
        assert second.get_image_tag(DatabaseKind.MYSQL) == "8.4"
        assert second.get_volume_path(DatabaseKind.MYSQL) == str(tmp_path)

    def test_mutation_overwrites_corrupt_file(self, config_path: Path) -> None:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        config_path.write_text("garbage", encoding="utf-8")
        store = ConfigStore(config_path)
        store.set_image_tag("redis", "7")
        assert _read_json(config_path) == {"volume_paths": {}, "image_tags": {"redis": "7"}}

    def test_save_failure_leaves_cache_unchanged(self, tmp_path: Path) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory", encoding="utf-8")
        store = ConfigStore(blocker / "config.json")

        with pytest.raises(ConfigSaveError):
            store.set_image_tag(DatabaseKind.REDIS, "7")

        assert store.get_image_tag(DatabaseKind.REDIS) is None

    def test_concurrent_writers_all_persist(self, store: ConfigStore) -> None:
        tags = {kind: f"{i + 1}" for i, kind in enumerate(DatabaseKind)}
        with ThreadPoolExecutor(max_workers=4) as pool:
            list(pool.map(lambda kind: store.set_image_tag(kind, tags[kind]), tags))

        on_disk = _read_json(store.path)["image_tags"]
        assert on_disk == {kind.value: tag for kind, tag in tags.items()}

    def test_failed_replace_keeps_previous_file(
        self, store: ConfigStore, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        store.set_image_tag(DatabaseKind.REDIS, "7")
        before = store.path.read_text(encoding="utf-8")

        def refuse(src, dst):
            raise OSError("disk full")

        monkeypatch.setattr("dbrunner.store.lib.os.replace", refuse)
        with pytest.raises(ConfigSaveError, match="disk full"):
            store.set_image_tag(DatabaseKind.REDIS, "8")

        assert store.path.read_text(encoding="utf-8") == before
        assert store.get_image_tag(DatabaseKind.REDIS) == "7"
        assert [p.name for p in store.path.parent.iterdir()] == [store.path.name]
