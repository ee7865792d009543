"""Tests for compose document generation."""

from pathlib import Path

import pytest
import yaml

from dbrunner.catalog import VOLUME_NAMES, DatabaseKind, entry_for
from dbrunner.store import ConfigStore

from .lib import (
    ComposeService,
    HealthCheck,
    build_compose_document,
    build_for_store,
    compose_file_path,
    render_compose,
    write_compose_file,
)

SQL_KINDS = [DatabaseKind.POSTGRESQL, DatabaseKind.MYSQL, DatabaseKind.MONGODB]


@pytest.mark.unit
class TestImageResolution:
    """Image tag precedence."""

    def test_default_tag(self) -> None:
        doc = build_compose_document(DatabaseKind.POSTGRESQL)
        assert doc.services["postgresql"].image == "postgres:18-alpine"

    def test_custom_tag(self) -> None:
        doc = build_compose_document(DatabaseKind.POSTGRESQL, image_tag="16-alpine")
        assert doc.service.image == "postgres:16-alpine"

    def test_empty_tag_uses_default(self) -> None:
        doc = build_compose_document(DatabaseKind.MONGODB, image_tag="")
        assert doc.service.image == "mongo:8"


@pytest.mark.unit
class TestEnvironment:
    """Environment section rules."""

    def test_redis_has_no_environment_section(self) -> None:
        data = build_compose_document(DatabaseKind.REDIS).to_dict()
        assert "environment" not in data["services"]["redis"]
        assert "environment" not in render_compose(build_compose_document(DatabaseKind.REDIS))

    @pytest.mark.parametrize("kind", SQL_KINDS)
    def test_other_kinds_have_catalog_environment(self, kind: DatabaseKind) -> None:
        data = build_compose_document(kind).to_dict()
        assert data["services"][kind.value]["environment"] == entry_for(kind).env_vars

    def test_postgres_credential_keys(self) -> None:
        env = build_compose_document(DatabaseKind.POSTGRESQL).service.environment
        assert set(env) == {"POSTGRES_USER", "POSTGRES_PASSWORD", "POSTGRES_DB"}

    def test_mysql_credential_keys(self) -> None:
        env = build_compose_document(DatabaseKind.MYSQL).service.environment
        assert set(env) == {
            "MYSQL_ROOT_PASSWORD", "MYSQL_DATABASE", "MYSQL_USER", "MYSQL_PASSWORD",
        }

    def test_mongodb_credential_keys(self) -> None:
        env = build_compose_document(DatabaseKind.MONGODB).service.environment
        assert set(env) == {
            "MONGO_INITDB_ROOT_USERNAME",
            "MONGO_INITDB_ROOT_PASSWORD",
            "MONGO_INITDB_DATABASE",
        }

    def test_empty_mapping_never_kept(self) -> None:
        service = ComposeService(
            image="redis:8-alpine",
            container_name="x",
            environment={},
            healthcheck=HealthCheck(test=["CMD", "true"]),
        )
        assert service.environment is None


@pytest.mark.unit
class TestVolumes:
    """Named volume vs bind mount."""

    @pytest.mark.parametrize("kind", list(DatabaseKind))
    def test_named_volume_from_table(self, kind: DatabaseKind) -> None:
        doc = build_compose_document(kind)
        name = VOLUME_NAMES[kind]
        assert doc.service.volumes == [f"{name}:{entry_for(kind).data_path}"]
        assert doc.volumes is not None
        assert list(doc.volumes) == [name]
        assert doc.volumes[name].driver == "local"

    @pytest.mark.parametrize("kind", list(DatabaseKind))
    def test_declared_volume_matches_table_exactly(self, kind: DatabaseKind) -> None:
        (declared,) = build_compose_document(kind).volumes
        assert declared == VOLUME_NAMES[kind]

    @pytest.mark.parametrize(
        "kind, stripped",
        [(DatabaseKind.POSTGRESQL, "postgre_data"), (DatabaseKind.MYSQL, "my_data")],
    )
    def test_sql_suffix_not_stripped(self, kind: DatabaseKind, stripped: str) -> None:
        (declared,) = build_compose_document(kind).volumes
        assert declared != stripped

    def test_postgres_volume_name(self) -> None:
        doc = build_compose_document(DatabaseKind.POSTGRESQL)
        assert doc.service.volumes == ["postgres_data:/var/lib/postgresql/data"]

    def test_custom_path_is_bind_mount(self, tmp_path: Path) -> None:
        doc = build_compose_document(DatabaseKind.MYSQL, volume_path=str(tmp_path))
        assert doc.service.volumes == [f"{tmp_path}:/var/lib/mysql"]
        assert doc.volumes is None
        assert "volumes" not in doc.to_dict()

    def test_empty_custom_path_uses_named_volume(self) -> None:
        doc = build_compose_document(DatabaseKind.MYSQL, volume_path="")
        assert doc.service.volumes == ["mysql_data:/var/lib/mysql"]


@pytest.mark.unit
class TestServiceFields:
    """Fixed service settings."""

    @pytest.mark.parametrize("kind", list(DatabaseKind))
    def test_fixed_fields(self, kind: DatabaseKind) -> None:
        entry = entry_for(kind)
        service = build_compose_document(kind).services[kind.value]
        assert service.container_name == entry.container_name
        assert service.ports == [f"{entry.port}:{entry.port}"]
        assert service.restart == "unless-stopped"
        assert service.healthcheck.test == list(entry.healthcheck)
        assert service.healthcheck.interval == "10s"
        assert service.healthcheck.timeout == "5s"
        assert service.healthcheck.retries == 5


@pytest.mark.unit
class TestRender:
    """YAML serialization."""

    @pytest.mark.parametrize("kind", list(DatabaseKind))
    def test_yaml_loads_back(self, kind: DatabaseKind) -> None:
        doc = build_compose_document(kind)
        assert yaml.safe_load(render_compose(doc)) == doc.to_dict()

    def test_key_order(self) -> None:
        text = render_compose(build_compose_document(DatabaseKind.POSTGRESQL))
        order = ["image:", "container_name:", "environment:", "ports:", "volumes:",
                 "restart:", "healthcheck:"]
        positions = [text.index(key) for key in order]
        assert positions == sorted(positions)
        assert text.startswith("services:")

    def test_port_stays_a_string(self) -> None:
        loaded = yaml.safe_load(render_compose(build_compose_document(DatabaseKind.REDIS)))
        assert loaded["services"]["redis"]["ports"] == ["6379:6379"]


@pytest.mark.unit
class TestFiles:
    """Compose file paths and writing."""

    def test_deterministic_path(self, tmp_path: Path) -> None:
        assert compose_file_path(DatabaseKind.MONGODB, tmp_path) == tmp_path / "dbrunner-mongodb.yml"

    def test_path_from_env(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.setenv("DBRUNNER_COMPOSE_DIR", str(tmp_path))
        assert compose_file_path(DatabaseKind.REDIS) == tmp_path / "dbrunner-redis.yml"

    def test_write_overwrites(self, tmp_path: Path) -> None:
        path = compose_file_path(DatabaseKind.REDIS, tmp_path / "nested")
        write_compose_file(build_compose_document(DatabaseKind.REDIS, image_tag="7"), path)
        write_compose_file(build_compose_document(DatabaseKind.REDIS), path)
        loaded = yaml.safe_load(path.read_text(encoding="utf-8"))
        assert loaded["services"]["redis"]["image"] == "redis:8-alpine"


@pytest.mark.unit
class TestBuildForStore:
    """Overrides flow from the store into the document."""

    def test_uses_store_overrides(self, store: ConfigStore, tmp_path: Path) -> None:
        store.set_image_tag(DatabaseKind.POSTGRESQL, "16-alpine")
        store.set_volume_path(DatabaseKind.POSTGRESQL, tmp_path)

        doc = build_for_store(DatabaseKind.POSTGRESQL, store)

        assert doc.service.image == "postgres:16-alpine"
        assert doc.service.volumes == [f"{tmp_path}:/var/lib/postgresql/data"]
        assert doc.volumes is None

    def test_defaults_without_overrides(self, store: ConfigStore) -> None:
        doc = build_for_store(DatabaseKind.REDIS, store)
        assert doc.service.image == "redis:8-alpine"
        assert doc.volumes is not None
