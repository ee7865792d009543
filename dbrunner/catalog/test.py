"""Tests for the database catalog."""

import pytest

from dbrunner.catalog import (
    PROJECT_PREFIX,
    VOLUME_NAMES,
    DatabaseKind,
    entry_for,
    image_ref,
    list_kinds,
    project_name,
)

EXPECTED_DEFAULTS = {
    DatabaseKind.POSTGRESQL: ("postgres", "18-alpine", 5432, "dbrunner-postgres"),
    DatabaseKind.MYSQL: ("mysql", "8.0", 3306, "dbrunner-mysql"),
    DatabaseKind.MONGODB: ("mongo", "8", 27017, "dbrunner-mongodb"),
    DatabaseKind.REDIS: ("redis", "8-alpine", 6379, "dbrunner-redis"),
}


@pytest.mark.unit
class TestCatalogConstants:
    """Project-level constants."""

    def test_project_prefix(self) -> None:
        assert PROJECT_PREFIX == "dbrunner"

    def test_project_name(self) -> None:
        assert project_name(DatabaseKind.MYSQL) == "dbrunner-mysql"


@pytest.mark.unit
class TestDatabaseKind:
    """Parsing and identity of database kinds."""

    def test_four_kinds(self) -> None:
        assert list_kinds() == [
            DatabaseKind.POSTGRESQL,
            DatabaseKind.MYSQL,
            DatabaseKind.MONGODB,
            DatabaseKind.REDIS,
        ]

    def test_values_are_lowercase_identifiers(self) -> None:
        assert [k.value for k in DatabaseKind] == [
            "postgresql", "mysql", "mongodb", "redis",
        ]

    @pytest.mark.parametrize("name", ["PostgreSQL", "postgresql", " POSTGRESQL "])
    def test_from_name_is_case_insensitive(self, name: str) -> None:
        assert DatabaseKind.from_name(name) is DatabaseKind.POSTGRESQL

    def test_from_name_passes_members_through(self) -> None:
        assert DatabaseKind.from_name(DatabaseKind.REDIS) is DatabaseKind.REDIS

    def test_from_name_unknown(self) -> None:
        with pytest.raises(ValueError, match="Unknown database"):
            DatabaseKind.from_name("oracle")

    def test_str_is_identifier(self) -> None:
        assert str(DatabaseKind.MONGODB) == "mongodb"


@pytest.mark.unit
class TestEntryFor:
    """Published defaults for every kind."""

    @pytest.mark.parametrize("kind", list(DatabaseKind))
    def test_published_defaults(self, kind: DatabaseKind) -> None:
        base, tag, port, container = EXPECTED_DEFAULTS[kind]
        entry = entry_for(kind)
        assert entry.kind is kind
        assert entry.base_image == base
        assert entry.default_tag == tag
        assert entry.port == port
        assert entry.container_name == container
        assert entry.default_image == f"{base}:{tag}"
        assert entry.port_mapping == f"{port}:{port}"

    @pytest.mark.parametrize("kind", list(DatabaseKind))
    def test_healthcheck_present(self, kind: DatabaseKind) -> None:
        healthcheck = entry_for(kind).healthcheck
        assert healthcheck
        assert healthcheck[0] in ("CMD", "CMD-SHELL")

    def test_redis_has_no_environment(self) -> None:
        assert entry_for(DatabaseKind.REDIS).env_vars == {}

    def test_postgres_environment(self) -> None:
        assert entry_for(DatabaseKind.POSTGRESQL).env_vars == {
            "POSTGRES_USER": "postgres",
            "POSTGRES_PASSWORD": "postgres",
            "POSTGRES_DB": "devdb",
        }

    def test_mysql_environment(self) -> None:
        assert entry_for(DatabaseKind.MYSQL).env_vars == {
            "MYSQL_ROOT_PASSWORD": "root",
            "MYSQL_DATABASE": "devdb",
            "MYSQL_USER": "mysql",
            "MYSQL_PASSWORD": "mysql",
        }

    def test_mongodb_environment(self) -> None:
        assert entry_for(DatabaseKind.MONGODB).env_vars == {
            "MONGO_INITDB_ROOT_USERNAME": "admin",
            "MONGO_INITDB_ROOT_PASSWORD": "admin",
            "MONGO_INITDB_DATABASE": "devdb",
        }

    def test_env_vars_returns_copy(self) -> None:
        entry = entry_for(DatabaseKind.POSTGRESQL)
        entry.env_vars["POSTGRES_DB"] = "changed"
        assert entry.env_vars["POSTGRES_DB"] == "devdb"

    def test_data_paths(self) -> None:
        assert str(entry_for(DatabaseKind.POSTGRESQL).data_path) == "/var/lib/postgresql/data"
        assert str(entry_for(DatabaseKind.MYSQL).data_path) == "/var/lib/mysql"
        assert str(entry_for(DatabaseKind.MONGODB).data_path) == "/data/db"
        assert str(entry_for(DatabaseKind.REDIS).data_path) == "/data"

    def test_entries_are_frozen(self) -> None:
        entry = entry_for(DatabaseKind.REDIS)
        with pytest.raises(AttributeError):
            entry.port = 1  # type: ignore[misc]


@pytest.mark.unit
class TestVolumeNames:
    """Named volumes come from the explicit table."""

    def test_table(self) -> None:
        assert VOLUME_NAMES == {
            DatabaseKind.POSTGRESQL: "postgres_data",
            DatabaseKind.MYSQL: "mysql_data",
            DatabaseKind.MONGODB: "mongodb_data",
            DatabaseKind.REDIS: "redis_data",
        }

    @pytest.mark.parametrize("kind", list(DatabaseKind))
    def test_entry_uses_table(self, kind: DatabaseKind) -> None:
        assert entry_for(kind).volume_name == VOLUME_NAMES[kind]

    def test_not_derived_by_stripping_sql(self) -> None:
        # "postgresql".replace("sql", "") == "postgre", "mysql" -> "my"
        assert entry_for(DatabaseKind.POSTGRESQL).volume_name != "postgre_data"
        assert entry_for(DatabaseKind.MYSQL).volume_name != "my_data"


@pytest.mark.unit
class TestImageRef:
    """Image reference composition."""

    def test_default_tag(self) -> None:
        assert image_ref(DatabaseKind.POSTGRESQL) == "postgres:18-alpine"

    def test_custom_tag(self) -> None:
        assert image_ref(DatabaseKind.POSTGRESQL, "16-alpine") == "postgres:16-alpine"

    @pytest.mark.parametrize("tag", ["", "   ", None])
    def test_blank_tag_uses_default(self, tag) -> None:
        assert image_ref(DatabaseKind.REDIS, tag) == "redis:8-alpine"
