"""Built-in database catalog for dbrunner.

Every supported database kind has exactly one `CatalogEntry` describing how
its container is created: image, default tag, published port, environment,
health check and data directory. The table is compiled in and never mutated.

Naming Convention:
    Project prefix: dbrunner-

    Containers:
        dbrunner-postgres      - PostgreSQL
        dbrunner-mysql         - MySQL
        dbrunner-mongodb       - MongoDB
        dbrunner-redis         - Redis

    Named volumes:
        postgres_data, mysql_data, mongodb_data, redis_data
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import PurePosixPath

__all__ = [
    # Project configuration
    "PROJECT_PREFIX",
    "RESTART_POLICY",
    "HEALTHCHECK_INTERVAL",
    "HEALTHCHECK_TIMEOUT",
    "HEALTHCHECK_RETRIES",
    # Kinds
    "DatabaseKind",
    "CatalogEntry",
    "VOLUME_NAMES",
    "entry_for",
    "list_kinds",
    "image_ref",
    "project_name",
]

# =============================================================================
# Project-Level Configuration
# =============================================================================

PROJECT_PREFIX: str = "dbrunner"
RESTART_POLICY: str = "unless-stopped"
HEALTHCHECK_INTERVAL: str = "10s"
HEALTHCHECK_TIMEOUT: str = "5s"
HEALTHCHECK_RETRIES: int = 5


# =============================================================================
# Database Kinds
# =============================================================================


class DatabaseKind(str, Enum):
    """Supported database engines.

    The value is the lowercase identifier used as the key in the persisted
    config file and as the compose service name.
    """

    POSTGRESQL = "postgresql"
    MYSQL = "mysql"
    MONGODB = "mongodb"
    REDIS = "redis"

    @classmethod
    def from_name(cls, name: "str | DatabaseKind") -> "DatabaseKind":
        """Parse an identifier or display name, case-insensitively.

        Raises:
            ValueError: If the name is not a supported database.
        """
        if isinstance(name, cls):
            return name
        key = str(name).strip().lower()
        for kind in cls:
            if kind.value == key:
                return kind
        supported = ", ".join(kind.value for kind in cls)
        raise ValueError(f"Unknown database: {name}. Supported: {supported}")

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class CatalogEntry:
    """Defaults for one database kind.

    Attributes:
        kind: The database kind this entry describes.
        display_name: Human-readable name (e.g., PostgreSQL).
        base_image: Registry image name without a tag.
        default_tag: Tag used when the user has not chosen one.
        container_name: Fixed container name.
        port: Published port; the same number is used inside the container.
        environment: Ordered environment pairs (empty for Redis).
        healthcheck: Compose healthcheck `test` command.
        data_path: Data directory inside the container.
        volume_name: Named volume used when no host path is configured.
    """

    kind: DatabaseKind
    display_name: str
    base_image: str
    default_tag: str
    container_name: str
    port: int
    environment: tuple[tuple[str, str], ...]
    healthcheck: tuple[str, ...]
    data_path: PurePosixPath
    volume_name: str

    @property
    def default_image(self) -> str:
        """Image reference with the default tag."""
        return f"{self.base_image}:{self.default_tag}"

    @property
    def env_vars(self) -> dict[str, str]:
        """Environment as a fresh dict."""
        return dict(self.environment)

    @property
    def port_mapping(self) -> str:
        """Compose `host:container` port string."""
        return f"{self.port}:{self.port}"


# Named volume per kind. Kept as an explicit table: deriving these from the
# kind identifier ("postgresql" -> "postgres") is not a string transform.
VOLUME_NAMES: dict[DatabaseKind, str] = {
    DatabaseKind.POSTGRESQL: "postgres_data",
    DatabaseKind.MYSQL: "mysql_data",
    DatabaseKind.MONGODB: "mongodb_data",
    DatabaseKind.REDIS: "redis_data",
}


_CATALOG: dict[DatabaseKind, CatalogEntry] = {
    DatabaseKind.POSTGRESQL: CatalogEntry(
        kind=DatabaseKind.POSTGRESQL,
        display_name="PostgreSQL",
        base_image="postgres",
        default_tag="18-alpine",
        container_name=f"{PROJECT_PREFIX}-postgres",
        port=5432,
        environment=(
            ("POSTGRES_USER", "postgres"),
            ("POSTGRES_PASSWORD", "postgres"),
            ("POSTGRES_DB", "devdb"),
        ),
        healthcheck=("CMD-SHELL", "pg_isready -U postgres"),
        data_path=PurePosixPath("/var/lib/postgresql/data"),
        volume_name=VOLUME_NAMES[DatabaseKind.POSTGRESQL],
    ),
    DatabaseKind.MYSQL: CatalogEntry(
        kind=DatabaseKind.MYSQL,
        display_name="MySQL",
        base_image="mysql",
        default_tag="8.0",
        container_name=f"{PROJECT_PREFIX}-mysql",
        port=3306,
        environment=(
            ("MYSQL_ROOT_PASSWORD", "root"),
            ("MYSQL_DATABASE", "devdb"),
            ("MYSQL_USER", "mysql"),
            ("MYSQL_PASSWORD", "mysql"),
        ),
        healthcheck=(
            "CMD", "mysqladmin", "ping", "-h", "localhost", "-u", "root", "-proot",
        ),
        data_path=PurePosixPath("/var/lib/mysql"),
        volume_name=VOLUME_NAMES[DatabaseKind.MYSQL],
    ),
    DatabaseKind.MONGODB: CatalogEntry(
        kind=DatabaseKind.MONGODB,
        display_name="MongoDB",
        base_image="mongo",
        default_tag="8",
        container_name=f"{PROJECT_PREFIX}-mongodb",
        port=27017,
        environment=(
            ("MONGO_INITDB_ROOT_USERNAME", "admin"),
            ("MONGO_INITDB_ROOT_PASSWORD", "admin"),
            ("MONGO_INITDB_DATABASE", "devdb"),
        ),
        healthcheck=("CMD", "mongosh", "--eval", "db.adminCommand('ping')"),
        data_path=PurePosixPath("/data/db"),
        volume_name=VOLUME_NAMES[DatabaseKind.MONGODB],
    ),
    DatabaseKind.REDIS: CatalogEntry(
        kind=DatabaseKind.REDIS,
        display_name="Redis",
        base_image="redis",
        default_tag="8-alpine",
        container_name=f"{PROJECT_PREFIX}-redis",
        port=6379,
        environment=(),
        healthcheck=("CMD", "redis-cli", "ping"),
        data_path=PurePosixPath("/data"),
        volume_name=VOLUME_NAMES[DatabaseKind.REDIS],
    ),
}


def entry_for(kind: DatabaseKind) -> CatalogEntry:
    """Get the catalog entry for a database kind.

    Args:
        kind: DatabaseKind member.

    Returns:
        CatalogEntry with image, port, environment, etc.
    """
    return _CATALOG[kind]


def list_kinds() -> list[DatabaseKind]:
    """List all supported kinds in display order."""
    return list(DatabaseKind)


def image_ref(kind: DatabaseKind, tag: str | None = None) -> str:
    """Compose an image reference, falling back to the default tag.

    Empty or whitespace-only tags count as unset.
    """
    entry = entry_for(kind)
    resolved = tag.strip() if tag else ""
    return f"{entry.base_image}:{resolved or entry.default_tag}"


def project_name(kind: DatabaseKind) -> str:
    """Compose project name for a kind (e.g., dbrunner-postgresql)."""
    return f"{PROJECT_PREFIX}-{kind.value}"
