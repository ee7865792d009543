"""Compose document generation for dbrunner.

Builds a single-service Docker Compose document for a database kind from
the catalog defaults and the user's overrides, then serializes it to YAML.

Document layout:
    services:
      <kind>:
        image: <base>:<tag>
        container_name: dbrunner-<name>
        environment: {...}        # omitted when the catalog has none
        ports: ["<port>:<port>"]
        volumes: ["<volume or host path>:<data path>"]
        restart: unless-stopped
        healthcheck: {test, interval, timeout, retries}
    volumes:                      # only for named volumes
      <volume>: {driver: local}
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml
from pydantic import BaseModel, Field, field_validator

from dbrunner.catalog import (
    HEALTHCHECK_INTERVAL,
    HEALTHCHECK_RETRIES,
    HEALTHCHECK_TIMEOUT,
    PROJECT_PREFIX,
    RESTART_POLICY,
    DatabaseKind,
    entry_for,
    image_ref,
)
from dbrunner.config import get_compose_dir

if TYPE_CHECKING:
    from dbrunner.store import ConfigStore

logger = logging.getLogger(__name__)


# =============================================================================
# Document Model
# =============================================================================


class HealthCheck(BaseModel):
    """Compose healthcheck block."""

    test: list[str]
    interval: str = HEALTHCHECK_INTERVAL
    timeout: str = HEALTHCHECK_TIMEOUT
    retries: int = HEALTHCHECK_RETRIES


class ComposeService(BaseModel):
    """One service entry of a compose document.

    Attributes:
        image: Full image reference including tag.
        container_name: Fixed container name.
        environment: Environment variables. Never serialized when empty.
        ports: Port mappings in host:container form.
        volumes: Volume mounts in source:target form.
        restart: Restart policy.
        healthcheck: Container health check.
    """

    image: str
    container_name: str
    environment: dict[str, str] | None = Field(
        default=None,
        description="Omitted entirely when there are no variables",
    )
    ports: list[str] = Field(default_factory=list)
    volumes: list[str] = Field(default_factory=list)
    restart: str = RESTART_POLICY
    healthcheck: HealthCheck

    @field_validator("environment")
    @classmethod
    def _drop_empty_environment(cls, value: dict[str, str] | None) -> dict[str, str] | None:
        # Compose rejects `environment: {}`, so an empty mapping becomes absent.
        return value or None


class NamedVolume(BaseModel):
    """Top-level named volume declaration."""

    driver: str = "local"


class ComposeDocument(BaseModel):
    """A complete compose document for one database."""

    services: dict[str, ComposeService]
    volumes: dict[str, NamedVolume] | None = None

    def to_dict(self) -> dict[str, Any]:
        """Plain dict with unset sections removed."""
        return self.model_dump(exclude_none=True)

    @property
    def service(self) -> ComposeService:
        """The single service in the document."""
        return next(iter(self.services.values()))


# =============================================================================
# Builder
# =============================================================================


def build_compose_document(
    kind: DatabaseKind,
    image_tag: str | None = None,
    volume_path: str | None = None,
) -> ComposeDocument:
    """Build the compose document for a database.

    Pure: touches neither the filesystem nor any process.

    Args:
        kind: Database kind.
        image_tag: User tag override. Empty or None uses the catalog default.
        volume_path: Host directory to bind-mount. Empty or None uses the
            kind's named volume and declares it at the top level.

    Returns:
        ComposeDocument ready for serialization.
    """
    entry = entry_for(kind)
    data_path = str(entry.data_path)

    if volume_path:
        mount = f"{volume_path}:{data_path}"
        volumes = None
    else:
        mount = f"{entry.volume_name}:{data_path}"
        volumes = {entry.volume_name: NamedVolume()}

    service = ComposeService(
        image=image_ref(kind, image_tag),
        container_name=entry.container_name,
        environment=entry.env_vars or None,
        ports=[entry.port_mapping],
        volumes=[mount],
        healthcheck=HealthCheck(test=list(entry.healthcheck)),
    )

    return ComposeDocument(services={kind.value: service}, volumes=volumes)


def build_for_store(kind: DatabaseKind, store: ConfigStore) -> ComposeDocument:
    """Build a compose document using the overrides held by a store."""
    return build_compose_document(
        kind,
        image_tag=store.get_image_tag(kind),
        volume_path=store.get_volume_path(kind),
    )


# =============================================================================
# Serialization
# =============================================================================


def render_compose(document: ComposeDocument) -> str:
    """Serialize a compose document to YAML, preserving key order."""
    return yaml.safe_dump(
        document.to_dict(),
        default_flow_style=False,
        sort_keys=False,
    )


def compose_file_path(kind: DatabaseKind, directory: Path | str | None = None) -> Path:
    """Deterministic compose file location for a kind.

    Args:
        kind: Database kind.
        directory: Target directory. Defaults to DBRUNNER_COMPOSE_DIR or the
            system temp directory.

    Returns:
        Path such as /tmp/dbrunner-postgresql.yml.
    """
    return get_compose_dir(directory) / f"{PROJECT_PREFIX}-{kind.value}.yml"


def write_compose_file(document: ComposeDocument, path: Path) -> Path:
    """Write a compose document to disk, replacing any previous file.

    Raises:
        OSError: If the file cannot be written.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_compose(document), encoding="utf-8")
    logger.debug(f"Wrote compose file {path}")
    return path


__all__ = [
    "HealthCheck",
    "ComposeService",
    "NamedVolume",
    "ComposeDocument",
    "build_compose_document",
    "build_for_store",
    "render_compose",
    "compose_file_path",
    "write_compose_file",
]
