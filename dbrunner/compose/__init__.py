"""Compose document builder for dbrunner.

Example:
    >>> from dbrunner.catalog import DatabaseKind
    >>> from dbrunner.compose import build_compose_document, render_compose
    >>> doc = build_compose_document(DatabaseKind.REDIS)
    >>> print(render_compose(doc))
"""

from .lib import (
    ComposeDocument,
    ComposeService,
    HealthCheck,
    NamedVolume,
    build_compose_document,
    build_for_store,
    compose_file_path,
    render_compose,
    write_compose_file,
)

__all__ = [
    # Document model
    "ComposeDocument",
    "ComposeService",
    "HealthCheck",
    "NamedVolume",
    # Builders
    "build_compose_document",
    "build_for_store",
    # Serialization
    "render_compose",
    "compose_file_path",
    "write_compose_file",
]
