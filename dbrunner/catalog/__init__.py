"""Catalog of supported database kinds and their container defaults.

Example:
    >>> from dbrunner.catalog import DatabaseKind, entry_for
    >>> entry = entry_for(DatabaseKind.POSTGRESQL)
    >>> entry.default_image
    'postgres:18-alpine'
"""

from .lib import (
    HEALTHCHECK_INTERVAL,
    HEALTHCHECK_RETRIES,
    HEALTHCHECK_TIMEOUT,
    PROJECT_PREFIX,
    RESTART_POLICY,
    VOLUME_NAMES,
    CatalogEntry,
    DatabaseKind,
    entry_for,
    image_ref,
    list_kinds,
    project_name,
)

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
    # Utilities
    "entry_for",
    "list_kinds",
    "image_ref",
    "project_name",
]
