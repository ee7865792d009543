"""dbrunner: Local development databases without hand-written compose files."""

from dbrunner.catalog import CatalogEntry, DatabaseKind, entry_for
from dbrunner.compose import ComposeDocument, build_compose_document, render_compose
from dbrunner.connection import ConnectionDescriptor, describe
from dbrunner.runner import CommandResult, DatabaseInfo, DatabaseRunner
from dbrunner.store import ConfigStore, UserConfig

__version__ = "0.1.0"

__all__ = [
    # Catalog
    "DatabaseKind",
    "CatalogEntry",
    "entry_for",
    # Config
    "ConfigStore",
    "UserConfig",
    # Compose
    "ComposeDocument",
    "build_compose_document",
    "render_compose",
    # Connection
    "ConnectionDescriptor",
    "describe",
    # Runner
    "CommandResult",
    "DatabaseInfo",
    "DatabaseRunner",
]
