"""Database lifecycle orchestration and the caller-facing API.

Example:
    >>> from dbrunner.runner import DatabaseRunner
    >>> runner = DatabaseRunner.default()
    >>> for row in runner.list_databases():
    ...     print(row.name, row.status, row.image)
"""

from .lib import CommandResult, DatabaseInfo, DatabaseRunner

__all__ = ["CommandResult", "DatabaseInfo", "DatabaseRunner"]
