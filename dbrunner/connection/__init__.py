"""Connection string rendering for dbrunner databases."""

from .lib import (
    CREDENTIALS,
    DEFAULT_HOST,
    NOT_APPLICABLE,
    ConnectionDescriptor,
    Credentials,
    describe,
)

__all__ = [
    "DEFAULT_HOST",
    "NOT_APPLICABLE",
    "Credentials",
    "CREDENTIALS",
    "ConnectionDescriptor",
    "describe",
]
