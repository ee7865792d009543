"""Core utilities shared across dbrunner modules."""

from .errors import DBRunnerError
from .log import get_logger, resolve_level, setup_logging

__all__ = ["DBRunnerError", "get_logger", "resolve_level", "setup_logging"]
