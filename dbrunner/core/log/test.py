"""Tests for dbrunner.core.log."""

import logging
from io import StringIO

from .lib import get_logger, resolve_level, setup_logging


class TestLogging:
    """get_logger() and setup_logging()."""

    def test_get_logger(self) -> None:
        """Named loggers are plain stdlib loggers."""
        logger = get_logger("test")
        assert logger.name == "test"
        assert isinstance(logger, logging.Logger)

    def test_get_logger_default_name(self) -> None:
        """No name means the package logger."""
        logger = get_logger()
        assert logger.name == "dbrunner"

    def test_setup_logging(self) -> None:
        """setup_logging() accepts a level and a stream."""
        stream = StringIO()
        setup_logging(level=logging.DEBUG, stream=stream)
        logger = get_logger("test_setup")
        logger.debug("test message")

        # basicConfig is a no-op when logging was already configured,
        # so only the API contract is checked here.
        assert logger.level == logging.NOTSET

    def test_setup_logging_accepts_level_name(self) -> None:
        setup_logging(level="warning", stream=StringIO())


class TestResolveLevel:
    """Level name parsing."""

    def test_names(self) -> None:
        assert resolve_level("debug") == logging.DEBUG
        assert resolve_level(" ERROR ") == logging.ERROR

    def test_int_passthrough(self) -> None:
        assert resolve_level(logging.WARNING) == logging.WARNING

    def test_unknown_falls_back_to_info(self) -> None:
        assert resolve_level("chatty") == logging.INFO
