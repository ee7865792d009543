"""Base exception shared by dbrunner modules."""


class DBRunnerError(Exception):
    """Base exception for all dbrunner errors."""


__all__ = ["DBRunnerError"]
