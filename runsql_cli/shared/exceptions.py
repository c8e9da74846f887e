"""Project-wide custom exceptions."""

from __future__ import annotations


class RunSqlError(Exception):
    """Base exception for the snowflake-runsql action."""


class ConfigurationError(RunSqlError):
    """Raised when configuration loading or validation fails."""


class InputError(RunSqlError):
    """Raised when required action inputs are missing or unusable."""


class QueryError(RunSqlError):
    """Raised when the warehouse rejects or fails to execute a statement."""


class PersistenceError(RunSqlError):
    """Raised when result artifacts cannot be written to disk."""
