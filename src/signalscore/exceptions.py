"""Signal scoring exception hierarchy.

All package-specific exceptions derive from :class:`SignalScoreError` so callers
can catch every scoring-related error uniformly.

Insufficient history is never an error: indicators return empty series and the
composite scorer excludes the affected component instead.
"""

from __future__ import annotations


class SignalScoreError(Exception):
    """Base class for signal scoring exceptions.

    Derived exceptions should extend this class so that callers can catch all
    package-specific errors uniformly.
    """


class ConfigError(SignalScoreError):
    """Raised when configuration files or parameters are invalid."""


class DataSourceError(SignalScoreError):
    """Raised when fetching market data from an upstream provider fails."""


class DataValidationError(SignalScoreError):
    """Raised when OHLCV input fails validation checks.

    Named DataValidationError to avoid conflict with pydantic's ValidationError.
    """


__all__ = [
    "SignalScoreError",
    "ConfigError",
    "DataSourceError",
    "DataValidationError",
]
