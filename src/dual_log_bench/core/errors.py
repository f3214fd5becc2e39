"""Exception hierarchy for the dual log benchmark.

Defines all custom exceptions used throughout the implementation.
"""

from __future__ import annotations


class DualLogError(Exception):
    """Base exception for all dual log benchmark errors."""
    pass


class StoreCommunicationError(DualLogError):
    """Raised when a call to the ordered log store fails."""
    pass


class CallerError(DualLogError):
    """Raised when an identifier is unknown or was already removed."""
    pass


class IndexCorruptionError(CallerError):
    """Raised when a coalesce index descriptor cannot be parsed."""
    pass


class ConfigError(DualLogError):
    """Raised when benchmark configuration is invalid."""
    pass


class ConsistencyWarning(DualLogError):
    """Raised when an operation succeeds but its postcondition does not hold.

    Never fatal: the driver catches it where it is raised, logs it and
    records it on the operation result.
    """
    pass
