"""
ObSet Errors
============

Exceptions raised by the observable set and its backing structures.

No-op conditions (adding a present value, removing an absent one, removing
a listener that was never registered) are not errors and never raise.
"""


class ObSetError(Exception):
    """Base class for every error raised by obset."""

    pass


class ConfigurationError(ObSetError, ValueError):
    """Raised when an ObSet is constructed with invalid options."""

    pass


class InvariantViolation(ObSetError, RuntimeError):
    """Raised when internal bookkeeping is found inconsistent.

    This always indicates a bug (or a listener that broke the eviction
    contract), never a recoverable user error.
    """

    pass
