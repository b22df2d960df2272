"""
Error domain models.

Exception hierarchy raised by the filtering and pairing services.
"""


class CollisionFilterError(Exception):
    """Base class for all collision-filter errors."""


class PreconditionViolation(CollisionFilterError):
    """The input stream is not grouped by collision id."""


class ConfigurationError(CollisionFilterError, ValueError):
    """Invalid configuration or unknown lookup key (e.g. PDG code)."""


class DataError(CollisionFilterError, ValueError):
    """A record carries values that cannot be evaluated."""
