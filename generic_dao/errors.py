"""Exceptions raised by the DAO layer.

Errors coming from SQLAlchemy itself (integrity violations, stale data,
detached-instance access) are never wrapped and reach the caller unchanged.
"""


class DAOError(Exception):
    """Base class for errors raised by this package."""

    pass


class InvalidArgumentError(DAOError, ValueError):
    """Raised when a required argument is missing or unusable.

    Examples: no session provider at construction, ``None`` passed where an
    entity is required, or ``update`` called on an object without identifier.
    """

    pass


class ConfigurationError(DAOError):
    """Raised when a DAO cannot be bound to its entity type.

    The DAO is unusable; this is raised at construction time only.
    """

    pass
