"""Domain-specific exceptions for the finance tracker core services."""

class ValidationError(ValueError):
    """Raised when provided data does not meet validation requirements."""


class EmptyUpdateError(ValueError):
    """Raised when an update request carries no field besides the id."""


class RecordNotFoundError(LookupError):
    """Raised when an expense record cannot be located."""


class UnknownToolError(LookupError):
    """Raised when a tool name is not one of the registered operations."""


class PersistenceError(IOError):
    """Raised when the persistence layer encounters unrecoverable issues."""
