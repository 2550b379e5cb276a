"""Error types raised by the catalog and settings stores."""


class CatalogError(Exception):
    """Base class for store errors surfaced to the caller."""


class ValidationError(CatalogError):
    """Raised when a write operation receives malformed input."""


class NotFoundError(CatalogError):
    """Raised when an operation targets an id that does not exist."""


class PersistenceError(CatalogError):
    """Raised when the underlying storage fails."""
