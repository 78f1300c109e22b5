class PaginateError(Exception):
    """Base exception for all mongo-paginate errors."""


class DocumentNotFound(PaginateError):
    """Raised when a document is not found in the database."""


class NotConnected(PaginateError):
    """Raised when attempting to use a database that is not connected."""


class InvalidPaginationOptions(PaginateError):
    """Raised when pagination options fail validation."""
