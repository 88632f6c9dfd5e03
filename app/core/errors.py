# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Error taxonomy for the customer service.

Validation problems are never raised: they travel back to the caller inside a
ValidationResult. Only the request-fatal conditions below are exceptions.
"""


class StorageError(Exception):
    """The storage layer failed to read, write or delete a customer."""


class InvalidCategoryError(ValueError):
    """A category filter value does not name any Category member."""


class InvalidSortError(ValueError):
    """A sort specification is malformed or names an unsortable property."""
