"""Catalog error module."""


class Error(Exception):
    """Base class for catalog errors."""


class RetrievalError(Error):
    """
    Error raised when a backend query fails.

    A retrieval error aborts an entire multi-page retrieval; no records accumulated before the
    failure are returned to the caller.

    Attributes:
    • table: source table being queried
    • offset: row offset of the failed range query
    """

    def __init__(self, message: str, table: str | None = None, offset: int | None = None):
        super().__init__(message)
        self.message = message
        self.table = table
        self.offset = offset

    def __repr__(self):
        return f"RetrievalError({self.message!r}, table={self.table!r}, offset={self.offset!r})"


class AnnotationMissing(Error, KeyError):
    """
    Error raised when an item lacks an expected annotation, or its value is not a string.

    This error never escapes the model layer: the missing annotation reads as an empty string.
    """

    def __init__(self, name: str):
        super().__init__(name)
        self.name = name

    def __str__(self):
        return f"missing annotation: {self.name}"
