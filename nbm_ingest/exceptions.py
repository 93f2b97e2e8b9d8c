"""
Custom exception hierarchy for nbm-ingest.

Callers can catch specific exceptions (e.g., NoSuchColumnError vs
ShapeMismatchError) without relying on generic ValueError/RuntimeError.
Every failure raised while building a store derives from
``NbmIngestError``, so ``except NbmIngestError`` catches them all.
"""


class NbmIngestError(Exception):
    """Base exception for all nbm-ingest errors."""


class GeneralError(NbmIngestError):
    """Raised with a contextual message from the library's own checks.

    For example, asking a store with zero data rows for its
    initialization time.
    """


class InternalError(NbmIngestError):
    """Raised to forward an error from an underlying library.

    The original exception is always chained (``raise ... from err``),
    so ``__cause__`` holds it.
    """


class NoSuchColumnError(NbmIngestError, KeyError):
    """Raised when a column name is not present in the header row."""

    def __init__(self, column: str) -> None:
        super().__init__(column)
        self.column = column

    def __str__(self) -> str:
        return f"no such column: {self.column!r}"


class MalformedInputError(NbmIngestError):
    """Raised when the input text cannot be parsed into rows and columns.

    This can happen if:
    - The text is empty (no header line).
    - A data row's timestamp fails to decode and ``bad_timestamp="raise"``.
    - A value cell is not numeric and ``bad_value="raise"``.
    """


class ShapeMismatchError(NbmIngestError):
    """Raised when parsed arrays disagree with the counted rows and columns.

    Typically a ragged file: a data row with more or fewer cells than
    the header has columns.
    """

    def __init__(self, what: str, expected: int, actual: int) -> None:
        super().__init__(f"{what}: expected {expected}, found {actual}")
        self.what = what
        self.expected = expected
        self.actual = actual


class ConfigValidationError(NbmIngestError):
    """Raised when a parse-config YAML file fails validation."""
