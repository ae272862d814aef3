"""
Core exception types raised by row parsing, table derivations, and column identity.

Provides typed exceptions for core-domain failures:
- MalformedRowError for raw rows whose identity fields (code, name, date) do not parse.
- MissingColumnError when a derivation references a column the table does not hold.
- DuplicateColumnError when a slug is added twice to the same table.
- ColumnIdentityError when two different parameter tuples mint the same identifier.
- ConfigError for invalid explorer settings.
- GrammarError for enum-like values that fail normalization.

Notes:
    - This module uses only the Python standard library and has no side effects.
    - Unparsable numeric fields are not errors; they are recorded as absent (None).
    - ColumnIdentityError is an invariant violation and should never be caught
      and retried.

Examples:
    Catch a malformed row and report its position.

    >>> from covex.core.errors import MalformedRowError
    >>> try:
    ...     raise MalformedRowError("date", position=3, value="not-a-date")
    ... except MalformedRowError as e:
    ...     (e.field, e.position)
    ('date', 3)
"""

from __future__ import annotations

__all__ = [
    "CovexError",
    "MalformedRowError",
    "TableError",
    "MissingColumnError",
    "DuplicateColumnError",
    "ColumnIdentityError",
    "ConfigError",
    "GrammarError",
]


class CovexError(Exception):
    """Base class for covex errors."""


class MalformedRowError(CovexError, ValueError):
    """
    A raw row could not be parsed because an identity field is missing or invalid.

    Attributes:
        field (str): Name of the offending raw field.
        position (int | None): 0-based position of the row in its input sequence, if known.
        value (object): The raw value that failed to parse.
    """

    def __init__(self, field: str, position: int | None = None, value: object = None) -> None:
        self.field = field
        self.position = position
        self.value = value
        where = f" at row {position}" if position is not None else ""
        super().__init__(f"malformed row{where}: field {field!r} has invalid value {value!r}")


class TableError(CovexError):
    """Base class for table-level derivation failures."""


class MissingColumnError(TableError, KeyError):
    """
    A derivation referenced a column the table does not hold.

    Attributes:
        slug (str): The missing column slug.
    """

    def __init__(self, slug: str) -> None:
        self.slug = slug
        super().__init__(f"column {slug!r} not found")

    def __str__(self) -> str:
        return f"column {self.slug!r} not found"


class DuplicateColumnError(TableError):
    """A column slug was added to a table that already holds it."""


class ColumnIdentityError(CovexError, RuntimeError):
    """Two distinct parameter tuples produced the same column identifier."""


class ConfigError(CovexError, ValueError):
    """Explorer settings are invalid or unsupported."""


class GrammarError(CovexError, ValueError):
    """Enum-like value (metric kind, frequency) failed normalization."""
