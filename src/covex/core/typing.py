"""
Lightweight typing aliases used across covex ingestion and tables.

This module contains no runtime logic and is zero-IO.

Examples:
    >>> from covex.core.typing import RawRow
    >>> def code_of(raw: RawRow) -> str:
    ...     return str(raw.get("iso_code"))
    >>> code_of({"iso_code": "ALB"})
    'ALB'
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

__all__ = [
    "RawRow",
    "RowDict",
]

# Raw CSV-like record; values may be None when a reader maps empty cells to null.
RawRow = Mapping[str, Any]

# Row-major view of one table row (column slug -> value, None for absent).
RowDict = dict[str, Any]
