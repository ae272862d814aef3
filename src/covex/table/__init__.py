"""
covex.table: polars-backed Table and derivation descriptors.

## Public API
- Table: rows + column registry; add_column(slug, derivation, group_keys=None).
- RollingAverage, DaysSince, Scale: derivation descriptors consumed by one dispatcher.
- derive: evaluate a descriptor against a frame without mutating anything.
- Table.entity_rows(name): one entity's rows as dicts in date order, e.g.
  `explorer.table.entity_rows("World")` to inspect a synthetic series.

## Import DAG discipline
- Depends on polars, structlog, and covex.core only.
- MUST NOT import covex.ingest or covex.explorer.
"""

from __future__ import annotations

from .derivations import DaysSince, Derivation, RollingAverage, Scale, derive
from .table import Table

__all__ = [
    "Table",
    "Derivation",
    "RollingAverage",
    "DaysSince",
    "Scale",
    "derive",
]
