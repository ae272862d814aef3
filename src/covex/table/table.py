"""
Polars-backed columnar table with incremental, descriptor-driven column addition.

Responsibilities
- Hold rows (one polars frame) and expose a row-major view.
- Add derived columns from derivation descriptors; never remove columns.
- Group rows by key columns with each group ordered by date.

Invariants
- Every row carries every column; absent values are null, not omitted.
- Column addition is a critical section: the check for an existing slug and the
  write of the new column happen under one lock.
- A failed derivation writes nothing.
"""

from __future__ import annotations

import threading
from collections.abc import Sequence
from typing import Any

import polars as pl
import structlog

from covex.core.constants import DATE, ENTITY_NAME
from covex.core.errors import DuplicateColumnError, MissingColumnError, TableError
from covex.core.typing import RowDict

from .derivations import Derivation, RollingAverage, derive

__all__ = ["Table"]

logger = structlog.get_logger(__name__)


class Table:
    """
    Ordered rows plus a registry of populated column slugs.

    Args:
        frame (pl.DataFrame | None): Initial rows; an empty frame when None.
        entity_key (str): Column naming the entity (default grouping key).
        date_key (str): Column ordering rows inside each entity.

    Examples:
        >>> import polars as pl
        >>> from covex.table import Table, Scale
        >>> t = Table(pl.DataFrame({"entity_name": ["A"], "date": [1], "v": [2.0]}))
        >>> t.add_column("v2", Scale("v", 2.0))
        >>> t.rows
        [{'entity_name': 'A', 'date': 1, 'v': 2.0, 'v2': 4.0}]
    """

    def __init__(
        self,
        frame: pl.DataFrame | None = None,
        *,
        entity_key: str = ENTITY_NAME,
        date_key: str = DATE,
    ) -> None:
        self._frame = frame if frame is not None else pl.DataFrame()
        self.entity_key = entity_key
        self.date_key = date_key
        self._derived: list[str] = []
        self._lock = threading.RLock()

    def __repr__(self) -> str:
        return f"<Table: {self.height:,} rows x {len(self._frame.columns)} columns>"

    def __len__(self) -> int:
        return self.height

    # ----------------------------
    # Read access
    # ----------------------------

    @property
    def frame(self) -> pl.DataFrame:
        return self._frame

    @property
    def height(self) -> int:
        return self._frame.height

    @property
    def column_slugs(self) -> tuple[str, ...]:
        """Populated column names in insertion order."""
        return tuple(self._frame.columns)

    @property
    def derived_slugs(self) -> tuple[str, ...]:
        return tuple(self._derived)

    def has_column(self, slug: str) -> bool:
        return slug in self._frame.columns

    @property
    def rows(self) -> list[RowDict]:
        """Row-major view; absent cells are None."""
        return self._frame.to_dicts()

    def row(self, index: int) -> RowDict:
        return self._frame.row(index, named=True)

    def column(self, slug: str) -> list[Any]:
        if slug not in self._frame.columns:
            raise MissingColumnError(slug)
        return self._frame.get_column(slug).to_list()

    def group_by(self, keys: Sequence[str] | None = None) -> list[tuple[tuple[Any, ...], pl.DataFrame]]:
        """
        Group rows by key columns.

        Groups come in first-appearance order; rows inside a group are sorted by
        the date key (stable), recomputed on each call.
        """
        keys = list(keys) if keys else [self.entity_key]
        for k in keys:
            if k not in self._frame.columns:
                raise MissingColumnError(k)
        out: list[tuple[tuple[Any, ...], pl.DataFrame]] = []
        for key, group in self._frame.group_by(keys, maintain_order=True):
            if self.date_key in group.columns:
                group = group.sort(self.date_key, maintain_order=True)
            out.append((tuple(key), group))
        return out

    def entity_rows(self, name: str) -> list[RowDict]:
        """Rows of one entity, date ordered."""
        sub = self._frame.filter(pl.col(self.entity_key) == name)
        return sub.sort(self.date_key, maintain_order=True).to_dicts()

    # ----------------------------
    # Mutation
    # ----------------------------

    def append_rows(self, frame: pl.DataFrame) -> None:
        """
        Append rows (e.g. synthetic aggregates); missing columns are filled with nulls.

        Raises:
            TableError: If derived columns already exist (they would be stale for new rows).
        """
        if frame.height == 0:
            return
        with self._lock:
            if self._derived:
                raise TableError(
                    f"cannot append rows after derived columns were added: {self._derived!r}"
                )
            if not self._frame.columns:
                self._frame = frame
            else:
                self._frame = pl.concat([self._frame, frame], how="diagonal_relaxed")

    def add_column(
        self,
        slug: str,
        derivation: Derivation,
        *,
        group_keys: Sequence[str] | None = None,
        date_key: str | None = None,
    ) -> None:
        """
        Compute a value for every row from a derivation descriptor and append the column.

        Args:
            slug (str): New column name.
            derivation (Derivation): RollingAverage, DaysSince, or Scale descriptor.
            group_keys (Sequence[str] | None): Grouping for grouped descriptors;
                defaults to the entity key.
            date_key (str | None): Date column ordering each group; defaults to the table's.

        Raises:
            DuplicateColumnError: If slug already exists.
            MissingColumnError: If a referenced column is missing (nothing is written).
        """
        keys = list(group_keys) if group_keys else [self.entity_key]
        with self._lock:
            if slug in self._frame.columns:
                raise DuplicateColumnError(f"column {slug!r} already exists")
            values = derive(
                self._frame, derivation, group_keys=keys, date_key=date_key or self.date_key
            )
            self._frame = self._frame.with_columns(values.alias(slug))
            self._derived.append(slug)
        logger.debug(
            "column_added",
            slug=slug,
            derivation=type(derivation).__name__,
            sources=list(derivation.sources),
            rows=self.height,
        )

    def add_rolling_average_column(
        self,
        slug: str,
        window: int,
        source_slug: str,
        date_key: str | None = None,
        entity_key: str | None = None,
    ) -> None:
        """
        Add a trailing rolling mean of source_slug, per entity, ordered by date.

        Args:
            slug (str): New column name.
            window (int): Window size in rows (>= 1).
            source_slug (str): Column to average.
            date_key (str | None): Date column (defaults to the table's).
            entity_key (str | None): Entity column (defaults to the table's).
        """
        self.add_column(
            slug,
            RollingAverage(source_slug, window),
            group_keys=[entity_key] if entity_key else None,
            date_key=date_key,
        )
