"""
Derivation descriptors and the dispatcher that turns them into column values.

A derived column is described by data, not by a callback:

- RollingAverage(source_slug, window): trailing mean per entity in date order.
- DaysSince(source_slug, threshold, min_days): day offset from the first date
  the source reaches threshold, per entity.
- Scale(source_slug, factor, population_slug): source * factor, optionally
  divided by the row's population.

Each descriptor compiles to a polars expression. Grouped descriptors are
evaluated with ``.over(group_keys)`` on a copy of the frame sorted by
(group_keys, date); the result is mapped back to the frame's own row order.
The sort is recomputed on every call.

Absent handling
- Absent (null) source values never count as zero. A rolling window with no
  available values is null; a Scale with null or non-positive population is null.

Examples:
    >>> import polars as pl
    >>> from covex.table.derivations import RollingAverage, derive
    >>> df = pl.DataFrame({"entity_name": ["A", "A", "A"], "date": [1, 2, 3], "v": [1.0, None, 5.0]})
    >>> derive(df, RollingAverage("v", 2), group_keys=["entity_name"], date_key="date").to_list()
    [1.0, 1.0, 5.0]
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import ClassVar

import polars as pl

from covex.core.errors import MissingColumnError

__all__ = [
    "RollingAverage",
    "DaysSince",
    "Scale",
    "Derivation",
    "derive",
]

_ROW = "__covex_row"
_RESULT = "__covex_result"


@dataclass(frozen=True)
class RollingAverage:
    """
    Trailing mean over ``[max(0, i - window + 1) .. i]`` within each entity.

    Attributes:
        source_slug (str): Column to average.
        window (int): Window length in rows (>= 1).
    """

    source_slug: str
    window: int

    grouped: ClassVar[bool] = True

    def __post_init__(self) -> None:
        if self.window < 1:
            raise ValueError(f"rolling window must be >= 1 (got {self.window!r})")

    @property
    def sources(self) -> tuple[str, ...]:
        return (self.source_slug,)

    def to_expr(self, group_keys: Sequence[str], date_key: str) -> pl.Expr:
        src = pl.col(self.source_slug).cast(pl.Float64)
        total = src.fill_null(0.0).rolling_sum(window_size=self.window, min_samples=1)
        count = src.is_not_null().cast(pl.Float64).rolling_sum(window_size=self.window, min_samples=1)
        mean = pl.when(count > 0).then(total / count).otherwise(None)
        return mean.over(list(group_keys))


@dataclass(frozen=True)
class DaysSince:
    """
    Calendar days since the source first reached threshold, per entity.

    Rows before the crossing are null. Entities that never cross, or that have
    fewer than min_days rows after the crossing row, are null throughout.

    Attributes:
        source_slug (str): Column compared against threshold.
        threshold (float): Value the source must be >= to start the count.
        min_days (int): Minimum rows after day 0 for the entity to qualify.
    """

    source_slug: str
    threshold: float
    min_days: int = 0

    grouped: ClassVar[bool] = True

    def __post_init__(self) -> None:
        if self.min_days < 0:
            raise ValueError(f"min_days must be >= 0 (got {self.min_days!r})")

    @property
    def sources(self) -> tuple[str, ...]:
        return (self.source_slug,)

    def to_expr(self, group_keys: Sequence[str], date_key: str) -> pl.Expr:
        keys = list(group_keys)
        day = pl.col(date_key)
        start = pl.when(pl.col(self.source_slug) >= self.threshold).then(day).otherwise(None)
        start = start.min().over(keys)
        offset = (day - start).dt.total_days()
        after = (day > start).sum().over(keys)
        qualifies = start.is_not_null() & (after >= self.min_days) & (offset >= 0)
        return pl.when(qualifies).then(offset).otherwise(None)


@dataclass(frozen=True)
class Scale:
    """
    Multiply a source column by a constant, optionally per unit of population.

    Attributes:
        source_slug (str): Column to scale.
        factor (float): Multiplier (e.g. 1e3 for per thousand).
        population_slug (str | None): Population column to divide by; None for plain scaling.
    """

    source_slug: str
    factor: float = 1.0
    population_slug: str | None = None

    grouped: ClassVar[bool] = False

    @property
    def sources(self) -> tuple[str, ...]:
        if self.population_slug is None:
            return (self.source_slug,)
        return (self.source_slug, self.population_slug)

    def to_expr(self, group_keys: Sequence[str], date_key: str) -> pl.Expr:
        src = pl.col(self.source_slug).cast(pl.Float64)
        if self.population_slug is None:
            return src * self.factor
        pop = pl.col(self.population_slug).cast(pl.Float64)
        return pl.when(pop > 0).then(src * self.factor / pop).otherwise(None)


Derivation = RollingAverage | DaysSince | Scale


def derive(
    frame: pl.DataFrame,
    derivation: Derivation,
    *,
    group_keys: Sequence[str],
    date_key: str,
) -> pl.Series:
    """
    Evaluate a derivation against a frame, returning values in the frame's row order.

    Args:
        frame (pl.DataFrame): Source rows.
        derivation (Derivation): Descriptor to evaluate.
        group_keys (Sequence[str]): Grouping columns for grouped descriptors.
        date_key (str): Date column ordering rows inside each group.

    Returns:
        pl.Series: One value per row (null for absent).

    Raises:
        MissingColumnError: If a source, group key, or the date column is missing.
        TypeError: If derivation is not a known descriptor.
    """
    if not isinstance(derivation, (RollingAverage, DaysSince, Scale)):
        raise TypeError(f"unsupported derivation: {type(derivation).__name__}")
    needed = list(derivation.sources)
    if derivation.grouped:
        needed += [*group_keys, date_key]
    for col in needed:
        if col not in frame.columns:
            raise MissingColumnError(col)

    expr = derivation.to_expr(group_keys, date_key).alias(_RESULT)
    if not derivation.grouped:
        return frame.select(expr).get_column(_RESULT)

    ordered = frame.with_row_index(_ROW).sort([*group_keys, date_key], maintain_order=True)
    return ordered.with_columns(expr).sort(_ROW).get_column(_RESULT)
