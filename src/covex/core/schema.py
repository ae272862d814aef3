"""
Pydantic v2 models for parsed rows, entities, and explorer query parameters.

Responsibilities
- Define the typed Parsed Row (CovidRow): identity fields plus numeric metrics
  where every metric is either a finite float or None (absent).
- Define Entity, the selectable country or synthetic aggregate.
- Define QueryParams, the read-only configuration surface that selects which
  derived columns the explorer materializes.

Style
- Zero-IO (stdlib + pydantic only).
- Models are frozen; rows are immutable after ingestion.

References
- grammar: src/covex/core/grammar.py (MetricKind, Frequency, normalization helpers)
- constants: src/covex/core/constants.py (field names, per-capita defaults)
- errors: src/covex/core/errors.py
"""

from __future__ import annotations

import datetime as dt
import math
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .constants import (
    CONTINENT,
    DATE,
    DEFAULT_PER_CAPITA,
    ENTITY_CODE,
    ENTITY_NAME,
    PER_MILLION,
    SYNTHETIC_CODES,
    TESTS_UNITS,
)
from .grammar import Frequency, MetricKind, frequency_from_value, metric_kind_from_value

__all__ = [
    "CovidRow",
    "Entity",
    "QueryParams",
]


class CovidRow(BaseModel):
    """
    One entity on one date with its numeric metrics.

    Attributes:
        entity_code (str): ISO code or OWID synthetic code (e.g. "OWID_WRL").
        entity_name (str): Display name (e.g. "Albania").
        date (datetime.date): Calendar day of the record.
        continent (str | None): Continent name when the source carries one.
        tests_units (str | None): Free-text description of how tests are counted.
        metrics (dict[str, float | None]): Numeric fields; None marks absent.

    Raises:
        pydantic.ValidationError: If a metric is NaN or infinite.

    Examples:
        >>> from datetime import date
        >>> from covex.core.schema import CovidRow
        >>> row = CovidRow(entity_code="ALB", entity_name="Albania", date=date(2020, 4, 1),
        ...                metrics={"total_cases": 243.0, "new_tests": None})
        >>> row.value("total_cases"), row.value("new_tests"), row.value("unknown")
        (243.0, None, None)
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    entity_code: str = Field(..., min_length=1)
    entity_name: str = Field(..., min_length=1)
    date: dt.date
    continent: str | None = None
    tests_units: str | None = None
    metrics: dict[str, float | None] = Field(default_factory=dict)

    @field_validator("metrics")
    @classmethod
    def _finite_metrics(cls, v: dict[str, float | None]) -> dict[str, float | None]:
        for key, val in v.items():
            if val is not None and not math.isfinite(val):
                raise ValueError(f"metric {key!r} must be finite or None (got {val!r})")
        return v

    @property
    def is_synthetic(self) -> bool:
        return self.entity_code in SYNTHETIC_CODES

    def value(self, field: str) -> float | None:
        """Return a metric value, None when absent or unknown."""
        return self.metrics.get(field)

    def to_record(self, numeric_fields: tuple[str, ...] | None = None) -> dict[str, Any]:
        """
        Flatten to a table record with explicit None for every requested numeric field.

        Args:
            numeric_fields (tuple[str, ...] | None): Fields to emit; defaults to the
                row's own metric keys.
        """
        rec: dict[str, Any] = {
            ENTITY_CODE: self.entity_code,
            ENTITY_NAME: self.entity_name,
            DATE: self.date,
            CONTINENT: self.continent,
            TESTS_UNITS: self.tests_units,
        }
        fields = numeric_fields if numeric_fields is not None else tuple(self.metrics)
        for f in fields:
            rec[f] = self.metrics.get(f)
        return rec


class Entity(BaseModel):
    """
    Selectable chart entity: a country or a synthetic aggregate.

    Attributes:
        code (str): Stable code (ISO code, or OWID_WRL / OWID_<continent>).
        name (str): Display name.
        is_synthetic (bool): True for World and continents.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    code: str
    name: str
    is_synthetic: bool = False


class QueryParams(BaseModel):
    """
    Query parameters selecting the derived columns to build.

    Unset options default to raw daily counts: unsmoothed, unaligned, absolute.

    Attributes:
        metric (MetricKind): cases | deaths | tests.
        frequency (Frequency): daily | cumulative.
        per_capita (bool): Divide by population (tests per thousand, others per million).
        per_million (bool): Force the per-million multiplier for any metric.
        aligned (bool): Also build a days-since-threshold column.
        smoothing_window (int): Rolling-average window (1 = unsmoothed).
        threshold (float | None): Alignment threshold override.
        min_days (int | None): Minimum post-threshold samples override.

    Examples:
        >>> from covex.core.schema import QueryParams
        >>> p = QueryParams(metric="tests", frequency="daily", per_capita=True)
        >>> p.per_capita_multiplier, p.daily
        (1000.0, True)
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    metric: MetricKind = MetricKind.CASES
    frequency: Frequency = Frequency.DAILY
    per_capita: bool = False
    per_million: bool = False
    aligned: bool = False
    smoothing_window: int = Field(1, ge=1)
    threshold: float | None = None
    min_days: int | None = Field(None, ge=0)

    @field_validator("metric", mode="before")
    @classmethod
    def _normalize_metric(cls, v: Any) -> MetricKind:
        return metric_kind_from_value(v)

    @field_validator("frequency", mode="before")
    @classmethod
    def _normalize_frequency(cls, v: Any) -> Frequency:
        return frequency_from_value(v)

    @property
    def daily(self) -> bool:
        return self.frequency is Frequency.DAILY

    @property
    def per_capita_multiplier(self) -> float:
        """1 for absolute counts, else the metric's default or per million when forced."""
        if self.per_million:
            return PER_MILLION
        if self.per_capita:
            return DEFAULT_PER_CAPITA[self.metric]
        return 1.0

    @property
    def smoothing(self) -> int:
        """Rolling window with 1 canonicalized to 0 (unsmoothed)."""
        return self.smoothing_window if self.smoothing_window > 1 else 0
