"""
Row parsing: raw textual records to typed CovidRow instances, and rows to frames.

Purpose
- Convert one raw CSV-like record into a CovidRow.
- Ingest many records with partial-failure semantics (bad rows are reported,
  not fatal).
- Materialize parsed rows as a polars frame where every numeric field is a
  Float64 column and absent values are null.

Parsing rules
- Identity fields ``iso_code``, ``location``, ``date`` (ISO YYYY-MM-DD) must be
  present and valid, otherwise MalformedRowError names the field.
- ``continent`` and ``tests_units`` are kept as optional text.
- Every other field is numeric: anything that does not parse as a finite float
  (blank, "n/a", "nan", "inf") becomes None.
"""

from __future__ import annotations

import datetime as dt
import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any

import polars as pl
import structlog

from covex.core.constants import (
    CONTINENT,
    DATE,
    ENTITY_CODE,
    ENTITY_NAME,
    NUMERIC_FIELDS,
    RAW_CODE_FIELD,
    RAW_DATE_FIELD,
    RAW_NAME_FIELD,
    TESTS_UNITS,
    TEXT_FIELDS,
)
from covex.core.errors import MalformedRowError
from covex.core.schema import CovidRow
from covex.core.typing import RawRow

__all__ = [
    "ParseResult",
    "parse_number",
    "parse_covid_row",
    "parse_covid_rows",
    "numeric_fields_of",
    "rows_to_frame",
]

logger = structlog.get_logger(__name__)

_IDENTITY_FIELDS = frozenset({RAW_CODE_FIELD, RAW_NAME_FIELD, RAW_DATE_FIELD})


@dataclass(frozen=True)
class ParseResult:
    """Outcome of bulk ingestion: parsed rows in input order plus per-row errors."""

    rows: list[CovidRow] = field(default_factory=list)
    errors: list[MalformedRowError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def parse_number(value: Any) -> float | None:
    """
    Parse a raw cell as a finite float, returning None when it is not one.

    Examples:
        >>> parse_number("2"), parse_number(" 14.5 "), parse_number(""), parse_number("nan")
        (2.0, 14.5, None, None)
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        f = float(value)
    else:
        s = str(value).strip()
        if not s:
            return None
        try:
            f = float(s)
        except ValueError:
            return None
    return f if math.isfinite(f) else None


def _required_text(raw: RawRow, name: str, position: int | None) -> str:
    value = raw.get(name)
    text = str(value).strip() if value is not None else ""
    if not text:
        raise MalformedRowError(name, position=position, value=value)
    return text


def _optional_text(raw: RawRow, name: str) -> str | None:
    value = raw.get(name)
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _parse_date(raw: RawRow, position: int | None) -> dt.date:
    value = raw.get(RAW_DATE_FIELD)
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    text = str(value).strip() if value is not None else ""
    try:
        return dt.date.fromisoformat(text)
    except ValueError as exc:
        raise MalformedRowError(RAW_DATE_FIELD, position=position, value=value) from exc


def parse_covid_row(raw: RawRow, position: int | None = None) -> CovidRow:
    """
    Parse one raw record into a CovidRow.

    Args:
        raw (Mapping[str, Any]): Field name -> raw text (None allowed for empty cells).
        position (int | None): Row position, carried into errors.

    Returns:
        CovidRow: Parsed row; every field in NUMERIC_FIELDS is present (None if absent).

    Raises:
        MalformedRowError: If iso_code, location, or date is missing or invalid.

    Examples:
        >>> row = parse_covid_row({"iso_code": "ALB", "location": "Albania",
        ...                        "date": "2020-04-01", "total_cases": "243", "new_tests": ""})
        >>> row.value("total_cases"), row.value("new_tests")
        (243.0, None)
    """
    code = _required_text(raw, RAW_CODE_FIELD, position)
    name = _required_text(raw, RAW_NAME_FIELD, position)
    day = _parse_date(raw, position)

    metrics: dict[str, float | None] = {f: None for f in NUMERIC_FIELDS}
    for key, value in raw.items():
        if key is None:
            continue
        key = key.strip()
        if key in _IDENTITY_FIELDS or key in TEXT_FIELDS or not key:
            continue
        metrics[key] = parse_number(value)

    return CovidRow(
        entity_code=code,
        entity_name=name,
        date=day,
        continent=_optional_text(raw, CONTINENT),
        tests_units=_optional_text(raw, TESTS_UNITS),
        metrics=metrics,
    )


def parse_covid_rows(raw_rows: Iterable[RawRow]) -> ParseResult:
    """
    Parse many raw records, collecting malformed rows instead of failing.

    Args:
        raw_rows (Iterable[Mapping[str, Any]]): Raw records in input order.

    Returns:
        ParseResult: Parsed rows (input order) and MalformedRowError per rejected row,
        each carrying its 0-based position.
    """
    result = ParseResult()
    for position, raw in enumerate(raw_rows):
        try:
            result.rows.append(parse_covid_row(raw, position=position))
        except MalformedRowError as exc:
            logger.warning(
                "malformed_row_skipped",
                position=position,
                field=exc.field,
                value=exc.value,
            )
            result.errors.append(exc)
    logger.info("rows_parsed", parsed=len(result.rows), rejected=len(result.errors))
    return result


def numeric_fields_of(rows: Iterable[CovidRow]) -> tuple[str, ...]:
    """NUMERIC_FIELDS followed by any extra metric keys, in first-seen order."""
    seen: dict[str, None] = dict.fromkeys(NUMERIC_FIELDS)
    for row in rows:
        for key in row.metrics:
            seen.setdefault(key, None)
    return tuple(seen)


def rows_to_frame(rows: Sequence[CovidRow], numeric_fields: Sequence[str] | None = None) -> pl.DataFrame:
    """
    Materialize rows as a polars frame with explicit nulls for absent values.

    Args:
        rows (Sequence[CovidRow]): Parsed rows (order preserved).
        numeric_fields (Sequence[str] | None): Numeric columns to emit; defaults to
            numeric_fields_of(rows).

    Returns:
        pl.DataFrame: Columns entity_code, entity_name, date (Date), continent,
        tests_units, then one Float64 column per numeric field.
    """
    fields = tuple(numeric_fields) if numeric_fields is not None else numeric_fields_of(rows)
    schema: dict[str, pl.DataType] = {
        ENTITY_CODE: pl.Utf8(),
        ENTITY_NAME: pl.Utf8(),
        DATE: pl.Date(),
        CONTINENT: pl.Utf8(),
        TESTS_UNITS: pl.Utf8(),
    }
    for f in fields:
        schema[f] = pl.Float64()
    records = [row.to_record(fields) for row in rows]
    return pl.DataFrame(records, schema=schema)
