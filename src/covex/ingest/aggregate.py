"""
Synthetic aggregate rows: continents and World.

Continent rows
- Countries are mapped to continents through an external code -> continent
  lookup (or, when omitted, the ``continent`` field the rows carry).
- Rows are grouped by (continent, date); every numeric field is summed with
  absent values counted as zero, so a country with no known data still counts
  toward the group and an all-absent field sums to 0.
- Emission order is continent (canonical order from covex.core.constants.CONTINENTS)
  then date ascending. Only (continent, date) pairs present in the input are emitted.

World rows
- One OWID_WRL row per date, same summation across all countries.

Synthetic input rows (OWID_WRL, OWID_<continent>) are never summed.
All grouping/aggregation is done in polars.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence

import polars as pl
import structlog

from covex.core.constants import CONTINENTS, DATE, ENTITY_CODE, WORLD_CODE, WORLD_NAME
from covex.core.schema import CovidRow

from .parse import numeric_fields_of, rows_to_frame

__all__ = [
    "country_rows",
    "continent_lookup_from_rows",
    "generate_continent_rows",
    "generate_world_rows",
]

logger = structlog.get_logger(__name__)

_CONTINENT_KEY = "__continent"


def country_rows(rows: Sequence[CovidRow]) -> list[CovidRow]:
    """Rows whose entity is a real country (not OWID_WRL or a continent code)."""
    return [row for row in rows if not row.is_synthetic]


def continent_lookup_from_rows(rows: Sequence[CovidRow]) -> dict[str, str]:
    """Build a country code -> continent name lookup from the rows' own continent field."""
    lookup: dict[str, str] = {}
    for row in rows:
        if row.continent and not row.is_synthetic:
            lookup.setdefault(row.entity_code, row.continent)
    return lookup


def _sum_by(frame: pl.DataFrame, keys: list[str], fields: Sequence[str]) -> pl.DataFrame:
    return frame.group_by(keys, maintain_order=True).agg(
        [pl.col(f).fill_null(0.0).sum().alias(f) for f in fields]
    )


def _to_rows(
    frame: pl.DataFrame, code: str, name: str, fields: Sequence[str], continent: str | None
) -> list[CovidRow]:
    return [
        CovidRow(
            entity_code=code,
            entity_name=name,
            date=rec[DATE],
            continent=continent,
            metrics={f: float(rec[f]) for f in fields},
        )
        for rec in frame.sort(DATE).to_dicts()
    ]


def generate_continent_rows(
    rows: Sequence[CovidRow],
    continent_lookup: Mapping[str, str] | None = None,
) -> list[CovidRow]:
    """
    Sum country rows per (continent, date) into synthetic continent rows.

    Args:
        rows (Sequence[CovidRow]): Parsed rows (synthetic rows are ignored).
        continent_lookup (Mapping[str, str] | None): Country code -> continent name.
            Defaults to continent_lookup_from_rows(rows).

    Returns:
        list[CovidRow]: One row per (continent, date) present, continent-then-date order.

    Examples:
        >>> from datetime import date
        >>> from covex.core.schema import CovidRow
        >>> r = [CovidRow(entity_code=c, entity_name=c, date=date(2020, 4, 1),
        ...               metrics={"total_cases": v}) for c, v in (("FRA", 5.0), ("DEU", None))]
        >>> out = generate_continent_rows(r, {"FRA": "Europe", "DEU": "Europe"})
        >>> [(x.entity_code, x.value("total_cases")) for x in out]
        [('OWID_EUR', 5.0)]
    """
    countries = country_rows(rows)
    if not countries:
        return []
    lookup = dict(continent_lookup) if continent_lookup is not None else continent_lookup_from_rows(countries)
    order = {name: i for i, (_, name) in enumerate(CONTINENTS)}

    unknown = sorted({v for v in lookup.values() if v not in order})
    if unknown:
        logger.warning("unknown_continents_ignored", continents=unknown)
    unmapped = sorted({r.entity_code for r in countries if r.entity_code not in lookup})
    if unmapped:
        logger.warning("countries_without_continent", count=len(unmapped), codes=unmapped[:20])

    fields = numeric_fields_of(countries)
    frame = rows_to_frame(countries, fields)
    codes = list(lookup)
    lookup_frame = pl.DataFrame(
        {ENTITY_CODE: codes, _CONTINENT_KEY: [lookup[c] for c in codes]},
        schema={ENTITY_CODE: pl.Utf8(), _CONTINENT_KEY: pl.Utf8()},
    )
    frame = (
        frame.join(lookup_frame, on=ENTITY_CODE, how="inner")
        .filter(pl.col(_CONTINENT_KEY).is_in(list(order)))
    )
    sums = _sum_by(frame, [_CONTINENT_KEY, DATE], fields)

    out: list[CovidRow] = []
    for code, name in CONTINENTS:
        part = sums.filter(pl.col(_CONTINENT_KEY) == name)
        if part.height:
            out.extend(_to_rows(part, code, name, fields, continent=name))
    logger.debug("continent_rows_generated", rows=len(out))
    return out


def generate_world_rows(rows: Sequence[CovidRow]) -> list[CovidRow]:
    """
    Sum all country rows per date into synthetic World (OWID_WRL) rows.

    Returns:
        list[CovidRow]: One row per date present, ascending.
    """
    countries = country_rows(rows)
    if not countries:
        return []
    fields = numeric_fields_of(countries)
    sums = _sum_by(rows_to_frame(countries, fields), [DATE], fields)
    out = _to_rows(sums, WORLD_CODE, WORLD_NAME, fields, continent=None)
    logger.debug("world_rows_generated", rows=len(out))
    return out
