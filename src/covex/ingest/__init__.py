"""
covex.ingest: raw rows to typed rows, frames, and synthetic aggregates.

## Public API
- parse_covid_row / parse_covid_rows: raw mapping(s) to CovidRow, partial-failure ingestion.
- rows_to_frame: materialize rows as a polars frame with explicit nulls.
- generate_continent_rows / generate_world_rows: summed synthetic aggregates.
- make_country_options: pinned-order selectable entity list.

## Import DAG discipline
- Depends on polars, structlog, and covex.core only.
- MUST NOT import covex.table or covex.explorer.
"""

from __future__ import annotations

from .aggregate import (
    continent_lookup_from_rows,
    country_rows,
    generate_continent_rows,
    generate_world_rows,
)
from .entities import make_country_options
from .parse import (
    ParseResult,
    numeric_fields_of,
    parse_covid_row,
    parse_covid_rows,
    parse_number,
    rows_to_frame,
)

__all__ = [
    "ParseResult",
    "parse_number",
    "parse_covid_row",
    "parse_covid_rows",
    "numeric_fields_of",
    "rows_to_frame",
    "country_rows",
    "continent_lookup_from_rows",
    "generate_continent_rows",
    "generate_world_rows",
    "make_country_options",
]
