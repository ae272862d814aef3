"""
Core package aggregator for covex contracts (grammar, schemas, column identity, colors).

## Contracts (single source of truth)
- Grammar: MetricKind/Frequency enums, normalization, slug tokens.
- Constants: raw field names, synthetic entity codes, canonical continent order.
- Schemas: CovidRow (parsed row), Entity, QueryParams.
- Columns: ColumnSpec minting and the identity registry.
- Hashing: canonical JSON and SHA-256 identifiers.
- Colors: least-used palette color assignment.

## Notes
- Zero-IO policy: stdlib + pydantic only; no polars here.
- Absent numeric values are None; NaN and infinities are rejected at the schema boundary.

## Downstream usage
- covex.ingest: parses raw rows into CovidRow and builds synthetic aggregates.
- covex.table: materializes rows into a polars-backed Table and derives columns.
- covex.explorer: mints ColumnSpecs for requested QueryParams and drives the table.

## Examples
```python
from covex.core.columns import build_column_spec
from covex.core.colors import get_least_used_color

build_column_spec("deaths", per_capita=1e6, daily=False).slug  # 'deaths-perMil-cumulative'
get_least_used_color(["red", "green"], ["red"])  # 'green'
```
"""
