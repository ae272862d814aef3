"""
covex.explorer: query-driven orchestration over the covex table.

## Public API
- CovidExplorerTable: rows + synthetic aggregates + on-demand derived columns.
- ExplorerSettings: env/TOML-configurable defaults (alignment thresholds, palette, logging).

## Import DAG discipline
- Top layer: may import covex.core, covex.ingest, and covex.table.
"""

from __future__ import annotations

from .config import ExplorerSettings
from .table import CovidExplorerTable

__all__ = ["CovidExplorerTable", "ExplorerSettings"]
