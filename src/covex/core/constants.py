"""
covex core constants: raw field names, synthetic entity codes, and explorer defaults.

Defines the OWID-style raw column names, the canonical continent list used to
order synthetic aggregates, per-capita multipliers, and default alignment
thresholds. This module is zero-IO and uses only the Python standard library.

Notes:
    - Continent order below is the canonical emission order for synthetic rows
      and entity options. Changing it changes positional indices downstream.
    - Alignment thresholds are defaults; covex.explorer.config.ExplorerSettings
      can override them from env/TOML.
"""

from __future__ import annotations

from .grammar import Frequency, MetricKind

__all__ = [
    "ENTITY_CODE",
    "ENTITY_NAME",
    "DATE",
    "CONTINENT",
    "TESTS_UNITS",
    "POPULATION",
    "RAW_CODE_FIELD",
    "RAW_NAME_FIELD",
    "RAW_DATE_FIELD",
    "TEXT_FIELDS",
    "NUMERIC_FIELDS",
    "METRIC_FIELDS",
    "WORLD_CODE",
    "WORLD_NAME",
    "CONTINENTS",
    "SYNTHETIC_CODES",
    "PER_THOUSAND",
    "PER_MILLION",
    "DEFAULT_PER_CAPITA",
    "DEFAULT_PALETTE",
]

# Table column names for identity fields.
ENTITY_CODE: str = "entity_code"
ENTITY_NAME: str = "entity_name"
DATE: str = "date"
CONTINENT: str = "continent"
TESTS_UNITS: str = "tests_units"
POPULATION: str = "population"

# Raw (CSV) names of the identity fields.
RAW_CODE_FIELD: str = "iso_code"
RAW_NAME_FIELD: str = "location"
RAW_DATE_FIELD: str = "date"

# Raw fields kept as text rather than parsed as numbers.
TEXT_FIELDS: frozenset[str] = frozenset({CONTINENT, TESTS_UNITS})

# Numeric fields always present (possibly null) on every parsed row.
NUMERIC_FIELDS: tuple[str, ...] = (
    "total_cases",
    "new_cases",
    "total_deaths",
    "new_deaths",
    "total_tests",
    "new_tests",
    POPULATION,
)

METRIC_FIELDS: dict[tuple[MetricKind, Frequency], str] = {
    (MetricKind.CASES, Frequency.DAILY): "new_cases",
    (MetricKind.CASES, Frequency.CUMULATIVE): "total_cases",
    (MetricKind.DEATHS, Frequency.DAILY): "new_deaths",
    (MetricKind.DEATHS, Frequency.CUMULATIVE): "total_deaths",
    (MetricKind.TESTS, Frequency.DAILY): "new_tests",
    (MetricKind.TESTS, Frequency.CUMULATIVE): "total_tests",
}

WORLD_CODE: str = "OWID_WRL"
WORLD_NAME: str = "World"

# Canonical continent order: (code, display name).
CONTINENTS: tuple[tuple[str, str], ...] = (
    ("OWID_AFR", "Africa"),
    ("OWID_ASI", "Asia"),
    ("OWID_EUR", "Europe"),
    ("OWID_NAM", "North America"),
    ("OWID_OCE", "Oceania"),
    ("OWID_SAM", "South America"),
)

SYNTHETIC_CODES: frozenset[str] = frozenset({WORLD_CODE, *(code for code, _ in CONTINENTS)})

PER_THOUSAND: float = 1e3
PER_MILLION: float = 1e6

# Multiplier used when a query asks for per-capita values without forcing per million.
DEFAULT_PER_CAPITA: dict[MetricKind, float] = {
    MetricKind.CASES: PER_MILLION,
    MetricKind.DEATHS: PER_MILLION,
    MetricKind.TESTS: PER_THOUSAND,
}

# Abstract series color identifiers; the rendering layer maps them to pixels.
DEFAULT_PALETTE: tuple[str, ...] = (
    "blue",
    "orange",
    "green",
    "red",
    "purple",
    "brown",
    "pink",
    "gray",
    "olive",
    "cyan",
)
