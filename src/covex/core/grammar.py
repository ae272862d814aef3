"""
Canonical covex grammar: metric kinds, frequencies, and slug tokens.

Defines the enums selected by query parameters and the helpers that turn a
derivation parameter tuple into the readable parts of a column slug.

Responsibilities
- Define enums for metric kinds and frequencies (lower_snake serialized values).
- Provide normalization helpers for enum-like strings.
- Render per-capita multipliers, smoothing windows, and thresholds as slug tokens.

Design principles
-----------------
1) One naming standard:
   - Enum classes: PascalCase
   - Enum member names: UPPER_SNAKE (Python constants)
   - Enum serialized values: lower_snake
   - Raw table columns: lower_snake (OWID field names)
   - Derived column slugs: dash-separated tokens, e.g. ``tests-perThousand-daily``

2) Injective tokens:
   - Every token renderer maps distinct inputs to distinct strings, so a slug
     built from distinct tuples can never coincide.

Examples
--------
>>> from covex.core.grammar import MetricKind, metric_kind_from_value, per_capita_token, threshold_token
>>> metric_kind_from_value("TESTS") == MetricKind.TESTS
True
>>> per_capita_token(1e3)
'perThousand'
>>> threshold_token(0.1)
'0.1'
"""

from __future__ import annotations

import re
from enum import Enum

from .errors import GrammarError

__all__ = [
    "MetricKind",
    "Frequency",
    "is_lower_snake",
    "metric_kind_from_value",
    "frequency_from_value",
    "per_capita_token",
    "smoothing_token",
    "threshold_token",
    "ensure_all_enum_values_lower_snake",
]

_LOWER_SNAKE_RE = re.compile(r"^[a-z][a-z0-9]*(?:_[a-z0-9]+)*$")


class MetricKind(Enum):
    """
    Epidemiological metrics the explorer can chart.

    Notes:
      Raw field mapping (see covex.core.constants.METRIC_FIELDS):
        * cases   -> new_cases / total_cases
        * deaths  -> new_deaths / total_deaths
        * tests   -> new_tests / total_tests
    """

    CASES = "cases"
    DEATHS = "deaths"
    TESTS = "tests"


class Frequency(Enum):
    """Daily (new per day) or cumulative (running total) series."""

    DAILY = "daily"
    CUMULATIVE = "cumulative"


def is_lower_snake(value: str) -> bool:
    """
    Check whether a string is lower_snake.

    Examples:
      >>> is_lower_snake("total_cases")
      True
      >>> is_lower_snake("TotalCases")
      False
    """
    return bool(_LOWER_SNAKE_RE.match(value or ""))


def metric_kind_from_value(s: str | MetricKind) -> MetricKind:
    """
    Parse a metric string (case-insensitive) into a MetricKind.

    Args:
      s (str | MetricKind): Candidate metric value.

    Returns:
      MetricKind: Parsed metric kind.

    Raises:
      GrammarError: If s is not a known metric.
    """
    if isinstance(s, MetricKind):
        return s
    value = (s or "").strip().lower()
    allowed = {m.value for m in MetricKind}
    if value not in allowed:
        raise GrammarError(f"metric must be one of {sorted(allowed)} (got {s!r})")
    return MetricKind(value)


def frequency_from_value(s: str | Frequency) -> Frequency:
    """
    Parse a frequency string (case-insensitive) into a Frequency.

    Raises:
      GrammarError: If s is not "daily" or "cumulative".
    """
    if isinstance(s, Frequency):
        return s
    value = (s or "").strip().lower()
    allowed = {f.value for f in Frequency}
    if value not in allowed:
        raise GrammarError(f"frequency must be one of {sorted(allowed)} (got {s!r})")
    return Frequency(value)


def _number_token(value: float) -> str:
    # Shortest round-trip repr keeps the mapping injective over floats.
    f = float(value)
    if f.is_integer():
        return str(int(f))
    return repr(f)


def per_capita_token(per_capita: float) -> str | None:
    """
    Render a per-capita multiplier as a slug token.

    Args:
      per_capita (float): Multiplier applied after dividing by population;
        1 means absolute counts.

    Returns:
      str | None: None for absolute counts, "perThousand" for 1e3, "perMil" for
      1e6, otherwise "per<N>".

    Raises:
      GrammarError: If per_capita is not positive.
    """
    if per_capita <= 0:
        raise GrammarError(f"per_capita must be positive (got {per_capita!r})")
    if per_capita == 1:
        return None
    if per_capita == 1e3:
        return "perThousand"
    if per_capita == 1e6:
        return "perMil"
    return f"per{_number_token(per_capita)}"


def smoothing_token(window: int) -> str | None:
    """
    Render a rolling-average window as a slug token.

    Windows of 0 and 1 both mean "unsmoothed" and render as None.

    Examples:
      >>> smoothing_token(7)
      '7DayAvg'
    """
    if window < 0:
        raise GrammarError(f"smoothing window must be >= 0 (got {window!r})")
    if window <= 1:
        return None
    return f"{int(window)}DayAvg"


def threshold_token(threshold: float) -> str:
    """Render an alignment threshold as a slug token (100.0 -> '100', 0.1 -> '0.1')."""
    return _number_token(threshold)


def ensure_all_enum_values_lower_snake(enums: tuple[type[Enum], ...] = (MetricKind, Frequency)) -> None:
    """
    Assert that every enum member's value is lower_snake.

    Raises:
      GrammarError: If any enum value is not lower_snake.
    """
    for enum_cls in enums:
        for member in enum_cls:
            if not is_lower_snake(str(member.value)):
                raise GrammarError(
                    f"{enum_cls.__name__}.{member.name} value must be lower_snake "
                    f"(got {member.value!r})"
                )


# Import-time guard: enum values double as slug tokens.
ensure_all_enum_values_lower_snake()
