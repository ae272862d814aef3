"""
Column specs: stable identities and display metadata for derived columns.

A ColumnSpec is minted from a canonical parameter tuple. Both its slug and its
identifier are pure functions of that tuple:

- slug: readable, injective token join, e.g. ``tests-perThousand-daily-7DayAvg``.
- identifier: SHA-256 over the canonical JSON of the parameters (see hashing).

Canonicalization happens before either is computed: metric strings are
normalized to MetricKind, multipliers to float, and smoothing windows 0 and 1
both collapse to 0 (unsmoothed). Display titles are not part of the identity.

Notes:
    - ColumnRegistry guards the identity invariant at runtime: an identifier or
      slug seen twice with different parameters raises ColumnIdentityError.
    - Zero-IO, stdlib only.

Examples:
    >>> from covex.core.columns import build_column_spec
    >>> spec = build_column_spec("tests", per_capita=1000, daily=True, smoothing=3)
    >>> spec.slug
    'tests-perThousand-daily-3DayAvg'
    >>> spec.name
    'Daily new tests per thousand people (3-day rolling average)'
    >>> spec.identifier == build_column_spec("tests", 1000.0, True, 3).identifier
    True
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, replace
from typing import Any

from .errors import ColumnIdentityError
from .grammar import (
    Frequency,
    MetricKind,
    metric_kind_from_value,
    per_capita_token,
    smoothing_token,
    threshold_token,
)
from .hashing import hash_params

__all__ = [
    "ColumnSpec",
    "ColumnRegistry",
    "build_column_spec",
    "build_days_since_spec",
]

METRIC_KIND = "metric"
DAYS_SINCE_KIND = "days_since"

_METRIC_NAMES: dict[MetricKind, str] = {
    MetricKind.CASES: "confirmed cases",
    MetricKind.DEATHS: "confirmed deaths",
    MetricKind.TESTS: "tests",
}

_PER_CAPITA_NAMES: dict[float, str] = {
    1.0: "",
    1e3: " per thousand people",
    1e6: " per million people",
}


@dataclass(frozen=True)
class ColumnSpec:
    """
    Identity and metadata of one derived column.

    Attributes:
        slug (str): Column name in the table.
        identifier (str): SHA-256 hex digest of the canonical parameters.
        name (str): Human-readable display name.
        kind (str): "metric" or "days_since".
        metric (MetricKind | None): Source metric for metric columns.
        per_capita (float): Multiplier after dividing by population (1 = absolute).
        daily (bool | None): Frequency for metric columns.
        smoothing (int): Rolling-average window (0 = unsmoothed).
        source_slug (str | None): Source column for days-since columns.
        threshold (float | None): Alignment threshold for days-since columns.
        min_days (int | None): Minimum post-threshold samples for days-since columns.
    """

    slug: str
    identifier: str
    name: str
    kind: str
    metric: MetricKind | None = None
    per_capita: float = 1.0
    daily: bool | None = None
    smoothing: int = 0
    source_slug: str | None = None
    threshold: float | None = None
    min_days: int | None = None

    @property
    def frequency(self) -> Frequency | None:
        if self.daily is None:
            return None
        return Frequency.DAILY if self.daily else Frequency.CUMULATIVE

    @property
    def params(self) -> dict[str, Any]:
        """Canonical parameter mapping the identifier is hashed from."""
        if self.kind == DAYS_SINCE_KIND:
            return {
                "kind": DAYS_SINCE_KIND,
                "source_slug": self.source_slug,
                "threshold": self.threshold,
                "min_days": self.min_days,
            }
        return {
            "kind": METRIC_KIND,
            "metric": self.metric.value if self.metric is not None else None,
            "per_capita": self.per_capita,
            "daily": self.daily,
            "smoothing": self.smoothing,
        }


def build_column_spec(
    metric: MetricKind | str,
    per_capita: float = 1.0,
    daily: bool = False,
    smoothing: int = 0,
) -> ColumnSpec:
    """
    Mint the spec of a metric column from its canonical parameter tuple.

    The tuple is canonicalized before the slug and identifier are computed:
    the metric is normalized to a MetricKind, per_capita is cast to float and
    smoothing windows 0 and 1 both collapse to unsmoothed. Raw inputs that
    canonicalize to the same tuple therefore share one identifier.

    Args:
        metric (MetricKind | str): cases | deaths | tests.
        per_capita (float): 1 for absolute counts, 1e3 per thousand, 1e6 per million.
        daily (bool): Daily (True) or cumulative (False) series.
        smoothing (int): Rolling-average window; 0 and 1 mean unsmoothed.

    Returns:
        ColumnSpec: Spec whose slug and identifier depend only on the tuple.

    Raises:
        GrammarError: If the metric is unknown, per_capita <= 0, or smoothing < 0.
    """
    kind = metric_kind_from_value(metric)
    per_capita = float(per_capita)
    window = int(smoothing) if smoothing > 1 else 0
    # Validates smoothing and per_capita as a side effect of rendering.
    smooth_tok = smoothing_token(int(smoothing))
    cap_tok = per_capita_token(per_capita)

    parts = [kind.value]
    if cap_tok:
        parts.append(cap_tok)
    parts.append(Frequency.DAILY.value if daily else Frequency.CUMULATIVE.value)
    if smooth_tok:
        parts.append(smooth_tok)

    name = f"{'Daily new' if daily else 'Cumulative'} {_METRIC_NAMES[kind]}"
    suffix = _PER_CAPITA_NAMES.get(per_capita)
    if suffix is None:
        suffix = f" per {cap_tok.removeprefix('per')} people"
    name += suffix
    if window:
        name += f" ({window}-day rolling average)"

    draft = ColumnSpec(
        slug="-".join(parts),
        identifier="",
        name=name,
        kind=METRIC_KIND,
        metric=kind,
        per_capita=per_capita,
        daily=bool(daily),
        smoothing=window,
    )
    return _with_identifier(draft)


def build_days_since_spec(
    source_slug: str,
    threshold: float,
    min_days: int = 0,
    title: str | None = None,
) -> ColumnSpec:
    """
    Mint the spec of a days-since-threshold column.

    Args:
        source_slug (str): Column whose threshold crossing defines day 0.
        threshold (float): Value the source must reach.
        min_days (int): Minimum samples after day 0 for an entity to qualify.
        title (str | None): Display name; not part of the identity.

    Returns:
        ColumnSpec: Spec with slug ``<source>-daysSince-<threshold>[-min<n>]``.

    Raises:
        ValueError: If min_days is negative.
    """
    if min_days < 0:
        raise ValueError(f"min_days must be >= 0 (got {min_days!r})")
    threshold = float(threshold)
    slug = f"{source_slug}-daysSince-{threshold_token(threshold)}"
    if min_days:
        slug += f"-min{int(min_days)}"
    draft = ColumnSpec(
        slug=slug,
        identifier="",
        name=title or f"Days since {threshold_token(threshold)} ({source_slug})",
        kind=DAYS_SINCE_KIND,
        source_slug=source_slug,
        threshold=threshold,
        min_days=int(min_days),
    )
    return _with_identifier(draft)


def _with_identifier(draft: ColumnSpec) -> ColumnSpec:
    return replace(draft, identifier=hash_params(draft.params))


class ColumnRegistry:
    """
    Registry of minted specs keyed by slug and identifier.

    Registering the same parameters twice is a no-op returning the first spec.
    Registering different parameters under an existing identifier or slug is an
    invariant violation.

    Examples:
        >>> from covex.core.columns import ColumnRegistry, build_column_spec
        >>> reg = ColumnRegistry()
        >>> a = reg.register(build_column_spec("cases", 1e6, True, 7))
        >>> reg.register(build_column_spec("cases", 1e6, True, 7)) is a
        True
        >>> len(reg)
        1
    """

    def __init__(self) -> None:
        self._by_slug: dict[str, ColumnSpec] = {}
        self._by_identifier: dict[str, ColumnSpec] = {}

    def register(self, spec: ColumnSpec) -> ColumnSpec:
        """
        Register a spec, returning the canonical instance.

        Raises:
            ColumnIdentityError: If the identifier or slug is already bound to other parameters.
        """
        prior = self._by_identifier.get(spec.identifier)
        if prior is not None:
            if prior.params != spec.params:
                raise ColumnIdentityError(
                    f"identifier {spec.identifier} minted for {prior.params!r} and {spec.params!r}"
                )
            return prior
        by_slug = self._by_slug.get(spec.slug)
        if by_slug is not None and by_slug.params == spec.params:
            return by_slug
        if by_slug is not None:
            raise ColumnIdentityError(
                f"slug {spec.slug!r} minted for {by_slug.params!r} and {spec.params!r}"
            )
        self._by_identifier[spec.identifier] = spec
        self._by_slug[spec.slug] = spec
        return spec

    def get(self, slug: str) -> ColumnSpec | None:
        return self._by_slug.get(slug)

    def __contains__(self, slug: object) -> bool:
        return slug in self._by_slug

    def __iter__(self) -> Iterator[ColumnSpec]:
        return iter(self._by_slug.values())

    def __len__(self) -> int:
        return len(self._by_slug)
