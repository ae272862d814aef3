"""
CovidExplorerTable: query-driven materialization of derived COVID columns.

Responsibilities
- Load country rows plus synthetic World and continent rows into one Table.
- Expose the pinned-order entity list for selection widgets.
- Mint a ColumnSpec for every derived column and add the column on demand.
- Keep re-requests idempotent: a slug already in the table is never rebuilt.

Column recipes
- Unsmoothed metric column: Scale(raw_field) for absolute counts, or
  Scale(raw_field, multiplier, population) for per-capita values.
- Smoothed metric column: RollingAverage over the unsmoothed scaled column,
  which is materialized first.
- Alignment: cumulative cases for the cases metric, cumulative deaths for
  deaths and tests, per million when the query is per capita; then a DaysSince
  column over that source.

Concurrency
- The membership check and the column write of each init_* call happen under
  one re-entrant lock, so concurrent requests for the same slug add it once.
"""

from __future__ import annotations

import threading
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

import structlog

from covex.core.columns import ColumnRegistry, ColumnSpec, build_column_spec, build_days_since_spec
from covex.core.colors import assign_colors
from covex.core.constants import METRIC_FIELDS, PER_MILLION, POPULATION
from covex.core.errors import MalformedRowError
from covex.core.grammar import MetricKind
from covex.core.schema import CovidRow, Entity, QueryParams
from covex.ingest import (
    country_rows,
    generate_continent_rows,
    generate_world_rows,
    make_country_options,
    numeric_fields_of,
    parse_covid_rows,
    rows_to_frame,
)
from covex.table import DaysSince, RollingAverage, Scale, Table

from .config import ExplorerSettings

__all__ = ["CovidExplorerTable"]

logger = structlog.get_logger(__name__)


class CovidExplorerTable:
    """
    Explorer dataset: parsed rows, synthetic aggregates, and derived columns.

    Rows are laid out as countries (input order), then World (by date), then
    continents (canonical continent order, then date).

    Args:
        rows (Sequence[CovidRow]): Parsed rows. Synthetic codes in the input are ignored
            and recomputed.
        settings (ExplorerSettings | None): Defaults for smoothing, alignment and palette.
        continent_lookup (Mapping[str, str] | None): Country code -> continent name;
            defaults to each row's continent field.

    Examples:
        >>> from covex.explorer import CovidExplorerTable
        >>> t = CovidExplorerTable([])
        >>> t.build_column_spec("tests", 1000, True, 3).slug
        'tests-perThousand-daily-3DayAvg'
    """

    def __init__(
        self,
        rows: Sequence[CovidRow],
        *,
        settings: ExplorerSettings | None = None,
        continent_lookup: Mapping[str, str] | None = None,
    ) -> None:
        self.settings = settings or ExplorerSettings()
        self.parse_errors: list[MalformedRowError] = []
        countries = country_rows(rows)
        world = generate_world_rows(countries)
        continents = generate_continent_rows(countries, continent_lookup)
        fields = numeric_fields_of(countries)

        self.table = Table(rows_to_frame([*countries, *world, *continents], fields))
        self.entities: list[Entity] = make_country_options(countries, continent_lookup)
        self.registry = ColumnRegistry()
        self._lock = threading.RLock()
        logger.info(
            "explorer_table_built",
            country_rows=len(countries),
            world_rows=len(world),
            continent_rows=len(continents),
            entities=len(self.entities),
        )

    @classmethod
    def from_raw_rows(
        cls,
        raw_rows: Iterable[Mapping[str, Any]],
        *,
        settings: ExplorerSettings | None = None,
        continent_lookup: Mapping[str, str] | None = None,
    ) -> CovidExplorerTable:
        """
        Parse raw records (e.g. csv.DictReader rows) and build the table.

        Malformed rows are skipped and kept on ``parse_errors``.
        """
        result = parse_covid_rows(raw_rows)
        inst = cls(result.rows, settings=settings, continent_lookup=continent_lookup)
        inst.parse_errors = list(result.errors)
        return inst

    def __repr__(self) -> str:
        return f"<CovidExplorerTable: {len(self.entities)} entities, {self.table!r}>"

    # ----------------------------
    # Column specs
    # ----------------------------

    def build_column_spec(
        self,
        metric: MetricKind | str,
        per_capita: float = 1.0,
        daily: bool = False,
        smoothing: int = 0,
    ) -> ColumnSpec:
        """Mint and register the spec of a metric column."""
        with self._lock:
            return self.registry.register(build_column_spec(metric, per_capita, daily, smoothing))

    def column_spec(self, slug: str) -> ColumnSpec | None:
        """Spec minted for slug, or None for raw and unknown columns."""
        return self.registry.get(slug)

    # ----------------------------
    # Column materialization
    # ----------------------------

    def init_column(
        self,
        metric: MetricKind | str,
        per_capita: float = 1.0,
        daily: bool = False,
        smoothing: int = 0,
    ) -> str:
        """
        Ensure the metric column for the tuple exists and return its slug.

        Args:
            metric (MetricKind | str): cases | deaths | tests.
            per_capita (float): 1 for absolute counts, else multiplier after dividing by population.
            daily (bool): Daily (True) or cumulative (False).
            smoothing (int): Rolling window; 0 and 1 mean unsmoothed.

        Returns:
            str: Column slug.

        Raises:
            MissingColumnError: If the raw field (or population) is not in the table.
        """
        with self._lock:
            spec = self.build_column_spec(metric, per_capita, daily, smoothing)
            if self.table.has_column(spec.slug):
                logger.debug("column_already_present", slug=spec.slug)
                return spec.slug

            if spec.smoothing:
                base = self.init_column(spec.metric, spec.per_capita, bool(spec.daily), 0)
                self.table.add_column(spec.slug, RollingAverage(base, spec.smoothing))
            else:
                raw_field = METRIC_FIELDS[(spec.metric, spec.frequency)]
                if spec.per_capita == 1.0:
                    derivation = Scale(raw_field)
                else:
                    derivation = Scale(raw_field, spec.per_capita, POPULATION)
                self.table.add_column(spec.slug, derivation)

        logger.info("column_initialized", slug=spec.slug, identifier=spec.identifier[:12])
        return spec.slug

    def init_metric_column(self, params: QueryParams) -> str:
        """Column for the query's own metric, frequency, scaling and smoothing."""
        return self.init_column(
            params.metric,
            params.per_capita_multiplier,
            params.daily,
            self._smoothing(params),
        )

    def init_testing_column(self, params: QueryParams) -> str:
        return self.init_metric_column(params.model_copy(update={"metric": MetricKind.TESTS}))

    def init_cases_column(self, params: QueryParams) -> str:
        return self.init_metric_column(params.model_copy(update={"metric": MetricKind.CASES}))

    def init_deaths_column(self, params: QueryParams) -> str:
        return self.init_metric_column(params.model_copy(update={"metric": MetricKind.DEATHS}))

    def init_requested_columns(self, params: QueryParams) -> list[str]:
        """
        Materialize every column a query needs.

        Returns:
            list[str]: The metric column slug, followed (when aligned) by the
            alignment source slug and the days-since slug.

        Examples:
            tests, cumulative, per capita, aligned ->
            ``["tests-perThousand-cumulative", "deaths-perMil-cumulative",
            "deaths-perMil-cumulative-daysSince-0.1"]``
        """
        slugs = [self.init_metric_column(params)]
        if params.aligned:
            source = self.init_alignment_source(params)
            per_million = params.per_capita or params.per_million
            threshold = (
                params.threshold
                if params.threshold is not None
                else self.settings.align_threshold(params.metric, per_million)
            )
            min_days = params.min_days if params.min_days is not None else self.settings.align_min_days
            slugs += [source, self.add_days_since_column(source, threshold, min_days)]
        return list(dict.fromkeys(slugs))

    def init_alignment_source(self, params: QueryParams) -> str:
        """Cumulative cases (cases metric) or deaths (deaths, tests), per million when per capita."""
        metric = MetricKind.CASES if params.metric is MetricKind.CASES else MetricKind.DEATHS
        per_capita = PER_MILLION if params.per_capita or params.per_million else 1.0
        return self.init_column(metric, per_capita, daily=False, smoothing=0)

    def add_days_since_column(
        self,
        source_slug: str,
        threshold: float,
        min_days: int = 0,
        title: str | None = None,
    ) -> str:
        """
        Add a days-since-threshold column over source_slug and return its slug.

        Raises:
            MissingColumnError: If source_slug is not in the table.
        """
        with self._lock:
            spec = self.registry.register(build_days_since_spec(source_slug, threshold, min_days, title))
            if self.table.has_column(spec.slug):
                logger.debug("column_already_present", slug=spec.slug)
                return spec.slug
            self.table.add_column(spec.slug, DaysSince(source_slug, spec.threshold, spec.min_days))
        logger.info(
            "days_since_column_added",
            slug=spec.slug,
            source=source_slug,
            threshold=spec.threshold,
            min_days=spec.min_days,
        )
        return spec.slug

    # ----------------------------
    # Series colors
    # ----------------------------

    def assign_series_colors(self, series: Iterable[str], used_colors: Iterable[str] = ()) -> dict[str, str]:
        """Least-used palette color per new series, drawn from settings.palette."""
        return assign_colors(series, self.settings.palette, used_colors)

    def _smoothing(self, params: QueryParams) -> int:
        if "smoothing_window" in params.model_fields_set:
            return params.smoothing
        return self.settings.default_smoothing if self.settings.default_smoothing > 1 else 0
