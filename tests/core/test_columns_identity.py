from __future__ import annotations

import pytest

from covex.core.columns import ColumnRegistry, ColumnSpec, build_column_spec, build_days_since_spec
from covex.core.errors import ColumnIdentityError, GrammarError
from covex.core.grammar import Frequency, MetricKind


def test_five_distinct_tuples_give_five_distinct_identifiers() -> None:
    specs = [
        build_column_spec("tests", 1000, True, 3),
        build_column_spec("cases", 1000, True, 3),
        build_column_spec("tests", 100, True, 3),
        build_column_spec("tests", 1000, True, 0),
        build_column_spec("tests", 1000, False, 3),
    ]
    assert len({s.identifier for s in specs}) == 5
    assert len({s.slug for s in specs}) == 5


def test_identical_tuple_is_stable() -> None:
    a = build_column_spec("deaths", 1e6, False, 7)
    b = build_column_spec(MetricKind.DEATHS, 1000000, False, 7)
    assert a == b
    assert a.identifier == b.identifier


def test_every_single_parameter_change_changes_identifier() -> None:
    base = ("cases", 1e6, True, 7)
    variants = [
        ("deaths", 1e6, True, 7),
        ("cases", 1e3, True, 7),
        ("cases", 1.0, True, 7),
        ("cases", 1e6, False, 7),
        ("cases", 1e6, True, 14),
        ("cases", 1e6, True, 0),
    ]
    ident = build_column_spec(*base).identifier
    for v in variants:
        assert build_column_spec(*v).identifier != ident, v


def test_smoothing_zero_and_one_are_the_same_column() -> None:
    unsmoothed = build_column_spec("tests", 1, True, 0)
    assert unsmoothed == build_column_spec("tests", 1, True, 1)
    assert unsmoothed.identifier == build_column_spec(MetricKind.TESTS, 1.0, True, 1).identifier
    assert unsmoothed.identifier != build_column_spec("tests", 1, True, 2).identifier


@pytest.mark.parametrize(
    ("args", "slug"),
    [
        (("tests", 1, True, 0), "tests-daily"),
        (("tests", 1e3, True, 0), "tests-perThousand-daily"),
        (("deaths", 1e6, False, 0), "deaths-perMil-cumulative"),
        (("cases", 100, True, 7), "cases-per100-daily-7DayAvg"),
    ],
)
def test_slugs(args, slug: str) -> None:
    assert build_column_spec(*args).slug == slug


def test_spec_metadata() -> None:
    spec = build_column_spec("deaths", 1e6, False, 0)
    assert isinstance(spec, ColumnSpec)
    assert spec.name == "Cumulative confirmed deaths per million people"
    assert spec.metric is MetricKind.DEATHS
    assert spec.frequency is Frequency.CUMULATIVE
    assert spec.params["kind"] == "metric"
    assert len(spec.identifier) == 64


def test_invalid_tuples_raise() -> None:
    with pytest.raises(GrammarError):
        build_column_spec("hospitalizations", 1, True, 0)
    with pytest.raises(GrammarError):
        build_column_spec("cases", 0, True, 0)
    with pytest.raises(GrammarError):
        build_column_spec("cases", 1, True, -1)


def test_days_since_spec_title_is_not_identity() -> None:
    a = build_days_since_spec("deaths-perMil-cumulative", 0.1, 5, title="Days since 0.1 deaths per million")
    b = build_days_since_spec("deaths-perMil-cumulative", 0.1, 5)
    assert a.slug == b.slug == "deaths-perMil-cumulative-daysSince-0.1-min5"
    assert a.identifier == b.identifier
    assert a.name != b.name
    assert build_days_since_spec("deaths-perMil-cumulative", 0.1, 0).identifier != a.identifier


def test_days_since_and_metric_specs_never_share_identifiers() -> None:
    metric = build_column_spec("cases", 1, False, 0)
    days = build_days_since_spec(metric.slug, 100)
    assert metric.identifier != days.identifier
    assert days.slug == "cases-cumulative-daysSince-100"


def test_registry_reuses_and_guards() -> None:
    reg = ColumnRegistry()
    first = reg.register(build_column_spec("tests", 1e3, True, 3))
    assert reg.register(build_column_spec("tests", 1e3, True, 3)) is first
    assert "tests-perThousand-daily-3DayAvg" in reg
    assert reg.get("tests-perThousand-daily-3DayAvg") is first
    assert reg.get("missing") is None
    assert len(reg) == 1
    assert list(reg) == [first]


def test_registry_rejects_conflicting_identifier() -> None:
    reg = ColumnRegistry()
    spec = reg.register(build_column_spec("cases", 1, True, 0))
    forged = build_column_spec("deaths", 1, True, 0)
    forged = ColumnSpec(**{**forged.__dict__, "identifier": spec.identifier})
    with pytest.raises(ColumnIdentityError):
        reg.register(forged)
