from __future__ import annotations

from enum import Enum

import pytest

from covex.core.errors import GrammarError
from covex.core.grammar import (
    Frequency,
    MetricKind,
    ensure_all_enum_values_lower_snake,
    frequency_from_value,
    metric_kind_from_value,
    per_capita_token,
    smoothing_token,
    threshold_token,
)


def test_enum_values_are_lower_snake() -> None:
    ensure_all_enum_values_lower_snake()


def test_enum_value_that_is_not_lower_snake_is_rejected() -> None:
    class Shade(Enum):
        LIGHT = "light"
        DARK = "DarkGray"

    with pytest.raises(GrammarError, match="Shade.DARK"):
        ensure_all_enum_values_lower_snake((Shade,))


def test_normalization_is_case_insensitive() -> None:
    assert metric_kind_from_value(" Deaths ") is MetricKind.DEATHS
    assert frequency_from_value("CUMULATIVE") is Frequency.CUMULATIVE
    assert metric_kind_from_value(MetricKind.TESTS) is MetricKind.TESTS


def test_unknown_values_raise() -> None:
    with pytest.raises(GrammarError):
        metric_kind_from_value("hospital")
    with pytest.raises(GrammarError):
        frequency_from_value("weekly")


def test_tokens() -> None:
    assert per_capita_token(1) is None
    assert per_capita_token(1e3) == "perThousand"
    assert per_capita_token(1e6) == "perMil"
    assert per_capita_token(100) == "per100"
    assert per_capita_token(0.5) == "per0.5"
    assert smoothing_token(0) is None
    assert smoothing_token(1) is None
    assert smoothing_token(14) == "14DayAvg"
    assert threshold_token(100.0) == "100"
    assert threshold_token(0.1) == "0.1"
