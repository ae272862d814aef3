from __future__ import annotations

from datetime import date

from covex.core.schema import CovidRow
from covex.ingest import make_country_options


def test_pinned_order(parsed_rows) -> None:
    options = make_country_options(parsed_rows)
    assert [e.code for e in options] == [
        "AFG",
        "ALB",
        "DZA",
        "USA",
        "AUS",
        "BRA",
        "ARG",
        "OWID_WRL",
        "OWID_AFR",
        "OWID_ASI",
        "OWID_EUR",
        "OWID_NAM",
        "OWID_OCE",
        "OWID_SAM",
    ]
    world = options[7]
    assert (world.code, world.name, world.is_synthetic) == ("OWID_WRL", "World", True)
    assert not any(e.is_synthetic for e in options[:7])


def test_raw_synthetic_codes_are_not_countries(parsed_rows) -> None:
    raw_world = CovidRow(entity_code="OWID_WRL", entity_name="World", date=date(2020, 4, 1))
    options = make_country_options([raw_world, *parsed_rows])
    assert [e.code for e in options].count("OWID_WRL") == 1
    assert options[0].code == "AFG"


def test_only_continents_present_are_listed() -> None:
    d = date(2020, 4, 1)
    rows = [
        CovidRow(entity_code="PER", entity_name="Peru", date=d, continent="South America"),
        CovidRow(entity_code="PER", entity_name="Peru", date=date(2020, 4, 2), continent="South America"),
        CovidRow(entity_code="XKX", entity_name="Kosovo", date=d),
    ]
    assert [e.code for e in make_country_options(rows)] == ["PER", "XKX", "OWID_WRL", "OWID_SAM"]


def test_no_rows_no_options() -> None:
    assert make_country_options([]) == []
