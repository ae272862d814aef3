"""
Selectable entity list for the explorer.

Pinned order
1. Countries in first-seen order of the parsed rows (deduplicated by code).
2. World (OWID_WRL), when at least one country is present.
3. Each continent that has at least one mapped country, in the canonical order
   of covex.core.constants.CONTINENTS.

Synthetic codes found in the raw input are never listed as countries; the
aggregates they stand for are recomputed and appended at their pinned slots.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from covex.core.constants import CONTINENTS, WORLD_CODE, WORLD_NAME
from covex.core.schema import CovidRow, Entity

from .aggregate import continent_lookup_from_rows, country_rows

__all__ = ["make_country_options"]


def make_country_options(
    rows: Sequence[CovidRow],
    continent_lookup: Mapping[str, str] | None = None,
) -> list[Entity]:
    """
    Build the ordered list of selectable entities.

    Args:
        rows (Sequence[CovidRow]): Parsed rows.
        continent_lookup (Mapping[str, str] | None): Country code -> continent name;
            defaults to the rows' own continent field.

    Returns:
        list[Entity]: Countries, then World, then continents present.

    Examples:
        >>> from datetime import date
        >>> from covex.core.schema import CovidRow
        >>> d = date(2020, 4, 1)
        >>> rows = [CovidRow(entity_code="PER", entity_name="Peru", date=d, continent="South America"),
        ...         CovidRow(entity_code="TCD", entity_name="Chad", date=d, continent="Africa")]
        >>> [e.code for e in make_country_options(rows)]
        ['PER', 'TCD', 'OWID_WRL', 'OWID_AFR', 'OWID_SAM']
    """
    countries = country_rows(rows)
    entities: list[Entity] = []
    seen: set[str] = set()
    for row in countries:
        if row.entity_code in seen:
            continue
        seen.add(row.entity_code)
        entities.append(Entity(code=row.entity_code, name=row.entity_name))
    if not entities:
        return entities

    entities.append(Entity(code=WORLD_CODE, name=WORLD_NAME, is_synthetic=True))

    lookup = continent_lookup if continent_lookup is not None else continent_lookup_from_rows(countries)
    present = {lookup[code] for code in seen if code in lookup}
    entities.extend(
        Entity(code=code, name=name, is_synthetic=True)
        for code, name in CONTINENTS
        if name in present
    )
    return entities
