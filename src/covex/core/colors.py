"""
Deterministic series color assignment.

Colors are abstract identifiers drawn from a caller-supplied palette. The caller
passes the multiset of colors already in use; nothing is cached between calls.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Sequence

__all__ = [
    "get_least_used_color",
    "assign_colors",
]


def get_least_used_color(palette: Sequence[str], used_colors: Iterable[str]) -> str:
    """
    Return the palette color with the fewest occurrences in used_colors.

    Ties are broken by palette order (earliest-declared wins). Colors in
    used_colors that are not in the palette are ignored.

    Args:
        palette (Sequence[str]): Available colors in declaration order.
        used_colors (Iterable[str]): Colors currently assigned (with repeats).

    Returns:
        str: The least used palette color.

    Raises:
        ValueError: If the palette is empty.

    Examples:
        >>> get_least_used_color(["red", "green"], ["red"])
        'green'
        >>> get_least_used_color(["red", "green"], ["red", "green", "green"])
        'red'
    """
    if not palette:
        raise ValueError("palette must contain at least one color")
    counts = Counter(used_colors)
    # min() keeps the first minimum, which is the palette-order tie-break.
    return min(palette, key=lambda color: counts[color])


def assign_colors(
    series: Iterable[str],
    palette: Sequence[str],
    used_colors: Iterable[str] = (),
) -> dict[str, str]:
    """
    Assign a color to each new series, one at a time, counting earlier picks as used.

    Args:
        series (Iterable[str]): Series names in the order they are added.
        palette (Sequence[str]): Available colors.
        used_colors (Iterable[str]): Colors already used by existing series.

    Returns:
        dict[str, str]: Mapping series name -> color. A name repeated in series
        keeps its first color.

    Examples:
        >>> assign_colors(["France", "Peru", "Chad"], ["red", "green"], ["red"])
        {'France': 'green', 'Peru': 'red', 'Chad': 'green'}
    """
    used = list(used_colors)
    out: dict[str, str] = {}
    for name in series:
        if name in out:
            continue
        color = get_least_used_color(palette, used)
        out[name] = color
        used.append(color)
    return out
