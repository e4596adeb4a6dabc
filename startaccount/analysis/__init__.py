from startaccount.analysis.availability import build_availability_index, unavailable_heroes
from startaccount.analysis.multiset import (
    build_hero_multiset,
    matches_selection,
    roster_counts,
)
from startaccount.analysis.palette import filter_palette, palette_sort_key, sort_hero_palette

__all__ = [
    "build_availability_index",
    "build_hero_multiset",
    "filter_palette",
    "matches_selection",
    "palette_sort_key",
    "roster_counts",
    "sort_hero_palette",
    "unavailable_heroes",
]
