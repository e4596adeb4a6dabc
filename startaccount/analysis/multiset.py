"""
Hero multiset matching.

A customer's hero picks form a multiset: picking the same hero twice asks
for an account holding at least two copies of it. An account matches when
its roster contains every requested hero at least as many times as asked.
"""

from collections import Counter
from collections.abc import Iterable, Mapping


def build_hero_multiset(picks: Iterable[str]) -> dict[str, int]:
    """
    Convert an ordered sequence of hero picks into a count map.

    Args:
        picks: Hero ids as picked, repeats allowed

    Returns:
        Mapping of hero id to requested count. Heroes never picked are absent.
    """
    return dict(Counter(picks))


def roster_counts(roster: Iterable[str]) -> dict[str, int]:
    """Count how many copies of each hero a roster holds."""
    return dict(Counter(roster))


def matches_selection(
    requested: Mapping[str, int],
    roster: Iterable[str] | Mapping[str, int],
) -> bool:
    """
    Multiset-subset test.

    True iff for every hero with a positive requested count, the roster
    holds at least that many copies. Heroes requested zero times impose no
    constraint, and extra heroes on the account are fine.

    Args:
        requested: Hero id -> requested count
        roster: The account roster, or its precomputed count map
    """
    counts = roster if isinstance(roster, Mapping) else roster_counts(roster)
    return all(
        counts.get(hero_id, 0) >= needed for hero_id, needed in requested.items() if needed > 0
    )
