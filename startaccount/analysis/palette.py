"""
Hero palette ordering.

Sort priority:
1. Available heroes before unavailable ones
2. Legendary before epic
3. Higher rarity before lower (missing rarity counts as lowest)
4. Locale-aware name in the active locale
"""

from collections.abc import Collection, Iterable

from startaccount.models.catalog import Hero, HeroType
from startaccount.models.locale import Locale, collation_key

_TYPE_ORDER = {HeroType.LEGENDARY: 0, HeroType.EPIC: 1}


def palette_sort_key(
    hero: Hero,
    availability: Collection[str],
    locale: Locale,
) -> tuple[int, int, int, str, str]:
    """Sort key implementing the palette order for `locale`."""
    name = hero.name.get(locale)
    rarity = hero.rarity if hero.rarity is not None else -1
    return (
        0 if hero.id in availability else 1,
        _TYPE_ORDER.get(hero.type, len(_TYPE_ORDER)),
        -rarity,
        collation_key(name),
        name,
    )


def sort_hero_palette(
    heroes: Iterable[Hero],
    availability: Collection[str],
    locale: Locale,
) -> list[Hero]:
    """Return the heroes in palette order. Recompute on locale or catalog change."""
    return sorted(heroes, key=lambda hero: palette_sort_key(hero, availability, locale))


def filter_palette(heroes: Iterable[Hero], query: str | None, locale: Locale) -> list[Hero]:
    """Keep heroes whose localized name contains `query` (case-insensitive)."""
    needle = collation_key(query.strip()) if query else ""
    if not needle:
        return list(heroes)
    return [hero for hero in heroes if needle in collation_key(hero.name.get(locale))]
