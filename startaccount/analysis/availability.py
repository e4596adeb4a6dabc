"""
Availability index.

A hero is available when at least one active account lists it. Heroes
outside the index cannot be fulfilled and are dimmed in the palette.
"""

from collections.abc import Iterable

from startaccount.models.catalog import Account, Hero


def build_availability_index(accounts: Iterable[Account]) -> frozenset[str]:
    """
    Union of hero ids over the rosters of all active accounts.

    Always rebuilt from scratch; callers recompute it whenever the active
    account set changes.
    """
    available: set[str] = set()
    for account in accounts:
        if account.is_active:
            available.update(account.heroes)
    return frozenset(available)


def unavailable_heroes(heroes: Iterable[Hero], availability: frozenset[str]) -> list[Hero]:
    """Heroes from the catalog that no active account can supply."""
    return [hero for hero in heroes if hero.id not in availability]
