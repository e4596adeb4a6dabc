"""
Account filtering by hero selection.

Applies the multiset matcher across a game's active accounts and classifies
the outcome so the caller can render the right empty state.

Policy:
- Game without a hero roster: every active account matches, picks ignored
- Roster game with zero picks: nothing matches, state NO_CRITERIA
- Roster game with picks: multiset-subset match per account
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum

from startaccount.analysis.multiset import matches_selection, roster_counts
from startaccount.models.catalog import Account, Game

logger = logging.getLogger(__name__)


class CatalogState(str, Enum):
    """Which view the account list should render."""

    RESULTS = "results"
    NO_RESULTS = "no_results"
    NO_CRITERIA = "no_criteria"


@dataclass
class CatalogResult:
    """Matched accounts in source order plus the state to render."""

    state: CatalogState
    accounts: list[Account] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.accounts)


class RosterCountCache:
    """
    Per-account roster count maps.

    Counts depend only on the roster, never on the selection, so they are
    reused across searches until the account set is reloaded.
    """

    def __init__(self) -> None:
        self._counts: dict[str, dict[str, int]] = {}

    def counts_for(self, account: Account) -> dict[str, int]:
        cached = self._counts.get(account.id)
        if cached is None:
            cached = roster_counts(account.heroes)
            self._counts[account.id] = cached
        return cached

    def clear(self) -> None:
        self._counts.clear()


def filter_accounts(
    accounts: Iterable[Account],
    game: Game,
    requested: Mapping[str, int],
    cache: RosterCountCache | None = None,
) -> CatalogResult:
    """
    Select the accounts of `game` that satisfy the requested hero counts.

    Args:
        accounts: Candidate accounts in source order
        game: The selected game
        requested: Hero id -> requested copies (see build_hero_multiset)
        cache: Optional roster count cache shared across searches

    Returns:
        CatalogResult with accounts in their original order
    """
    eligible = [a for a in accounts if a.is_active and a.game_id == game.id]

    if not game.has_gacha_heroes:
        matched = eligible
    elif not any(count > 0 for count in requested.values()):
        logger.debug("No heroes selected for %s; returning no_criteria", game.id)
        return CatalogResult(state=CatalogState.NO_CRITERIA)
    else:
        counts = cache or RosterCountCache()
        matched = [a for a in eligible if matches_selection(requested, counts.counts_for(a))]

    logger.debug(
        "Matched %d of %d accounts for game %s",
        len(matched),
        len(eligible),
        game.id,
    )
    state = CatalogState.RESULTS if matched else CatalogState.NO_RESULTS
    return CatalogResult(state=state, accounts=matched)
