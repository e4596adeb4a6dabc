"""
Catalog view service.

Loads everything the storefront needs for one game (the game, its hero
catalog, its active accounts, the availability index) and renders the
palette and account listing view models from it.
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from startaccount.analysis.availability import build_availability_index
from startaccount.analysis.multiset import build_hero_multiset
from startaccount.analysis.palette import filter_palette, sort_hero_palette
from startaccount.db.operations import get_game, list_active_accounts, list_heroes
from startaccount.filtering.cards import AccountCard, build_account_card
from startaccount.filtering.matching import (
    CatalogResult,
    CatalogState,
    RosterCountCache,
    filter_accounts,
)
from startaccount.filtering.window import CatalogWindow
from startaccount.models.catalog import Account, Game, Hero, HeroType
from startaccount.models.failure import NotFoundError, StoreUnavailableError
from startaccount.models.locale import Locale, collation_key
from startaccount.services.messages import empty_state_message

logger = logging.getLogger(__name__)


@dataclass
class CatalogSnapshot:
    """
    One game's catalog as loaded at a point in time.

    The availability index and roster count cache belong to this snapshot
    and are rebuilt whenever a new snapshot is loaded.
    """

    game: Game
    heroes: list[Hero]
    accounts: list[Account]
    availability: frozenset[str] = field(init=False)
    heroes_by_id: dict[str, Hero] = field(init=False)
    roster_cache: RosterCountCache = field(init=False)

    def __post_init__(self) -> None:
        self.availability = build_availability_index(self.accounts)
        self.heroes_by_id = {hero.id: hero for hero in self.heroes}
        self.roster_cache = RosterCountCache()


@dataclass
class PaletteEntry:
    """A hero in the selection palette."""

    hero_id: str
    name: str
    icon: str
    type: HeroType
    rarity: int | None
    element: str | None
    available: bool
    selected_count: int = 0


@dataclass
class CatalogPage:
    """The visible part of an account listing."""

    state: CatalogState
    cards: list[AccountCard]
    total: int
    has_more: bool
    message: str | None = None


async def load_catalog_snapshot(session: AsyncSession, game_ref: str) -> CatalogSnapshot:
    """
    Load a game with its heroes and active accounts.

    Raises:
        NotFoundError: No game with this id or slug
        StoreUnavailableError: The catalog store failed
    """
    try:
        game = await get_game(session, game_ref)
        if game is None:
            raise NotFoundError("game", game_ref)
        heroes = await list_heroes(session, game.id) if game.has_gacha_heroes else []
        accounts = await list_active_accounts(session, game.id)
    except SQLAlchemyError as e:
        logger.exception("Error fetching catalog for %s", game_ref)
        raise StoreUnavailableError(type(e).__name__) from e

    return CatalogSnapshot(game=game, heroes=heroes, accounts=accounts)


def filter_games(games: Iterable[Game], query: str | None, locale: Locale) -> list[Game]:
    """Keep games whose localized name contains `query`, ignoring case and accents."""
    needle = collation_key(query.strip()) if query else ""
    if not needle:
        return list(games)
    return [game for game in games if needle in collation_key(game.name.get(locale))]


def render_palette(
    snapshot: CatalogSnapshot,
    locale: Locale,
    picks: Iterable[str] = (),
    query: str | None = None,
) -> list[PaletteEntry]:
    """Sorted, optionally searched hero palette with availability and pick counts."""
    selected = build_hero_multiset(picks)
    heroes = filter_palette(snapshot.heroes, query, locale)
    return [
        PaletteEntry(
            hero_id=hero.id,
            name=hero.name.get(locale),
            icon=hero.icon,
            type=hero.type,
            rarity=hero.rarity,
            element=hero.element,
            available=hero.id in snapshot.availability,
            selected_count=selected.get(hero.id, 0),
        )
        for hero in sort_hero_palette(heroes, snapshot.availability, locale)
    ]


def search_snapshot(snapshot: CatalogSnapshot, requested: Mapping[str, int]) -> CatalogResult:
    """Run the matcher over a snapshot's active accounts."""
    return filter_accounts(
        snapshot.accounts,
        snapshot.game,
        requested,
        cache=snapshot.roster_cache,
    )


def render_catalog_page(
    snapshot: CatalogSnapshot,
    result: CatalogResult,
    window: CatalogWindow[Account],
    locale: Locale,
    picks: Iterable[str] = (),
) -> CatalogPage:
    """Build cards for the visible window of a search result."""
    selected = frozenset(picks)
    cards = [
        build_account_card(
            account,
            snapshot.heroes_by_id,
            locale,
            snapshot.availability,
            selected,
            show_heroes=snapshot.game.has_gacha_heroes,
        )
        for account in window.visible
    ]
    return CatalogPage(
        state=result.state,
        cards=cards,
        total=result.total,
        has_more=window.has_more,
        message=empty_state_message(result.state.value, locale),
    )
