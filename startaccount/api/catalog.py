"""
Storefront catalog endpoints.

Stateless views over the catalog: games, the hero palette of a game and
hero-filtered account listings. Clients that want a server-held selection
use the session endpoints instead.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from startaccount.analysis.availability import unavailable_heroes
from startaccount.analysis.multiset import build_hero_multiset
from startaccount.api.schemas import (
    AccountCardResponse,
    CatalogPageResponse,
    GameResponse,
    HeroBadgeResponse,
    PaletteEntryResponse,
    PaletteResponse,
)
from startaccount.config import settings
from startaccount.db import count_active_accounts_by_game, get_account, list_games
from startaccount.db.database import get_session
from startaccount.filtering.cards import build_account_card, list_account_heroes
from startaccount.filtering.window import CatalogWindow
from startaccount.models.catalog import Game
from startaccount.models.failure import NotFoundError
from startaccount.models.locale import Locale
from startaccount.services.catalog import (
    CatalogPage,
    filter_games,
    load_catalog_snapshot,
    render_catalog_page,
    render_palette,
    search_snapshot,
)

router = APIRouter(tags=["catalog"])

LocaleQuery = Annotated[Locale | None, Query(description="Display language (en or ru)")]


def resolve_locale(locale: Locale | None) -> Locale:
    return locale or Locale.parse(settings.default_locale)


def game_response(game: Game, locale: Locale, account_count: int = 0) -> GameResponse:
    return GameResponse(
        id=game.id,
        name=game.name.get(locale),
        description=game.description.get(locale),
        image=game.image,
        slug=game.slug,
        has_gacha_heroes=game.has_gacha_heroes,
        account_count=account_count,
    )


def catalog_page_response(page: CatalogPage) -> CatalogPageResponse:
    return CatalogPageResponse(
        state=page.state,
        message=page.message,
        total=page.total,
        visible=len(page.cards),
        has_more=page.has_more,
        accounts=[AccountCardResponse.model_validate(card) for card in page.cards],
    )


@router.get("/games", response_model=list[GameResponse])
async def get_games(
    session: Annotated[AsyncSession, Depends(get_session)],
    locale: LocaleQuery = None,
    q: Annotated[str | None, Query(description="Filter by game name")] = None,
) -> list[GameResponse]:
    """
    List games with the number of active accounts each has for sale.

    `q` keeps games whose name in the requested locale contains it.
    """
    active_locale = resolve_locale(locale)
    games = filter_games(await list_games(session), q, active_locale)
    counts = await count_active_accounts_by_game(session)
    return [game_response(game, active_locale, counts.get(game.id, 0)) for game in games]


@router.get("/games/{game_ref}", response_model=GameResponse)
async def get_game_detail(
    game_ref: str,
    session: Annotated[AsyncSession, Depends(get_session)],
    locale: LocaleQuery = None,
) -> GameResponse:
    """Get a game by id or slug."""
    snapshot = await load_catalog_snapshot(session, game_ref)
    return game_response(snapshot.game, resolve_locale(locale), len(snapshot.accounts))


@router.get("/games/{game_ref}/heroes", response_model=PaletteResponse)
async def get_hero_palette(
    game_ref: str,
    session: Annotated[AsyncSession, Depends(get_session)],
    locale: LocaleQuery = None,
    q: Annotated[str | None, Query(description="Filter by hero name")] = None,
    hero: Annotated[list[str] | None, Query(description="Currently picked hero ids")] = None,
) -> PaletteResponse:
    """
    Get the hero selection palette of a game.

    Heroes are ordered available-first, legendary before epic, by rarity,
    then by name in the requested locale.
    """
    active_locale = resolve_locale(locale)
    snapshot = await load_catalog_snapshot(session, game_ref)
    entries = render_palette(snapshot, active_locale, picks=hero or [], query=q)
    return PaletteResponse(
        game_id=snapshot.game.id,
        locale=active_locale,
        heroes=[PaletteEntryResponse.model_validate(entry) for entry in entries],
        unavailable=len(unavailable_heroes(snapshot.heroes, snapshot.availability)),
    )


@router.get("/games/{game_ref}/accounts", response_model=CatalogPageResponse)
async def search_accounts(
    game_ref: str,
    session: Annotated[AsyncSession, Depends(get_session)],
    locale: LocaleQuery = None,
    hero: Annotated[
        list[str] | None,
        Query(description="Picked hero ids; repeat an id to ask for duplicates"),
    ] = None,
    page: Annotated[int, Query(ge=1, le=1000)] = 1,
) -> CatalogPageResponse:
    """
    Search a game's active accounts by hero picks.

    Games with a hero roster return no accounts (state no_criteria) until
    at least one hero is picked. Games without one list every account.
    `page` is the number of "load more" steps revealed.
    """
    active_locale = resolve_locale(locale)
    picks = hero or []
    snapshot = await load_catalog_snapshot(session, game_ref)
    result = search_snapshot(snapshot, build_hero_multiset(picks))
    window = CatalogWindow.at_page(result.accounts, page)
    return catalog_page_response(
        render_catalog_page(snapshot, result, window, active_locale, picks)
    )


@router.get("/accounts/{account_id}", response_model=AccountCardResponse)
async def get_account_detail(
    account_id: str,
    session: Annotated[AsyncSession, Depends(get_session)],
    locale: LocaleQuery = None,
) -> AccountCardResponse:
    """Get one active account with its full description."""
    account = await get_account(session, account_id)
    if account is None or not account.is_active:
        raise NotFoundError("account", account_id)

    snapshot = await load_catalog_snapshot(session, account.game_id)
    card = build_account_card(
        account,
        snapshot.heroes_by_id,
        resolve_locale(locale),
        snapshot.availability,
        show_heroes=snapshot.game.has_gacha_heroes,
    )
    return AccountCardResponse.model_validate(card)


@router.get("/accounts/{account_id}/heroes", response_model=list[HeroBadgeResponse])
async def get_account_heroes(
    account_id: str,
    session: Annotated[AsyncSession, Depends(get_session)],
    locale: LocaleQuery = None,
) -> list[HeroBadgeResponse]:
    """Full "view all" listing of an account's unique heroes with copy counts."""
    account = await get_account(session, account_id)
    if account is None or not account.is_active:
        raise NotFoundError("account", account_id)

    snapshot = await load_catalog_snapshot(session, account.game_id)
    badges = list_account_heroes(
        account, snapshot.heroes_by_id, resolve_locale(locale), snapshot.availability
    )
    return [HeroBadgeResponse.model_validate(badge) for badge in badges]
