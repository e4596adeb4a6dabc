"""
Discovery session endpoints.

A session holds one customer's locale, chosen game and hero picks on the
server and walks the discovery state machine. Sessions are in-memory and
scoped to the running process.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response, status
from pydantic import BaseModel, Field

from startaccount.api.catalog import catalog_page_response, game_response, resolve_locale
from startaccount.api.schemas import CatalogPageResponse, GameResponse, PaletteEntryResponse
from startaccount.db.database import async_session_factory
from startaccount.models.locale import Locale
from startaccount.services.catalog import (
    CatalogSnapshot,
    load_catalog_snapshot,
    render_catalog_page,
    render_palette,
)
from startaccount.services.discovery import DiscoverySession, DiscoveryState, SessionRegistry

router = APIRouter(prefix="/sessions", tags=["sessions"])


async def _load_snapshot(game_ref: str) -> CatalogSnapshot:
    async with async_session_factory() as session:
        return await load_catalog_snapshot(session, game_ref)


_registry = SessionRegistry(_load_snapshot)


def get_registry() -> SessionRegistry:
    """Dependency providing the process-wide session registry."""
    return _registry


class SessionCreateRequest(BaseModel):
    locale: Locale | None = None


class GameSelectRequest(BaseModel):
    game: str = Field(..., min_length=1, description="Game id or slug")


class HeroPickRequest(BaseModel):
    hero_id: str = Field(..., min_length=1)


class LocaleRequest(BaseModel):
    locale: Locale


class SessionResponse(BaseModel):
    """Everything the client needs to render the discovery flow."""

    session_id: str
    state: DiscoveryState
    locale: Locale
    applied: bool = Field(
        default=True,
        description="False when a newer game selection superseded this request",
    )
    game: GameResponse | None = None
    picks: dict[str, int] = Field(default_factory=dict)
    palette: list[PaletteEntryResponse] = Field(default_factory=list)
    catalog: CatalogPageResponse | None = None


def _session_response(
    session_id: str,
    discovery: DiscoverySession,
    applied: bool = True,
    query: str | None = None,
) -> SessionResponse:
    snapshot = discovery.snapshot
    locale = discovery.locale
    response = SessionResponse(
        session_id=session_id,
        state=discovery.state,
        locale=locale,
        applied=applied,
    )
    if snapshot is None:
        return response

    response.game = game_response(snapshot.game, locale, len(snapshot.accounts))
    response.picks = {hero_id: discovery.picks.count(hero_id) for hero_id in discovery.picks}
    response.palette = [
        PaletteEntryResponse.model_validate(entry)
        for entry in render_palette(snapshot, locale, discovery.picks, query)
    ]
    if discovery.result is not None:
        response.catalog = catalog_page_response(
            render_catalog_page(
                snapshot, discovery.result, discovery.window, locale, discovery.picks
            )
        )
    return response


@router.post("", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
async def create_session(
    request: SessionCreateRequest,
    registry: Annotated[SessionRegistry, Depends(get_registry)],
) -> SessionResponse:
    """Start a new discovery session with no game selected."""
    session_id, discovery = registry.create(resolve_locale(request.locale))
    return _session_response(session_id, discovery)


@router.get("/{session_id}", response_model=SessionResponse)
async def get_session_view(
    session_id: str,
    registry: Annotated[SessionRegistry, Depends(get_registry)],
    q: Annotated[str | None, Query(description="Filter the palette by hero name")] = None,
) -> SessionResponse:
    return _session_response(session_id, registry.get(session_id), query=q)


@router.post("/{session_id}/game", response_model=SessionResponse)
async def select_game(
    session_id: str,
    request: GameSelectRequest,
    registry: Annotated[SessionRegistry, Depends(get_registry)],
) -> SessionResponse:
    """Select a game. Discards any hero picks."""
    discovery = registry.get(session_id)
    applied = await discovery.select_game(request.game)
    return _session_response(session_id, discovery, applied=applied)


@router.post("/{session_id}/heroes", response_model=SessionResponse)
async def pick_hero(
    session_id: str,
    request: HeroPickRequest,
    registry: Annotated[SessionRegistry, Depends(get_registry)],
) -> SessionResponse:
    """Add one copy of a hero to the selection."""
    discovery = registry.get(session_id)
    discovery.pick_hero(request.hero_id)
    return _session_response(session_id, discovery)


@router.delete("/{session_id}/heroes/{hero_id}", response_model=SessionResponse)
async def remove_hero(
    session_id: str,
    hero_id: str,
    registry: Annotated[SessionRegistry, Depends(get_registry)],
) -> SessionResponse:
    """Remove one copy of a hero from the selection."""
    discovery = registry.get(session_id)
    discovery.remove_hero(hero_id)
    return _session_response(session_id, discovery)


@router.post("/{session_id}/search", response_model=SessionResponse)
async def search(
    session_id: str,
    registry: Annotated[SessionRegistry, Depends(get_registry)],
) -> SessionResponse:
    """Run the search with the current picks against fresh catalog data."""
    discovery = registry.get(session_id)
    applied = await discovery.search()
    return _session_response(session_id, discovery, applied=applied)


@router.post("/{session_id}/more", response_model=SessionResponse)
async def load_more(
    session_id: str,
    registry: Annotated[SessionRegistry, Depends(get_registry)],
) -> SessionResponse:
    """Reveal the next page of results. Does nothing once all are shown."""
    discovery = registry.get(session_id)
    discovery.load_more()
    return _session_response(session_id, discovery)


@router.put("/{session_id}/locale", response_model=SessionResponse)
async def set_locale(
    session_id: str,
    request: LocaleRequest,
    registry: Annotated[SessionRegistry, Depends(get_registry)],
) -> SessionResponse:
    """Switch the session language. The palette is re-sorted for it."""
    discovery = registry.get(session_id)
    discovery.set_locale(request.locale)
    return _session_response(session_id, discovery)


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def end_session(
    session_id: str,
    registry: Annotated[SessionRegistry, Depends(get_registry)],
) -> Response:
    registry.drop(session_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
