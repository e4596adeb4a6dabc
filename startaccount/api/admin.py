"""
Administrative endpoints.

Catalog CRUD, the site configuration record and the operator dashboard.
Payloads are loosely typed records (camelCase or snake_case keys) that go
through the same parser as store rows, so a malformed payload is rejected
with 422 before anything is written.

All routes require the X-Admin-Token header when settings.admin_token is set.
"""

import logging
import secrets
from dataclasses import asdict
from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Header, HTTPException, Query, Response, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from startaccount.config import RECENT_ORDERS_LIMIT, settings
from startaccount.db import (
    count_rows,
    delete_account,
    delete_game,
    delete_hero,
    get_configuration,
    get_recent_orders,
    list_accounts,
    list_games,
    list_heroes,
    save_configuration,
    set_account_status,
    upsert_account,
    upsert_game,
    upsert_hero,
)
from startaccount.db.database import get_session
from startaccount.models.catalog import AccountStatus
from startaccount.models.db import AccountDB, GameDB, OrderDB
from startaccount.models.failure import NotFoundError
from startaccount.models.order import SiteConfiguration

logger = logging.getLogger(__name__)


async def require_admin(
    x_admin_token: Annotated[str | None, Header()] = None,
) -> None:
    """Reject requests without the configured admin token."""
    expected = settings.admin_token
    if not expected:
        return
    if x_admin_token is None or not secrets.compare_digest(x_admin_token, expected):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or missing admin token",
        )


router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])

Record = Annotated[dict[str, Any], Body(description="Catalog record")]


def _bad_request(e: ValueError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


class StatusUpdateRequest(BaseModel):
    status: AccountStatus


class SettingsPayload(BaseModel):
    """The singleton configuration record."""

    telegram_bot_token: str = ""
    telegram_chat_id: str = ""
    ai_api_key: str = ""
    ai_api_url: str = ""
    ai_model: str = ""
    ai_provider: str = Field(default="openai", pattern="^(openai|anthropic)$")


class OrderSummary(BaseModel):
    id: int | None
    account_id: str
    price: float
    contact_method: str
    contact_value: str
    status: str
    created_at: str | None = None


class DashboardResponse(BaseModel):
    accounts: int
    games: int
    orders: int
    recent_orders: list[OrderSummary] = Field(default_factory=list)


# --- Games ---


@router.get("/games")
async def admin_list_games(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> list[dict[str, Any]]:
    return [asdict(game) for game in await list_games(session)]


@router.put("/games/{game_id}")
async def admin_put_game(
    game_id: str,
    record: Record,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> dict[str, Any]:
    """Create or replace a game. Refused (409) if the slug is taken."""
    game = await upsert_game(session, {**record, "id": game_id})
    logger.info("Game saved", extra={"game_id": game.id})
    return asdict(game)


@router.delete("/games/{game_id}", status_code=status.HTTP_204_NO_CONTENT)
async def admin_delete_game(
    game_id: str,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> Response:
    """Delete a game and its heroes. Refused (409) while accounts remain."""
    if not await delete_game(session, game_id):
        raise NotFoundError("game", game_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# --- Heroes ---


@router.get("/heroes")
async def admin_list_heroes(
    session: Annotated[AsyncSession, Depends(get_session)],
    game_id: str | None = None,
) -> list[dict[str, Any]]:
    return [asdict(hero) for hero in await list_heroes(session, game_id)]


@router.put("/heroes/{hero_id}")
async def admin_put_hero(
    hero_id: str,
    record: Record,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> dict[str, Any]:
    """
    Create or replace a hero. The game must exist.

    Moving a hero to another game is refused (409) while accounts list it.
    """
    try:
        hero = await upsert_hero(session, {**record, "id": hero_id})
    except ValueError as e:
        raise _bad_request(e) from e
    return asdict(hero)


@router.delete("/heroes/{hero_id}", status_code=status.HTTP_204_NO_CONTENT)
async def admin_delete_hero(
    hero_id: str,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> Response:
    """Delete a hero. Refused (409) while any account roster lists it."""
    if not await delete_hero(session, hero_id):
        raise NotFoundError("hero", hero_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# --- Accounts ---


@router.get("/accounts")
async def admin_list_accounts(
    session: Annotated[AsyncSession, Depends(get_session)],
    game_id: str | None = None,
    status_filter: Annotated[AccountStatus | None, Query(alias="status")] = None,
) -> list[dict[str, Any]]:
    """All accounts regardless of status, optionally filtered."""
    accounts = await list_accounts(session, game_id=game_id, status=status_filter)
    return [asdict(account) for account in accounts]


@router.put("/accounts/{account_id}")
async def admin_put_account(
    account_id: str,
    record: Record,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> dict[str, Any]:
    """Create or replace an account. Its heroes must belong to its game."""
    try:
        account = await upsert_account(session, {**record, "id": account_id})
    except ValueError as e:
        raise _bad_request(e) from e
    logger.info(
        "Account saved",
        extra={"account_id": account.id, "status": account.status.value},
    )
    return asdict(account)


@router.patch("/accounts/{account_id}/status")
async def admin_set_account_status(
    account_id: str,
    request: StatusUpdateRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> dict[str, Any]:
    """Change an account's status (e.g. mark it sold)."""
    account = await set_account_status(session, account_id, request.status)
    if account is None:
        raise NotFoundError("account", account_id)
    return asdict(account)


@router.delete("/accounts/{account_id}", status_code=status.HTTP_204_NO_CONTENT)
async def admin_delete_account(
    account_id: str,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> Response:
    if not await delete_account(session, account_id):
        raise NotFoundError("account", account_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# --- Settings ---


@router.get("/settings", response_model=SettingsPayload)
async def admin_get_settings(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> SettingsPayload:
    return SettingsPayload(**asdict(await get_configuration(session)))


@router.put("/settings", response_model=SettingsPayload)
async def admin_put_settings(
    payload: SettingsPayload,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> SettingsPayload:
    """Replace the configuration record, creating it on first save."""
    config = await save_configuration(session, SiteConfiguration(**payload.model_dump()))
    logger.info(
        "Configuration saved",
        extra={"lead_channel_ready": config.lead_channel_ready(), "provider": config.ai_provider},
    )
    return SettingsPayload(**asdict(config))


# --- Dashboard ---


@router.get("/dashboard", response_model=DashboardResponse)
async def admin_dashboard(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> DashboardResponse:
    """Row counts and the most recent orders."""
    orders = await get_recent_orders(session, RECENT_ORDERS_LIMIT)
    return DashboardResponse(
        accounts=await count_rows(session, AccountDB),
        games=await count_rows(session, GameDB),
        orders=await count_rows(session, OrderDB),
        recent_orders=[
            OrderSummary(
                id=order.id,
                account_id=order.account_id,
                price=order.price,
                contact_method=order.contact_method.value,
                contact_value=order.contact_value,
                status=order.status.value,
                created_at=order.created_at.isoformat() if order.created_at else None,
            )
            for order in orders
        ],
    )
