"""
Purchase notification endpoint.

Feeds the storefront's "recently purchased" popup.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from startaccount.api.catalog import LocaleQuery, resolve_locale
from startaccount.db import list_active_accounts, list_heroes
from startaccount.db.database import get_session
from startaccount.services.purchase_notifications import generate_purchase_notification

router = APIRouter(prefix="/notifications", tags=["notifications"])


class PurchaseNotificationResponse(BaseModel):
    game_id: str
    account_title: str
    heroes: list[str]
    time_ago: str
    price: float


@router.get(
    "/purchase",
    response_model=PurchaseNotificationResponse,
    responses={204: {"description": "No active accounts to sample"}},
)
async def get_purchase_notification(
    session: Annotated[AsyncSession, Depends(get_session)],
    locale: LocaleQuery = None,
) -> PurchaseNotificationResponse | Response:
    """Sample one synthetic purchase notification."""
    accounts = await list_active_accounts(session)
    heroes_by_id = {hero.id: hero for hero in await list_heroes(session)}
    notification = generate_purchase_notification(
        accounts, resolve_locale(locale), heroes_by_id
    )
    if notification is None:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    return PurchaseNotificationResponse(
        game_id=notification.game_id,
        account_title=notification.account_title,
        heroes=notification.heroes,
        time_ago=notification.time_ago,
        price=notification.price,
    )
