"""
Purchase lead relay.

A lead is a customer's request to buy an account. It is forwarded as a
text message to the shop operator through the Telegram Bot API, and a
pending order is recorded only once the operator has actually been told.

Failure handling:
- Incomplete lead (method, contact or consent missing) -> LeadValidationError
- Lead channel not configured -> ConfigurationMissingError
- Telegram unreachable or rejecting the message -> DeliveryError, no order
No step is retried automatically.
"""

import html
import logging
from dataclasses import dataclass

import httpx
from sqlalchemy.ext.asyncio import AsyncSession

from startaccount.config import settings
from startaccount.db.operations import create_order, get_account, get_configuration, get_game
from startaccount.models.catalog import Account, Game
from startaccount.models.failure import (
    ConfigurationMissingError,
    DeliveryError,
    LeadValidationError,
    NotFoundError,
)
from startaccount.models.locale import Locale
from startaccount.models.order import ContactMethod, Order
from startaccount.services.messages import (
    CONTACT_METHOD_LABELS,
    CURRENCY_SYMBOL,
    LEAD_MESSAGE_LABELS,
    format_price,
)

logger = logging.getLogger(__name__)


@dataclass
class LeadRequest:
    """A customer's purchase request as submitted from the purchase form."""

    account_id: str
    contact_method: str | None
    contact_value: str | None
    consent: bool


def validate_lead(request: LeadRequest) -> tuple[ContactMethod, str]:
    """
    Check the preconditions of a lead.

    Returns:
        The parsed contact method and the stripped contact value

    Raises:
        LeadValidationError: Missing method, missing contact or no consent
    """
    if not request.contact_method:
        raise LeadValidationError("contact method is required")
    try:
        method = ContactMethod(request.contact_method)
    except ValueError as e:
        raise LeadValidationError(f"unknown contact method {request.contact_method!r}") from e

    contact = (request.contact_value or "").strip()
    if not contact:
        raise LeadValidationError("contact value is required")
    if not request.consent:
        raise LeadValidationError("consent is required")
    return method, contact


def build_lead_message(
    account: Account,
    game: Game,
    contact_method: ContactMethod,
    contact_value: str,
    locale: Locale,
) -> str:
    """
    Build the operator notification for a lead.

    Deterministic for the same inputs. User-supplied text is HTML-escaped
    because the message is sent with HTML parse mode.
    """
    labels = LEAD_MESSAGE_LABELS[locale]
    lines = [
        labels["header"],
        "",
        f"{labels['game']}: {html.escape(game.name.get(locale))}",
        f"{labels['account']}: {html.escape(account.title.get(locale))}",
        f"{labels['price']}: {format_price(account.price)} {CURRENCY_SYMBOL}",
        f"{labels['method']}: {CONTACT_METHOD_LABELS[contact_method][locale]}",
        f"{labels['contact']}: {html.escape(contact_value)}",
    ]
    return "\n".join(lines)


class TelegramNotifier:
    """
    Sends operator messages through the Telegram Bot API.

    Args:
        bot_token: Bot token from the configuration record
        chat_id: Operator chat id
        client: Optional shared httpx client (a private one is used otherwise)
    """

    def __init__(
        self,
        bot_token: str,
        chat_id: str,
        client: httpx.AsyncClient | None = None,
        api_base: str | None = None,
    ) -> None:
        self._bot_token = bot_token
        self._chat_id = chat_id
        self._client = client
        self._api_base = (api_base or settings.telegram_api_base).rstrip("/")

    @property
    def endpoint(self) -> str:
        return f"{self._api_base}/bot{self._bot_token}/sendMessage"

    async def send(self, text: str) -> None:
        """
        Deliver one message.

        Raises:
            DeliveryError: Transport failure, non-2xx status or ok=false reply
        """
        payload = {"chat_id": self._chat_id, "text": text, "parse_mode": "HTML"}
        try:
            if self._client is not None:
                response = await self._client.post(self.endpoint, json=payload)
            else:
                async with httpx.AsyncClient(timeout=settings.http_timeout_seconds) as client:
                    response = await client.post(self.endpoint, json=payload)
        except httpx.HTTPError as e:
            logger.error("Failed to reach Telegram: %s", type(e).__name__)
            raise DeliveryError("messaging service", detail=type(e).__name__) from e

        if response.is_error:
            logger.error("Telegram rejected lead message: HTTP %d", response.status_code)
            raise DeliveryError("messaging service", detail=f"HTTP {response.status_code}")

        try:
            body = response.json()
        except ValueError:
            body = {}
        if isinstance(body, dict) and body.get("ok") is False:
            description = str(body.get("description") or "rejected")
            logger.error("Telegram rejected lead message: %s", description)
            raise DeliveryError("messaging service", detail=description)


async def submit_lead(
    session: AsyncSession,
    request: LeadRequest,
    locale: Locale | None = None,
    client: httpx.AsyncClient | None = None,
) -> Order:
    """
    Relay a lead to the operator and record it as a pending order.

    The order is written only after Telegram accepted the message.

    Args:
        session: Database session
        request: The submitted lead
        locale: Language of the operator message (settings.operator_locale by default)
        client: Optional httpx client for the Telegram call

    Returns:
        The recorded pending order
    """
    method, contact = validate_lead(request)

    account = await get_account(session, request.account_id)
    if account is None or not account.is_active:
        raise NotFoundError("account", request.account_id)
    game = await get_game(session, account.game_id)
    if game is None:
        raise NotFoundError("game", account.game_id)

    config = await get_configuration(session)
    if not config.lead_channel_ready():
        missing = [
            name
            for name, value in (
                ("telegram_bot_token", config.telegram_bot_token),
                ("telegram_chat_id", config.telegram_chat_id),
            )
            if not value.strip()
        ]
        logger.warning("Lead rejected: lead channel not configured")
        raise ConfigurationMissingError("purchase request channel", missing)

    message_locale = locale or Locale.parse(settings.operator_locale)
    text = build_lead_message(account, game, method, contact, message_locale)
    notifier = TelegramNotifier(config.telegram_bot_token, config.telegram_chat_id, client)
    await notifier.send(text)

    order = await create_order(
        session,
        Order(
            account_id=account.id,
            price=account.price,
            contact_method=method,
            contact_value=contact,
        ),
    )
    logger.info(
        "Lead relayed",
        extra={"order_id": order.id, "account_id": account.id, "method": method.value},
    )
    return order
