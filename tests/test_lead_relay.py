"""Tests for relaying purchase leads to the operator."""

import json

import httpx
import pytest
import respx
from sqlalchemy.ext.asyncio import AsyncSession

from startaccount.db.operations import get_recent_orders, save_configuration
from startaccount.models.catalog import Account, Game
from startaccount.models.failure import (
    ConfigurationMissingError,
    DeliveryError,
    LeadValidationError,
    NotFoundError,
)
from startaccount.models.locale import Locale, LocalizedText
from startaccount.models.order import ContactMethod, OrderStatus, SiteConfiguration
from startaccount.services.lead_relay import (
    LeadRequest,
    TelegramNotifier,
    build_lead_message,
    submit_lead,
    validate_lead,
)

SEND_URL = "https://api.telegram.org/bot123:abc/sendMessage"


@pytest.fixture
async def configured_session(seeded_session: AsyncSession) -> AsyncSession:
    await save_configuration(
        seeded_session,
        SiteConfiguration(telegram_bot_token="123:abc", telegram_chat_id="-100500"),
    )
    await seeded_session.commit()
    return seeded_session


def _lead(**overrides) -> LeadRequest:
    fields = {
        "account_id": "acc-1",
        "contact_method": "telegram",
        "contact_value": "@buyer",
        "consent": True,
    }
    fields.update(overrides)
    return LeadRequest(**fields)


class TestValidateLead:
    def test_valid(self) -> None:
        method, contact = validate_lead(_lead(contact_value="  @buyer  "))

        assert method is ContactMethod.TELEGRAM
        assert contact == "@buyer"

    @pytest.mark.parametrize(
        "overrides",
        [
            {"contact_method": None},
            {"contact_method": "pigeon"},
            {"contact_value": ""},
            {"contact_value": "   "},
            {"consent": False},
        ],
    )
    def test_incomplete(self, overrides: dict) -> None:
        with pytest.raises(LeadValidationError):
            validate_lead(_lead(**overrides))


class TestBuildLeadMessage:
    @pytest.fixture
    def account(self) -> Account:
        return Account(
            id="acc-1",
            game_id="genshin",
            title=LocalizedText(en="Raiden <C1>", ru="Райдэн <C1>"),
            price=1500.0,
        )

    @pytest.fixture
    def game(self) -> Game:
        return Game(id="genshin", name=LocalizedText(en="Genshin", ru="Геншин"))

    def test_deterministic(self, account: Account, game: Game) -> None:
        """Same inputs always produce the same message."""
        first = build_lead_message(account, game, ContactMethod.PHONE, "+7 900", Locale.RU)
        second = build_lead_message(account, game, ContactMethod.PHONE, "+7 900", Locale.RU)

        assert first == second

    def test_contents(self, account: Account, game: Game) -> None:
        message = build_lead_message(account, game, ContactMethod.PHONE, "+7 900", Locale.RU)

        assert "Новая заявка" in message
        assert "Геншин" in message
        assert "1500 ₽" in message
        assert "Телефон" in message
        assert "+7 900" in message

    def test_escapes_markup(self, account: Account, game: Game) -> None:
        """User text cannot inject HTML into the operator message."""
        message = build_lead_message(
            account, game, ContactMethod.OTHER, "<b>boss</b>", Locale.EN
        )

        assert "&lt;b&gt;boss&lt;/b&gt;" in message
        assert "Raiden &lt;C1&gt;" in message


class TestTelegramNotifier:
    @respx.mock
    async def test_sends_html_message(self) -> None:
        route = respx.post(SEND_URL).mock(
            return_value=httpx.Response(200, json={"ok": True, "result": {}})
        )

        await TelegramNotifier("123:abc", "-100500").send("hello")

        assert route.called
        payload = json.loads(route.calls.last.request.content)
        assert payload == {"chat_id": "-100500", "text": "hello", "parse_mode": "HTML"}

    @respx.mock
    async def test_http_error(self) -> None:
        respx.post(SEND_URL).mock(return_value=httpx.Response(400, json={"ok": False}))

        with pytest.raises(DeliveryError):
            await TelegramNotifier("123:abc", "-100500").send("hello")

    @respx.mock
    async def test_ok_false(self) -> None:
        """A 200 reply with ok=false is still a failure."""
        respx.post(SEND_URL).mock(
            return_value=httpx.Response(200, json={"ok": False, "description": "chat not found"})
        )

        with pytest.raises(DeliveryError) as exc_info:
            await TelegramNotifier("123:abc", "-100500").send("hello")

        assert exc_info.value.detail == "chat not found"

    @respx.mock
    async def test_transport_error(self) -> None:
        respx.post(SEND_URL).mock(side_effect=httpx.ConnectError("boom"))

        with pytest.raises(DeliveryError):
            await TelegramNotifier("123:abc", "-100500").send("hello")


class TestSubmitLead:
    @respx.mock
    async def test_success_records_pending_order(self, configured_session: AsyncSession) -> None:
        route = respx.post(SEND_URL).mock(return_value=httpx.Response(200, json={"ok": True}))

        order = await submit_lead(configured_session, _lead())

        assert route.call_count == 1
        assert order.id is not None
        assert order.status is OrderStatus.PENDING
        assert order.price == 1500.0
        assert order.contact_method is ContactMethod.TELEGRAM
        assert order.contact_value == "@buyer"

    @respx.mock
    async def test_delivery_failure_records_nothing(
        self, configured_session: AsyncSession
    ) -> None:
        """A failed delivery raises, records no order and is not retried."""
        route = respx.post(SEND_URL).mock(return_value=httpx.Response(502))

        with pytest.raises(DeliveryError):
            await submit_lead(configured_session, _lead())

        assert route.call_count == 1
        assert await get_recent_orders(configured_session, 5) == []

    @respx.mock
    async def test_missing_configuration(self, seeded_session: AsyncSession) -> None:
        """Without a bot token and chat id nothing is sent."""
        route = respx.post(SEND_URL)

        with pytest.raises(ConfigurationMissingError) as exc_info:
            await submit_lead(seeded_session, _lead())

        assert "telegram_bot_token" in exc_info.value.missing
        assert not route.called
        assert await get_recent_orders(seeded_session, 5) == []

    async def test_sold_account_rejected(self, configured_session: AsyncSession) -> None:
        with pytest.raises(NotFoundError):
            await submit_lead(configured_session, _lead(account_id="acc-3"))

    async def test_validation_before_anything_else(
        self, configured_session: AsyncSession
    ) -> None:
        with pytest.raises(LeadValidationError):
            await submit_lead(configured_session, _lead(consent=False))
