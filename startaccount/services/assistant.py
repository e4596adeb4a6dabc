"""
Shop assistant chat.

Answers customer questions using the whole catalog as context. The
catalog is loaded with three concurrent fetches (games, heroes, accounts);
if any of them fails the whole load fails and no partial context is used.

Two providers are supported, selected by the configuration record:
- "openai": any OpenAI-compatible chat completions endpoint (httpx)
- "anthropic": the Anthropic Messages API (anthropic SDK)
"""

import asyncio
import json
import logging
from dataclasses import dataclass, field
from typing import Any, cast

import anthropic
import httpx
from anthropic.types import MessageParam, TextBlock
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from startaccount.config import settings
from startaccount.db.operations import list_accounts, list_games, list_heroes
from startaccount.models.catalog import Account, Game, Hero
from startaccount.models.failure import (
    ConfigurationMissingError,
    DeliveryError,
    StoreUnavailableError,
)
from startaccount.models.locale import Locale
from startaccount.models.order import SiteConfiguration

logger = logging.getLogger(__name__)

CURRENCY = "RUB"
MAX_REPLY_TOKENS = 1024

LANGUAGE_NAMES = {Locale.EN: "English", Locale.RU: "Russian"}

SYSTEM_PROMPT = """You are the assistant of StartAccount, a marketplace of ready-made game accounts.

Games:
{games}

Heroes:
{heroes}

Accounts for sale:
{accounts}

Pricing:
{pricing}

Instructions:
1. You know every account, hero and price listed above
2. Give detailed information when asked about specific accounts or heroes
3. Help customers find accounts that match their wishes
4. Recommend accounts based on the customer's preferences
5. Purchases are requested through the "Buy" button; an operator then contacts the customer
6. Be friendly and professional

Answer in {language}."""


@dataclass
class ChatTurn:
    """One message of the conversation."""

    role: str  # user or assistant
    content: str


@dataclass
class AssistantContext:
    """Catalog data the assistant answers from."""

    games: list[Game] = field(default_factory=list)
    heroes: list[Hero] = field(default_factory=list)
    accounts: list[Account] = field(default_factory=list)

    def pricing(self) -> dict[str, Any]:
        prices = [account.price for account in self.accounts if account.is_active]
        return {
            "currency": CURRENCY,
            "min_price": min(prices, default=0),
            "max_price": max(prices, default=0),
        }


async def load_assistant_context(
    session_factory: async_sessionmaker[AsyncSession],
) -> AssistantContext:
    """
    Fetch games, heroes and accounts concurrently.

    Each fetch uses its own session. Any failure cancels the fetches still
    running and fails the whole load.

    Raises:
        StoreUnavailableError: If any of the three fetches hits a store error
    """

    async def fetch_games() -> list[Game]:
        async with session_factory() as session:
            return await list_games(session)

    async def fetch_heroes() -> list[Hero]:
        async with session_factory() as session:
            return await list_heroes(session)

    async def fetch_accounts() -> list[Account]:
        async with session_factory() as session:
            return await list_accounts(session)

    try:
        async with asyncio.TaskGroup() as tg:
            games = tg.create_task(fetch_games())
            heroes = tg.create_task(fetch_heroes())
            accounts = tg.create_task(fetch_accounts())
    except ExceptionGroup as group:
        store_errors = group.subgroup(SQLAlchemyError)
        if store_errors is None:
            raise
        logger.exception("Error loading assistant context")
        first = store_errors.exceptions[0]
        raise StoreUnavailableError(type(first).__name__) from group

    return AssistantContext(
        games=games.result(), heroes=heroes.result(), accounts=accounts.result()
    )


def build_system_prompt(context: AssistantContext, locale: Locale) -> str:
    """Render the catalog into the assistant's system prompt."""
    games = [
        {
            "id": game.id,
            "name": game.name.get(locale),
            "description": game.description.get(locale),
            "hero_selection": game.has_gacha_heroes,
        }
        for game in context.games
    ]
    hero_names = {hero.id: hero.name.get(locale) for hero in context.heroes}
    heroes = [
        {
            "id": hero.id,
            "game_id": hero.game_id,
            "name": hero.name.get(locale),
            "type": hero.type.value,
            "rarity": hero.rarity,
            "element": hero.element,
        }
        for hero in context.heroes
    ]
    accounts = [
        {
            "id": account.id,
            "game_id": account.game_id,
            "title": account.title.get(locale),
            "description": account.description.get(locale),
            "price": account.price,
            "heroes": [hero_names.get(hero_id, hero_id) for hero_id in account.heroes],
            "server": account.server,
            "level": account.level,
            "guaranteed": account.guaranteed,
        }
        for account in context.accounts
        if account.is_active
    ]
    return SYSTEM_PROMPT.format(
        games=json.dumps(games, ensure_ascii=False, indent=2),
        heroes=json.dumps(heroes, ensure_ascii=False, indent=2),
        accounts=json.dumps(accounts, ensure_ascii=False, indent=2),
        pricing=json.dumps(context.pricing(), ensure_ascii=False, indent=2),
        language=LANGUAGE_NAMES[locale],
    )


class AssistantClient:
    """
    Calls the configured AI provider.

    Args:
        config: Site configuration holding the endpoint, model and key
        http_client: Optional httpx client for the OpenAI-compatible provider
    """

    def __init__(
        self,
        config: SiteConfiguration,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        missing = config.missing_assistant_fields()
        if missing:
            raise ConfigurationMissingError("AI assistant", missing)
        self._config = config
        self._http_client = http_client

    async def reply(self, system_prompt: str, turns: list[ChatTurn]) -> str:
        """
        Get the assistant's next message.

        Raises:
            DeliveryError: The provider failed or returned an unusable reply
        """
        if self._config.ai_provider == "anthropic":
            return await self._reply_anthropic(system_prompt, turns)
        return await self._reply_openai(system_prompt, turns)

    async def _reply_openai(self, system_prompt: str, turns: list[ChatTurn]) -> str:
        payload = {
            "model": self._config.ai_model,
            "messages": [{"role": "system", "content": system_prompt}]
            + [{"role": turn.role, "content": turn.content} for turn in turns],
        }
        headers = {"Authorization": f"Bearer {self._config.ai_api_key}"}
        try:
            if self._http_client is not None:
                response = await self._http_client.post(
                    self._config.ai_api_url, json=payload, headers=headers
                )
            else:
                async with httpx.AsyncClient(timeout=settings.http_timeout_seconds) as client:
                    response = await client.post(
                        self._config.ai_api_url, json=payload, headers=headers
                    )
            response.raise_for_status()
            data = response.json()
            return str(data["choices"][0]["message"]["content"])
        except httpx.HTTPError as e:
            logger.error("AI endpoint request failed: %s", type(e).__name__)
            raise DeliveryError("AI assistant", detail=type(e).__name__) from e
        except (ValueError, KeyError, IndexError, TypeError) as e:
            logger.error("AI endpoint returned an unexpected payload")
            raise DeliveryError("AI assistant", detail="unexpected response format") from e

    async def _reply_anthropic(self, system_prompt: str, turns: list[ChatTurn]) -> str:
        client = anthropic.AsyncAnthropic(api_key=self._config.ai_api_key)
        messages: list[MessageParam] = [
            {"role": cast(Any, turn.role), "content": turn.content} for turn in turns
        ]
        try:
            response = await client.messages.create(
                model=self._config.ai_model,
                max_tokens=MAX_REPLY_TOKENS,
                system=system_prompt,
                messages=messages,
            )
        except anthropic.APIError as e:
            logger.error("Anthropic request failed: %s", type(e).__name__)
            raise DeliveryError("AI assistant", detail=type(e).__name__) from e

        if response.usage:
            logger.info(
                "token_usage",
                extra={
                    "input_tokens": response.usage.input_tokens,
                    "output_tokens": response.usage.output_tokens,
                },
            )
        return "".join(block.text for block in response.content if isinstance(block, TextBlock))
