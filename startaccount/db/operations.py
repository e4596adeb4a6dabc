"""
Database CRUD operations.

Reads return typed domain entities: every row goes through the record
parser, and rows that fail to parse are dropped rather than surfaced.
Writes validate their payload through the same parser before touching
the database.
"""

from collections.abc import Mapping
from typing import Any

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from startaccount.models.catalog import Account, AccountStatus, Game, Hero
from startaccount.models.db import AccountDB, Base, ConfigurationDB, GameDB, HeroDB, OrderDB
from startaccount.models.failure import CatalogConflictError
from startaccount.models.order import ContactMethod, Order, OrderStatus, SiteConfiguration
from startaccount.parsers.records import (
    parse_account,
    parse_game,
    parse_hero,
    parse_many,
    parse_roster,
)


# Server-generated; may be expired after a flush and are not catalog data
_BOOKKEEPING_COLUMNS = frozenset({"created_at", "updated_at"})


def row_to_record(row: Base) -> dict[str, Any]:
    """Flatten an ORM row into a plain column -> value mapping."""
    return {
        column.key: getattr(row, column.key)
        for column in row.__table__.columns
        if column.key not in _BOOKKEEPING_COLUMNS
    }


# --- Game Operations ---


async def list_games(session: AsyncSession) -> list[Game]:
    """All games in catalog order."""
    result = await session.execute(select(GameDB).order_by(GameDB.created_at, GameDB.id))
    return parse_many((row_to_record(row) for row in result.scalars()), parse_game)


async def get_game(session: AsyncSession, game_ref: str) -> Game | None:
    """
    Get a game by id or slug. An id match wins over a slug match.

    Returns None if no such game exists or its record is malformed.
    """
    row = await session.get(GameDB, game_ref)
    if row is None:
        result = await session.execute(select(GameDB).where(GameDB.slug == game_ref))
        row = result.scalar_one_or_none()
    if row is None:
        return None
    games = parse_many([row_to_record(row)], parse_game)
    return games[0] if games else None


async def upsert_game(session: AsyncSession, record: Mapping[str, Any]) -> Game:
    """
    Insert or update a game from an admin payload.

    Raises:
        RecordParseError: Payload is malformed
        CatalogConflictError: The slug is another game's slug or id
    """
    game = parse_game(record)
    result = await session.execute(
        select(GameDB.id).where(
            GameDB.id != game.id,
            (GameDB.slug == game.slug) | (GameDB.id == game.slug),
        )
    )
    taken_by = result.scalars().first()
    if taken_by is not None:
        raise CatalogConflictError(
            "game", game.id, f"Slug '{game.slug}' is already used by game '{taken_by}'"
        )

    row = await session.get(GameDB, game.id)
    if row is None:
        row = GameDB(id=game.id)
        session.add(row)

    row.name_en = game.name.en
    row.name_ru = game.name.ru
    row.description_en = game.description.en
    row.description_ru = game.description.ru
    row.image = game.image
    row.slug = game.slug
    row.has_gacha_heroes = game.has_gacha_heroes
    await session.flush()
    return game


async def delete_game(session: AsyncSession, game_id: str) -> bool:
    """
    Delete a game and its heroes.

    Returns True if deleted, False if not found.
    Raises CatalogConflictError while accounts still reference the game.
    """
    row = await session.get(GameDB, game_id)
    if row is None:
        return False

    remaining = await session.execute(
        select(func.count()).select_from(AccountDB).where(AccountDB.game_id == game_id)
    )
    if remaining.scalar_one():
        raise CatalogConflictError(
            "game", game_id, "The game still has accounts; delete or move them first"
        )

    await session.execute(delete(HeroDB).where(HeroDB.game_id == game_id))
    await session.delete(row)
    await session.flush()
    return True


# --- Hero Operations ---


async def list_heroes(session: AsyncSession, game_id: str | None = None) -> list[Hero]:
    """Heroes of one game, or of every game when `game_id` is None."""
    query = select(HeroDB)
    if game_id is not None:
        query = query.where(HeroDB.game_id == game_id)
    result = await session.execute(query)
    return parse_many((row_to_record(row) for row in result.scalars()), parse_hero)


async def accounts_listing_hero(session: AsyncSession, hero_id: str, game_id: str) -> list[str]:
    """Ids of the accounts of `game_id` whose roster lists the hero, any status."""
    result = await session.execute(
        select(AccountDB.id, AccountDB.heroes)
        .where(AccountDB.game_id == game_id)
        .order_by(AccountDB.id)
    )
    return [account_id for account_id, roster in result.all() if hero_id in parse_roster(roster)]


async def _ensure_hero_unlisted(
    session: AsyncSession, hero_id: str, game_id: str, action: str
) -> None:
    listed_on = await accounts_listing_hero(session, hero_id, game_id)
    if listed_on:
        raise CatalogConflictError(
            "hero",
            hero_id,
            f"Cannot {action} a hero listed on accounts: {', '.join(listed_on)}",
        )


async def upsert_hero(session: AsyncSession, record: Mapping[str, Any]) -> Hero:
    """
    Insert or update a hero.

    Raises:
        RecordParseError: Payload is malformed
        ValueError: The game is unknown
        CatalogConflictError: Moving the hero to another game while
            accounts of its current game list it
    """
    hero = parse_hero(record)
    if await session.get(GameDB, hero.game_id) is None:
        msg = f"Hero '{hero.id}' references unknown game '{hero.game_id}'"
        raise ValueError(msg)

    row = await session.get(HeroDB, hero.id)
    if row is None:
        row = HeroDB(id=hero.id, game_id=hero.game_id)
        session.add(row)
    elif row.game_id != hero.game_id:
        await _ensure_hero_unlisted(session, hero.id, row.game_id, "move")

    row.game_id = hero.game_id
    row.name_en = hero.name.en
    row.name_ru = hero.name.ru
    row.icon = hero.icon
    row.type = hero.type.value
    row.rarity = hero.rarity
    row.element = hero.element
    await session.flush()
    return hero


async def delete_hero(session: AsyncSession, hero_id: str) -> bool:
    """
    Delete a hero. Returns True if deleted, False if not found.

    Raises CatalogConflictError while any account roster lists the hero.
    """
    row = await session.get(HeroDB, hero_id)
    if row is None:
        return False
    await _ensure_hero_unlisted(session, hero_id, row.game_id, "delete")
    await session.delete(row)
    await session.flush()
    return True


# --- Account Operations ---


async def list_accounts(
    session: AsyncSession,
    game_id: str | None = None,
    status: AccountStatus | None = None,
) -> list[Account]:
    """
    Accounts filtered by game and/or status, oldest first.

    Ties on the creation time are broken by id, so the order is stable
    across calls.
    """
    query = select(AccountDB).order_by(AccountDB.created_at, AccountDB.id)
    if game_id is not None:
        query = query.where(AccountDB.game_id == game_id)
    if status is not None:
        query = query.where(AccountDB.status == status.value)
    result = await session.execute(query)
    return parse_many((row_to_record(row) for row in result.scalars()), parse_account)


async def list_active_accounts(session: AsyncSession, game_id: str | None = None) -> list[Account]:
    """Accounts eligible for customer-facing views."""
    return await list_accounts(session, game_id=game_id, status=AccountStatus.ACTIVE)


async def count_active_accounts_by_game(session: AsyncSession) -> dict[str, int]:
    """Number of active accounts per game id. Games without any are absent."""
    result = await session.execute(
        select(AccountDB.game_id, func.count())
        .where(AccountDB.status == AccountStatus.ACTIVE.value)
        .group_by(AccountDB.game_id)
    )
    return {game_id: count for game_id, count in result.all()}


async def get_account(session: AsyncSession, account_id: str) -> Account | None:
    """Get an account by id. Returns None if missing or malformed."""
    row = await session.get(AccountDB, account_id)
    if row is None:
        return None
    accounts = parse_many([row_to_record(row)], parse_account)
    return accounts[0] if accounts else None


async def upsert_account(session: AsyncSession, record: Mapping[str, Any]) -> Account:
    """
    Insert or update an account.

    The roster is validated against the game's hero catalog: every hero
    must belong to the account's game.

    Raises:
        RecordParseError: Payload is malformed
        ValueError: Unknown game or heroes from another game
    """
    account = parse_account(record)
    if await session.get(GameDB, account.game_id) is None:
        msg = f"Account '{account.id}' references unknown game '{account.game_id}'"
        raise ValueError(msg)

    if account.heroes:
        result = await session.execute(
            select(HeroDB.id).where(
                HeroDB.game_id == account.game_id,
                HeroDB.id.in_(set(account.heroes)),
            )
        )
        known = set(result.scalars())
        foreign = sorted(set(account.heroes) - known)
        if foreign:
            msg = f"Heroes not in game '{account.game_id}': {', '.join(foreign)}"
            raise ValueError(msg)

    row = await session.get(AccountDB, account.id)
    if row is None:
        row = AccountDB(id=account.id, game_id=account.game_id)
        session.add(row)

    row.game_id = account.game_id
    row.title_en = account.title.en
    row.title_ru = account.title.ru
    row.description_en = account.description.en
    row.description_ru = account.description.ru
    row.price = account.price
    row.image = account.image
    row.server = account.server
    row.adventure_rank = account.level
    row.guaranteed = account.guaranteed
    row.status = account.status.value
    row.heroes = list(account.heroes)
    row.resources = [{"name": r.name, "value": r.value} for r in account.resources]
    row.meta_title_en = account.seo.title.en or None
    row.meta_title_ru = account.seo.title.ru or None
    row.meta_description_en = account.seo.description.en or None
    row.meta_description_ru = account.seo.description.ru or None
    row.meta_keywords_en = account.seo.keywords.en or None
    row.meta_keywords_ru = account.seo.keywords.ru or None
    await session.flush()
    return account


async def set_account_status(
    session: AsyncSession, account_id: str, status: AccountStatus
) -> Account | None:
    """Change an account's lifecycle status (e.g. active -> sold)."""
    row = await session.get(AccountDB, account_id)
    if row is None:
        return None
    row.status = status.value
    await session.flush()
    return await get_account(session, account_id)


async def delete_account(session: AsyncSession, account_id: str) -> bool:
    """Delete an account. Returns True if deleted, False if not found."""
    row = await session.get(AccountDB, account_id)
    if row is None:
        return False
    await session.delete(row)
    await session.flush()
    return True


# --- Order Operations ---


def order_to_model(row: OrderDB) -> Order:
    """Convert a database order to a domain model."""
    return Order(
        id=row.id,
        account_id=row.account_id,
        price=row.price,
        contact_method=ContactMethod(row.contact_method),
        contact_value=row.contact_value,
        status=OrderStatus(row.status),
        created_at=row.created_at,
    )


async def create_order(session: AsyncSession, order: Order) -> Order:
    """Record a pending order."""
    row = OrderDB(
        account_id=order.account_id,
        price=order.price,
        contact_method=order.contact_method.value,
        contact_value=order.contact_value,
        status=order.status.value,
    )
    session.add(row)
    await session.flush()
    await session.refresh(row)
    return order_to_model(row)


async def get_recent_orders(session: AsyncSession, limit: int) -> list[Order]:
    """Most recent orders first."""
    result = await session.execute(
        select(OrderDB).order_by(OrderDB.created_at.desc(), OrderDB.id.desc()).limit(limit)
    )
    return [order_to_model(row) for row in result.scalars()]


async def count_rows(session: AsyncSession, model: type[Base]) -> int:
    """Number of rows in a table."""
    result = await session.execute(select(func.count()).select_from(model))
    return int(result.scalar_one())


# --- Configuration Operations ---


async def get_configuration(session: AsyncSession) -> SiteConfiguration:
    """
    Read the singleton configuration record.

    Returns an unconfigured SiteConfiguration when no record exists yet.
    """
    result = await session.execute(select(ConfigurationDB).order_by(ConfigurationDB.id).limit(1))
    row = result.scalar_one_or_none()
    if row is None:
        return SiteConfiguration(ai_api_url="", ai_model="")
    return SiteConfiguration(
        telegram_bot_token=row.telegram_bot_token or "",
        telegram_chat_id=row.telegram_chat_id or "",
        ai_api_key=row.ai_api_key or "",
        ai_api_url=row.ai_api_url or "",
        ai_model=row.ai_model or "",
        ai_provider=row.ai_provider or "openai",
    )


async def save_configuration(
    session: AsyncSession, config: SiteConfiguration
) -> SiteConfiguration:
    """Update the configuration record, inserting it if absent."""
    result = await session.execute(select(ConfigurationDB).order_by(ConfigurationDB.id).limit(1))
    row = result.scalar_one_or_none()
    if row is None:
        row = ConfigurationDB()
        session.add(row)

    row.telegram_bot_token = config.telegram_bot_token
    row.telegram_chat_id = config.telegram_chat_id
    row.ai_api_key = config.ai_api_key
    row.ai_api_url = config.ai_api_url
    row.ai_model = config.ai_model
    row.ai_provider = config.ai_provider
    await session.flush()
    return config
