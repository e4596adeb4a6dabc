from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from startaccount.api.chat import get_session_factory
from startaccount.api.sessions import get_registry
from startaccount.db.database import get_session
from startaccount.db.operations import upsert_account, upsert_game, upsert_hero
from startaccount.main import app
from startaccount.models.db import Base
from startaccount.services.catalog import load_catalog_snapshot
from startaccount.services.discovery import SessionRegistry


GAME_RECORDS: list[dict[str, Any]] = [
    {
        "id": "genshin",
        "name_en": "Genshin Impact",
        "name_ru": "Геншин Импакт",
        "description": {"en": "Open world adventure", "ru": "Приключения в открытом мире"},
        "slug": "genshin-impact",
        "hasGachaHeroes": True,
    },
    {
        "id": "pubg",
        "name_en": "PUBG",
        "name_ru": "PUBG",
        "slug": "pubg",
        "has_gacha_heroes": False,
    },
]


def _hero_record(
    hero_id: str, name_en: str, name_ru: str, hero_type: str, rarity: int, element: str
) -> dict[str, Any]:
    return {
        "id": hero_id,
        "game_id": "genshin",
        "name_en": name_en,
        "name_ru": name_ru,
        "type": hero_type,
        "rarity": rarity,
        "element": element,
    }


HERO_RECORDS: list[dict[str, Any]] = [
    _hero_record("raiden", "Raiden Shogun", "Райдэн", "legendary", 5, "electro"),
    _hero_record("zhongli", "Zhongli", "Чжун Ли", "legendary", 5, "geo"),
    _hero_record("bennett", "Bennett", "Беннет", "epic", 4, "pyro"),
    _hero_record("xingqiu", "Xingqiu", "Син Цю", "epic", 4, "hydro"),
    # Only on a sold account, so unavailable
    _hero_record("diluc", "Diluc", "Дилюк", "legendary", 5, "pyro"),
]

ACCOUNT_RECORDS: list[dict[str, Any]] = [
    {
        "id": "acc-1",
        "game_id": "genshin",
        "title_en": "Raiden C1",
        "title_ru": "Райдэн C1",
        "description_en": "Two copies of Raiden " + "x" * 120,
        "price": 1500,
        "heroes": ["raiden", "raiden", "bennett"],
        "server": "Europe",
        "adventure_rank": 55,
        "resources": [{"name": "Primogems", "value": 1600}],
    },
    {
        "id": "acc-2",
        "game_id": "genshin",
        "title_en": "Zhongli starter",
        "title_ru": "Чжун Ли стартовый",
        "price": 900,
        "heroes": ["zhongli", "bennett", "xingqiu"],
    },
    {
        "id": "acc-3",
        "game_id": "genshin",
        "title_en": "Diluc",
        "title_ru": "Дилюк",
        "price": 2000,
        "heroes": ["diluc"],
        "status": "sold",
    },
    {
        "id": "pubg-1",
        "game_id": "pubg",
        "title_en": "PUBG level 80",
        "title_ru": "PUBG 80 уровень",
        "price": 300,
        "guaranteed": True,
    },
    {
        "id": "pubg-2",
        "game_id": "pubg",
        "title_en": "PUBG level 40",
        "title_ru": "PUBG 40 уровень",
        "price": 150,
    },
]


async def seed_catalog(session: AsyncSession) -> None:
    """Insert the standard test catalog."""
    for record in GAME_RECORDS:
        await upsert_game(session, record)
    for record in HERO_RECORDS:
        await upsert_hero(session, record)
    for record in ACCOUNT_RECORDS:
        await upsert_account(session, record)
    await session.commit()


@pytest.fixture
async def async_engine(tmp_path):
    """
    Create a SQLite engine for testing.

    File-backed so that concurrent sessions (the assistant's catalog
    fan-out) get their own connections.
    """
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(async_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def session(session_factory) -> AsyncSession:
    """Provide a database session for tests."""
    async with session_factory() as session:
        yield session


@pytest.fixture
async def seeded_session(session: AsyncSession) -> AsyncSession:
    """Database session over the standard test catalog."""
    await seed_catalog(session)
    return session


@pytest.fixture
async def client(session_factory):
    """Provide an async test client with overridden database access."""

    async def override_get_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def load_snapshot(game_ref: str):
        async with session_factory() as session:
            return await load_catalog_snapshot(session, game_ref)

    registry = SessionRegistry(load_snapshot)

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_registry] = lambda: registry
    app.dependency_overrides[get_session_factory] = lambda: session_factory

    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
async def seeded_client(client: AsyncClient, session_factory) -> AsyncClient:
    """Test client over the standard test catalog."""
    async with session_factory() as session:
        await seed_catalog(session)
    return client
