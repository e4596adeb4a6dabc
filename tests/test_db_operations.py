"""Tests for database CRUD operations."""

from datetime import UTC, datetime

import pytest
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from startaccount.db.operations import (
    accounts_listing_hero,
    count_active_accounts_by_game,
    count_rows,
    create_order,
    delete_account,
    delete_game,
    delete_hero,
    get_account,
    get_configuration,
    get_game,
    get_recent_orders,
    list_accounts,
    list_active_accounts,
    list_games,
    list_heroes,
    save_configuration,
    set_account_status,
    upsert_account,
    upsert_game,
    upsert_hero,
)
from startaccount.models.catalog import AccountStatus
from startaccount.models.db import AccountDB, GameDB, HeroDB
from startaccount.models.failure import CatalogConflictError, RecordParseError
from startaccount.models.order import ContactMethod, Order, SiteConfiguration


class TestGameOperations:
    async def test_list_games(self, seeded_session: AsyncSession) -> None:
        games = await list_games(seeded_session)

        assert {game.id for game in games} == {"genshin", "pubg"}

    async def test_get_by_id_or_slug(self, seeded_session: AsyncSession) -> None:
        by_id = await get_game(seeded_session, "genshin")
        by_slug = await get_game(seeded_session, "genshin-impact")

        assert by_id is not None
        assert by_slug == by_id
        assert by_id.name.ru == "Геншин Импакт"
        assert by_id.description.en == "Open world adventure"

    async def test_get_missing(self, seeded_session: AsyncSession) -> None:
        assert await get_game(seeded_session, "missing") is None

    async def test_upsert_updates(self, seeded_session: AsyncSession) -> None:
        await upsert_game(seeded_session, {"id": "pubg", "name_en": "PUBG Mobile"})
        await seeded_session.commit()

        game = await get_game(seeded_session, "pubg")

        assert game is not None
        assert game.name.en == "PUBG Mobile"
        assert await count_rows(seeded_session, GameDB) == 2

    async def test_upsert_rejects_malformed(self, session: AsyncSession) -> None:
        with pytest.raises(RecordParseError):
            await upsert_game(session, {"id": "x"})

    async def test_delete_refused_with_accounts(self, seeded_session: AsyncSession) -> None:
        with pytest.raises(CatalogConflictError) as exc_info:
            await delete_game(seeded_session, "genshin")

        assert "still has accounts" in exc_info.value.reason
        assert await get_game(seeded_session, "genshin") is not None

    async def test_duplicate_slug_refused(self, seeded_session: AsyncSession) -> None:
        """A slug already used by another game is rejected before the write."""
        with pytest.raises(CatalogConflictError) as exc_info:
            await upsert_game(
                seeded_session, {"id": "other", "name_en": "Other", "slug": "genshin-impact"}
            )

        assert "genshin" in exc_info.value.reason
        assert await count_rows(seeded_session, GameDB) == 2

    async def test_slug_equal_to_other_game_id_refused(
        self, seeded_session: AsyncSession
    ) -> None:
        with pytest.raises(CatalogConflictError):
            await upsert_game(seeded_session, {"id": "other", "name_en": "Other", "slug": "pubg"})

        with pytest.raises(CatalogConflictError):
            await upsert_game(
                seeded_session, {"id": "pubg", "name_en": "PUBG", "slug": "genshin"}
            )

    async def test_keeping_own_slug_is_allowed(self, seeded_session: AsyncSession) -> None:
        game = await upsert_game(
            seeded_session,
            {"id": "genshin", "name_en": "Genshin", "slug": "genshin-impact"},
        )

        assert game.slug == "genshin-impact"

    async def test_id_match_wins_over_slug(self, seeded_session: AsyncSession) -> None:
        """A reference that is one game's id and another's slug resolves by id."""
        await seeded_session.execute(
            update(GameDB).where(GameDB.id == "pubg").values(slug="pubg-mobile")
        )
        await seeded_session.execute(
            update(GameDB).where(GameDB.id == "genshin").values(slug="pubg")
        )
        await seeded_session.commit()

        game = await get_game(seeded_session, "pubg")

        assert game is not None
        assert game.id == "pubg"

    async def test_delete_removes_heroes(self, session: AsyncSession) -> None:
        await upsert_game(session, {"id": "hsr", "name_en": "Star Rail"})
        await upsert_hero(session, {"id": "march", "game_id": "hsr", "name_en": "March 7th"})
        await session.commit()

        assert await delete_game(session, "hsr")
        await session.commit()

        assert await get_game(session, "hsr") is None
        assert await list_heroes(session, "hsr") == []

    async def test_delete_missing(self, session: AsyncSession) -> None:
        assert not await delete_game(session, "missing")


class TestHeroOperations:
    async def test_list_by_game(self, seeded_session: AsyncSession) -> None:
        heroes = await list_heroes(seeded_session, "genshin")

        assert {hero.id for hero in heroes} == {"raiden", "zhongli", "bennett", "xingqiu", "diluc"}
        assert await list_heroes(seeded_session, "pubg") == []

    async def test_unknown_game_rejected(self, session: AsyncSession) -> None:
        with pytest.raises(ValueError, match="unknown game"):
            await upsert_hero(session, {"id": "x", "game_id": "nope", "name_en": "X"})

    async def test_delete(self, seeded_session: AsyncSession) -> None:
        await upsert_hero(
            seeded_session, {"id": "amber", "game_id": "genshin", "name_en": "Amber"}
        )

        assert await delete_hero(seeded_session, "amber")
        assert not await delete_hero(seeded_session, "amber")

    async def test_delete_refused_while_listed(self, seeded_session: AsyncSession) -> None:
        """Sold accounts count too: their rosters still name the hero."""
        with pytest.raises(CatalogConflictError) as exc_info:
            await delete_hero(seeded_session, "diluc")

        assert "acc-3" in exc_info.value.reason
        assert "diluc" in {hero.id for hero in await list_heroes(seeded_session, "genshin")}

    async def test_move_refused_while_listed(self, seeded_session: AsyncSession) -> None:
        with pytest.raises(CatalogConflictError) as exc_info:
            await upsert_hero(
                seeded_session, {"id": "raiden", "game_id": "pubg", "name_en": "Raiden"}
            )

        assert "acc-1" in exc_info.value.reason
        assert await list_heroes(seeded_session, "pubg") == []

    async def test_update_in_place_allowed_while_listed(
        self, seeded_session: AsyncSession
    ) -> None:
        hero = await upsert_hero(
            seeded_session,
            {"id": "raiden", "game_id": "genshin", "name_en": "Raiden Ei", "type": "legendary"},
        )

        assert hero.name.en == "Raiden Ei"

    async def test_move_allowed_when_unlisted(self, seeded_session: AsyncSession) -> None:
        await upsert_hero(
            seeded_session, {"id": "amber", "game_id": "genshin", "name_en": "Amber"}
        )

        await upsert_hero(seeded_session, {"id": "amber", "game_id": "pubg", "name_en": "Amber"})

        assert [hero.id for hero in await list_heroes(seeded_session, "pubg")] == ["amber"]

    async def test_accounts_listing_hero(self, seeded_session: AsyncSession) -> None:
        assert await accounts_listing_hero(seeded_session, "bennett", "genshin") == [
            "acc-1",
            "acc-2",
        ]
        assert await accounts_listing_hero(seeded_session, "bennett", "pubg") == []

    async def test_malformed_rows_are_skipped(self, seeded_session: AsyncSession) -> None:
        """A row that fails to parse is dropped from reads, not surfaced."""
        await seeded_session.execute(
            update(HeroDB).where(HeroDB.id == "bennett").values(type="mythic")
        )
        await seeded_session.commit()

        heroes = await list_heroes(seeded_session, "genshin")

        assert "bennett" not in {hero.id for hero in heroes}
        assert len(heroes) == 4


class TestAccountOperations:
    async def test_round_trip_keeps_duplicates(self, seeded_session: AsyncSession) -> None:
        account = await get_account(seeded_session, "acc-1")

        assert account is not None
        assert account.heroes == ("raiden", "raiden", "bennett")
        assert account.level == 55
        assert account.resources[0].name == "Primogems"

    async def test_active_filter(self, seeded_session: AsyncSession) -> None:
        active = await list_active_accounts(seeded_session, "genshin")
        every = await list_accounts(seeded_session, "genshin")

        assert {a.id for a in active} == {"acc-1", "acc-2"}
        assert {a.id for a in every} == {"acc-1", "acc-2", "acc-3"}

    async def test_listing_order_is_stable(self, seeded_session: AsyncSession) -> None:
        """Accounts come back oldest first, ties broken by id."""
        await seeded_session.execute(
            update(AccountDB)
            .where(AccountDB.id.in_(["acc-1", "acc-2", "acc-3"]))
            .values(created_at=datetime(2024, 1, 1, tzinfo=UTC))
        )
        await seeded_session.execute(
            update(AccountDB)
            .where(AccountDB.id == "acc-1")
            .values(created_at=datetime(2024, 6, 1, tzinfo=UTC))
        )
        await seeded_session.commit()

        first = [a.id for a in await list_accounts(seeded_session, "genshin")]
        second = [a.id for a in await list_accounts(seeded_session, "genshin")]

        assert first == ["acc-2", "acc-3", "acc-1"]
        assert second == first

    async def test_active_counts_per_game(self, seeded_session: AsyncSession) -> None:
        await set_account_status(seeded_session, "pubg-2", AccountStatus.SOLD)

        counts = await count_active_accounts_by_game(seeded_session)

        assert counts == {"genshin": 2, "pubg": 1}

    async def test_roster_must_belong_to_game(self, seeded_session: AsyncSession) -> None:
        with pytest.raises(ValueError, match="Heroes not in game"):
            await upsert_account(
                seeded_session,
                {"id": "bad", "game_id": "pubg", "price": 10, "heroes": ["raiden"]},
            )

    async def test_unknown_game_rejected(self, session: AsyncSession) -> None:
        with pytest.raises(ValueError, match="unknown game"):
            await upsert_account(session, {"id": "a", "game_id": "nope", "price": 1})

    async def test_status_transition(self, seeded_session: AsyncSession) -> None:
        updated = await set_account_status(seeded_session, "acc-1", AccountStatus.SOLD)

        assert updated is not None
        assert updated.status is AccountStatus.SOLD
        assert "acc-1" not in {a.id for a in await list_active_accounts(seeded_session)}

    async def test_status_missing_account(self, session: AsyncSession) -> None:
        assert await set_account_status(session, "nope", AccountStatus.SOLD) is None

    async def test_malformed_row_is_skipped(self, seeded_session: AsyncSession) -> None:
        await seeded_session.execute(
            update(AccountDB).where(AccountDB.id == "acc-2").values(price=-1)
        )
        await seeded_session.commit()

        assert await get_account(seeded_session, "acc-2") is None
        assert {a.id for a in await list_active_accounts(seeded_session, "genshin")} == {"acc-1"}

    async def test_delete(self, seeded_session: AsyncSession) -> None:
        assert await delete_account(seeded_session, "acc-3")
        assert await get_account(seeded_session, "acc-3") is None
        assert not await delete_account(seeded_session, "acc-3")


class TestOrderOperations:
    async def test_create_and_list_recent(self, seeded_session: AsyncSession) -> None:
        for value in ("first", "second", "third"):
            await create_order(
                seeded_session,
                Order(
                    account_id="acc-1",
                    price=1500.0,
                    contact_method=ContactMethod.EMAIL,
                    contact_value=value,
                ),
            )
        await seeded_session.commit()

        recent = await get_recent_orders(seeded_session, 2)

        assert len(recent) == 2
        assert recent[0].contact_value == "third"
        assert all(order.id is not None for order in recent)


class TestConfigurationOperations:
    async def test_empty_configuration(self, session: AsyncSession) -> None:
        """Without a record every field is blank."""
        config = await get_configuration(session)

        assert not config.lead_channel_ready()
        assert config.ai_api_url == ""
        assert set(config.missing_assistant_fields()) == {"ai_api_key", "ai_api_url", "ai_model"}

    async def test_save_inserts_then_updates(self, session: AsyncSession) -> None:
        await save_configuration(session, SiteConfiguration(telegram_bot_token="t"))
        await save_configuration(
            session, SiteConfiguration(telegram_bot_token="t", telegram_chat_id="c")
        )
        await session.commit()

        config = await get_configuration(session)

        assert config.lead_channel_ready()
        assert config.ai_model == "gpt-3.5-turbo"
