import pytest

from startaccount.filtering.cards import (
    build_account_card,
    list_account_heroes,
    truncate_text,
    unique_heroes,
)
from startaccount.filtering.matching import (
    CatalogState,
    RosterCountCache,
    filter_accounts,
)
from startaccount.filtering.window import CatalogWindow
from startaccount.models.catalog import Account, AccountStatus, Game, Hero, HeroType
from startaccount.models.locale import Locale, LocalizedText


@pytest.fixture
def roster_game() -> Game:
    return Game(id="genshin", name=LocalizedText(en="Genshin"), has_gacha_heroes=True)


@pytest.fixture
def plain_game() -> Game:
    return Game(id="pubg", name=LocalizedText(en="PUBG"), has_gacha_heroes=False)


def _account(
    account_id: str,
    heroes: list[str] | None = None,
    game_id: str = "genshin",
    status: AccountStatus = AccountStatus.ACTIVE,
    description: str = "",
) -> Account:
    return Account(
        id=account_id,
        game_id=game_id,
        title=LocalizedText(en=f"Account {account_id}", ru=f"Аккаунт {account_id}"),
        price=500.0,
        description=LocalizedText(en=description),
        heroes=tuple(heroes or []),
        status=status,
    )


def _hero(hero_id: str, hero_type: HeroType = HeroType.EPIC) -> Hero:
    return Hero(
        id=hero_id,
        game_id="genshin",
        name=LocalizedText(en=hero_id.upper(), ru=hero_id),
        icon=f"/icons/{hero_id}.png",
        type=hero_type,
    )


class TestFilterAccounts:
    def test_multiset_match(self, roster_game: Game) -> None:
        """Only accounts holding enough copies match."""
        accounts = [
            _account("1", ["a", "a", "b"]),
            _account("2", ["a", "b"]),
            _account("3", ["a", "a"]),
        ]

        result = filter_accounts(accounts, roster_game, {"a": 2})

        assert result.state == CatalogState.RESULTS
        assert [a.id for a in result.accounts] == ["1", "3"]

    def test_empty_selection_shows_nothing(self, roster_game: Game) -> None:
        """A roster game with no picks returns no accounts and a distinct state."""
        accounts = [_account("1", ["a"]), _account("2", ["b"])]

        result = filter_accounts(accounts, roster_game, {})

        assert result.state == CatalogState.NO_CRITERIA
        assert result.accounts == []
        assert result.total == 0

    def test_zero_counts_treated_as_no_selection(self, roster_game: Game) -> None:
        """A map of only zero counts is the same as no selection."""
        result = filter_accounts([_account("1", ["a"])], roster_game, {"a": 0})

        assert result.state == CatalogState.NO_CRITERIA

    def test_no_results_distinct_from_no_criteria(self, roster_game: Game) -> None:
        """A selection nobody can satisfy reports no_results."""
        result = filter_accounts([_account("1", ["a"])], roster_game, {"z": 1})

        assert result.state == CatalogState.NO_RESULTS
        assert result.accounts == []

    def test_plain_game_bypasses_matcher(self, plain_game: Game) -> None:
        """A game without rosters lists every active account whatever is picked."""
        accounts = [_account("1", game_id="pubg"), _account("2", game_id="pubg")]

        with_picks = filter_accounts(accounts, plain_game, {"anything": 3})
        without_picks = filter_accounts(accounts, plain_game, {})

        assert [a.id for a in with_picks.accounts] == ["1", "2"]
        assert [a.id for a in without_picks.accounts] == ["1", "2"]
        assert without_picks.state == CatalogState.RESULTS

    def test_plain_game_without_accounts(self, plain_game: Game) -> None:
        """An empty plain game reports no_results."""
        result = filter_accounts([], plain_game, {})

        assert result.state == CatalogState.NO_RESULTS

    def test_inactive_and_foreign_accounts_excluded(self, roster_game: Game) -> None:
        """Sold, hidden and other games' accounts never match."""
        accounts = [
            _account("sold", ["a"], status=AccountStatus.SOLD),
            _account("hidden", ["a"], status=AccountStatus.HIDDEN),
            _account("other", ["a"], game_id="hsr"),
            _account("ok", ["a"]),
        ]

        result = filter_accounts(accounts, roster_game, {"a": 1})

        assert [a.id for a in result.accounts] == ["ok"]

    def test_source_order_preserved(self, roster_game: Game) -> None:
        """Matches come back in input order, never re-sorted."""
        accounts = [_account(str(i), ["a"]) for i in (5, 1, 4, 2, 3)]

        result = filter_accounts(accounts, roster_game, {"a": 1})

        assert [a.id for a in result.accounts] == ["5", "1", "4", "2", "3"]

    def test_cache_reused_across_selections(self, roster_game: Game) -> None:
        """Roster counts are computed once per account and reused."""
        account = _account("1", ["a", "a", "b"])
        cache = RosterCountCache()

        filter_accounts([account], roster_game, {"a": 1}, cache=cache)
        first = cache.counts_for(account)
        filter_accounts([account], roster_game, {"a": 2, "b": 1}, cache=cache)

        assert cache.counts_for(account) is first
        assert first == {"a": 2, "b": 1}


class TestUniqueHeroes:
    def test_dedup_with_counts(self) -> None:
        """[X, X, X, Y] collapses to X x3 and Y x1."""
        assert unique_heroes(("X", "X", "X", "Y")) == [("X", 3), ("Y", 1)]

    def test_first_appearance_order(self) -> None:
        """Unique heroes keep the order they first appear in."""
        assert unique_heroes(("b", "a", "b", "c")) == [("b", 2), ("a", 1), ("c", 1)]


class TestAccountCard:
    def test_badges_deduplicated_roster_untouched(self) -> None:
        """Card shows 2 badges for [X, X, X, Y] while the roster keeps 4 entries."""
        account = _account("1", ["X", "X", "X", "Y"])
        heroes = {"X": _hero("X", HeroType.LEGENDARY), "Y": _hero("Y")}

        card = build_account_card(account, heroes, Locale.EN, {"X", "Y"})

        assert [(b.hero_id, b.count) for b in card.badges] == [("X", 3), ("Y", 1)]
        assert card.roster_size == 4
        assert account.heroes == ("X", "X", "X", "Y")
        assert card.badges[0].legendary
        assert not card.badges[1].legendary

    def test_badge_cap(self) -> None:
        """At most eight badges; the rest are counted as hidden."""
        account = _account("1", [f"h{i}" for i in range(11)])

        card = build_account_card(account, {}, Locale.EN, set())

        assert len(card.badges) == 8
        assert card.hidden_hero_count == 3
        assert card.has_more_heroes

    def test_view_all_lists_every_hero(self) -> None:
        """The full listing is not capped and keeps counts."""
        roster = [f"h{i}" for i in range(11)] + ["h0"]
        account = _account("1", roster)

        badges = list_account_heroes(account, {}, Locale.EN, set())

        assert len(badges) == 11
        assert badges[0].count == 2

    def test_badge_flags(self) -> None:
        """Badges carry availability and selection for highlighting."""
        account = _account("1", ["a", "b"])
        heroes = {"a": _hero("a"), "b": _hero("b")}

        card = build_account_card(account, heroes, Locale.EN, {"a"}, selected={"b"})

        by_id = {badge.hero_id: badge for badge in card.badges}
        assert by_id["a"].available and not by_id["a"].selected
        assert by_id["b"].selected and not by_id["b"].available

    def test_localized_names(self) -> None:
        """Badge names follow the locale; unknown heroes fall back to their id."""
        account = _account("1", ["a", "ghost"])
        heroes = {"a": _hero("a")}

        card = build_account_card(account, heroes, Locale.EN, {"a"})

        assert [b.name for b in card.badges] == ["A", "ghost"]
        assert card.title == "Account 1"

    def test_plain_game_card_has_no_badges(self) -> None:
        """Games without rosters do not show hero badges."""
        account = _account("1", ["a"], game_id="pubg")

        card = build_account_card(account, {}, Locale.EN, set(), show_heroes=False)

        assert card.badges == []
        assert card.hidden_hero_count == 0

    def test_description_preview(self) -> None:
        """Preview is cut to 100 characters; the full text is kept."""
        account = _account("1", description="d" * 150)

        card = build_account_card(account, {}, Locale.EN, set())

        assert card.description_preview == "d" * 100 + "..."
        assert card.description == "d" * 150


class TestTruncateText:
    def test_short_text_unchanged(self) -> None:
        assert truncate_text("short") == "short"

    def test_exact_length_unchanged(self) -> None:
        """Text at exactly the budget gets no ellipsis."""
        assert truncate_text("x" * 100) == "x" * 100

    def test_custom_budget(self) -> None:
        assert truncate_text("abcdef", max_length=3) == "abc..."


class TestCatalogWindow:
    def test_load_more_sequence(self) -> None:
        """14 results: 6, then 12, then 14, then a no-op."""
        window = CatalogWindow(list(range(14)), page_size=6)

        assert window.visible_count == 6
        assert window.has_more

        assert window.load_more()
        assert window.visible_count == 12

        assert window.load_more()
        assert window.visible_count == 14
        assert not window.has_more

        assert not window.load_more()
        assert window.visible_count == 14
        assert not window.has_more

    def test_repeated_load_more_is_safe(self) -> None:
        """Calling load_more many times after exhaustion changes nothing."""
        window = CatalogWindow(list(range(3)))

        for _ in range(5):
            assert not window.load_more()

        assert window.visible == [0, 1, 2]
        assert window.pages == 1

    def test_visible_preserves_order(self) -> None:
        window = CatalogWindow(["c", "a", "b"], page_size=2)

        assert window.visible == ["c", "a"]

    def test_at_page_clamps(self) -> None:
        """Requesting more pages than exist reveals everything."""
        window = CatalogWindow.at_page(list(range(14)), page=10, page_size=6)

        assert window.visible_count == 14
        assert window.pages == 3

    def test_reset(self) -> None:
        """Reset returns to the first page over a new list."""
        window = CatalogWindow(list(range(14)), page_size=6)
        window.load_more()

        window.reset(list(range(8)))

        assert window.visible_count == 6
        assert window.total == 8

    def test_invalid_page_size(self) -> None:
        with pytest.raises(ValueError):
            CatalogWindow([], page_size=0)

    def test_empty(self) -> None:
        window = CatalogWindow([])

        assert window.visible == []
        assert not window.has_more
