"""
Account card view models.

Builds the display form of an account: the roster collapsed into unique
hero badges (each with its copy count), capped for the card, with the full
listing available separately. The underlying roster is never modified.
"""

from collections.abc import Collection, Mapping
from dataclasses import dataclass, field

from startaccount.analysis.multiset import roster_counts
from startaccount.config import DESCRIPTION_PREVIEW_LENGTH, ELLIPSIS, MAX_HERO_BADGES
from startaccount.models.catalog import Account, Hero, HeroType, Resource
from startaccount.models.locale import Locale


@dataclass
class HeroBadge:
    """One unique hero on an account, with how many copies it holds."""

    hero_id: str
    name: str
    icon: str
    count: int
    legendary: bool
    available: bool
    selected: bool


@dataclass
class AccountCard:
    """Everything needed to render one account in the listing."""

    id: str
    game_id: str
    title: str
    description: str
    description_preview: str
    price: float
    image: str
    guaranteed: bool
    server: str | None
    level: int | None
    badges: list[HeroBadge] = field(default_factory=list)
    hidden_hero_count: int = 0
    roster_size: int = 0
    resources: list[Resource] = field(default_factory=list)

    @property
    def has_more_heroes(self) -> bool:
        return self.hidden_hero_count > 0


def truncate_text(text: str, max_length: int = DESCRIPTION_PREVIEW_LENGTH) -> str:
    """Cut `text` to `max_length` characters, appending an ellipsis if cut."""
    if len(text) <= max_length:
        return text
    return text[:max_length] + ELLIPSIS


def unique_heroes(roster: tuple[str, ...]) -> list[tuple[str, int]]:
    """
    Collapse a roster into (hero id, copies) pairs.

    Order follows first appearance in the roster.
    """
    counts = roster_counts(roster)
    return [(hero_id, counts[hero_id]) for hero_id in dict.fromkeys(roster)]


def _badge(
    hero_id: str,
    count: int,
    heroes_by_id: Mapping[str, Hero],
    locale: Locale,
    availability: Collection[str],
    selected: Collection[str],
) -> HeroBadge:
    hero = heroes_by_id.get(hero_id)
    return HeroBadge(
        hero_id=hero_id,
        name=hero.name.get(locale) if hero else hero_id,
        icon=hero.icon if hero else "",
        count=count,
        legendary=hero is not None and hero.type is HeroType.LEGENDARY,
        available=hero_id in availability,
        selected=hero_id in selected,
    )


def list_account_heroes(
    account: Account,
    heroes_by_id: Mapping[str, Hero],
    locale: Locale,
    availability: Collection[str],
    selected: Collection[str] = (),
) -> list[HeroBadge]:
    """Complete "view all" listing of an account's unique heroes with counts."""
    return [
        _badge(hero_id, count, heroes_by_id, locale, availability, selected)
        for hero_id, count in unique_heroes(account.heroes)
    ]


def build_account_card(
    account: Account,
    heroes_by_id: Mapping[str, Hero],
    locale: Locale,
    availability: Collection[str],
    selected: Collection[str] = (),
    show_heroes: bool = True,
) -> AccountCard:
    """
    Build the card for one account.

    Args:
        account: The account to render
        heroes_by_id: Hero catalog of the account's game
        locale: Active display locale
        availability: Availability index for the game
        selected: Hero ids the customer has picked (highlighted)
        show_heroes: False for games without a hero roster

    Returns:
        AccountCard with at most MAX_HERO_BADGES badges
    """
    badges: list[HeroBadge] = []
    hidden = 0
    if show_heroes:
        all_badges = list_account_heroes(account, heroes_by_id, locale, availability, selected)
        badges = all_badges[:MAX_HERO_BADGES]
        hidden = len(all_badges) - len(badges)

    description = account.description.get(locale)
    return AccountCard(
        id=account.id,
        game_id=account.game_id,
        title=account.title.get(locale),
        description=description,
        description_preview=truncate_text(description),
        price=account.price,
        image=account.image,
        guaranteed=account.guaranteed,
        server=account.server,
        level=account.level,
        badges=badges,
        hidden_hero_count=hidden,
        roster_size=len(account.heroes),
        resources=list(account.resources),
    )
