from dataclasses import dataclass, field
from enum import Enum

from startaccount.models.locale import LocalizedText


class HeroType(str, Enum):
    """Coarse rarity signal for a hero."""

    LEGENDARY = "legendary"
    EPIC = "epic"


class AccountStatus(str, Enum):
    """Lifecycle status of an account listing."""

    ACTIVE = "active"
    SOLD = "sold"
    HIDDEN = "hidden"


@dataclass(frozen=True)
class Game:
    """
    Top-level catalog partition.

    Attributes:
        id: Stable game identifier
        name: Localized game name
        description: Localized marketing description
        image: Cover image reference
        slug: URL slug
        has_gacha_heroes: Whether accounts carry a hero roster that can be
            filtered. Non-gacha games list every active account.
    """

    id: str
    name: LocalizedText
    description: LocalizedText = field(default_factory=LocalizedText)
    image: str = ""
    slug: str = ""
    has_gacha_heroes: bool = False


@dataclass(frozen=True)
class Hero:
    """
    A selectable in-game character.

    Attributes:
        id: Identifier, unique within its game
        game_id: Owning game
        name: Localized display name
        icon: Icon reference
        type: legendary or epic
        rarity: Star tier, higher is rarer (None when unknown)
        element: Elemental or category tag
    """

    id: str
    game_id: str
    name: LocalizedText
    icon: str = ""
    type: HeroType = HeroType.EPIC
    rarity: int | None = None
    element: str | None = None


@dataclass(frozen=True)
class Resource:
    """A named numeric in-game resource (currency, materials)."""

    name: str
    value: float


@dataclass(frozen=True)
class SeoMetadata:
    """Search-engine metadata. Carried through, never interpreted."""

    title: LocalizedText = field(default_factory=LocalizedText)
    description: LocalizedText = field(default_factory=LocalizedText)
    keywords: LocalizedText = field(default_factory=LocalizedText)


@dataclass(frozen=True)
class Account:
    """
    A sellable, pre-built game account listing.

    The roster is the ordered tuple of hero ids on the account. The same id
    may appear several times; each repetition is one duplicate copy.
    """

    id: str
    game_id: str
    title: LocalizedText
    price: float
    description: LocalizedText = field(default_factory=LocalizedText)
    image: str = ""
    heroes: tuple[str, ...] = ()
    resources: tuple[Resource, ...] = ()
    status: AccountStatus = AccountStatus.ACTIVE
    server: str | None = None
    level: int | None = None
    guaranteed: bool = False
    seo: SeoMetadata = field(default_factory=SeoMetadata)

    @property
    def is_active(self) -> bool:
        return self.status is AccountStatus.ACTIVE
