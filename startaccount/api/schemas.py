"""
Response models shared by the storefront routers.

All models read from the service-layer dataclasses (`from_attributes`).
"""

from pydantic import BaseModel, ConfigDict, Field

from startaccount.filtering.matching import CatalogState
from startaccount.models.catalog import HeroType
from startaccount.models.locale import Locale


class _FromAttributes(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class GameResponse(BaseModel):
    """A game in the requested locale."""

    id: str
    name: str
    description: str
    image: str
    slug: str
    has_gacha_heroes: bool
    account_count: int = Field(default=0, description="Active accounts for sale")


class ResourceResponse(_FromAttributes):
    name: str
    value: float


class HeroBadgeResponse(_FromAttributes):
    """A unique hero on an account; `count` drives the ×N marker."""

    hero_id: str
    name: str
    icon: str
    count: int
    legendary: bool
    available: bool
    selected: bool


class AccountCardResponse(_FromAttributes):
    id: str
    game_id: str
    title: str
    description: str
    description_preview: str
    price: float
    image: str
    guaranteed: bool
    server: str | None = None
    level: int | None = None
    badges: list[HeroBadgeResponse] = Field(default_factory=list)
    hidden_hero_count: int = 0
    has_more_heroes: bool = False
    roster_size: int = 0
    resources: list[ResourceResponse] = Field(default_factory=list)


class PaletteEntryResponse(_FromAttributes):
    """A hero in the selection palette. Unavailable heroes render dimmed."""

    hero_id: str
    name: str
    icon: str
    type: HeroType
    rarity: int | None = None
    element: str | None = None
    available: bool
    selected_count: int = 0


class CatalogPageResponse(BaseModel):
    """
    The visible part of an account listing.

    `state` distinguishes "select heroes first" (no_criteria) from a search
    that found nothing (no_results).
    """

    state: CatalogState
    message: str | None = None
    total: int
    visible: int
    has_more: bool
    accounts: list[AccountCardResponse] = Field(default_factory=list)


class PaletteResponse(BaseModel):
    game_id: str
    locale: Locale
    heroes: list[PaletteEntryResponse]
    unavailable: int = Field(
        default=0,
        description="Number of heroes no active account can supply",
    )
