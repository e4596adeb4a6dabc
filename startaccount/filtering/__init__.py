from startaccount.filtering.cards import (
    AccountCard,
    HeroBadge,
    build_account_card,
    list_account_heroes,
    truncate_text,
    unique_heroes,
)
from startaccount.filtering.matching import (
    CatalogResult,
    CatalogState,
    RosterCountCache,
    filter_accounts,
)
from startaccount.filtering.window import CatalogWindow

__all__ = [
    "AccountCard",
    "CatalogResult",
    "CatalogState",
    "CatalogWindow",
    "HeroBadge",
    "RosterCountCache",
    "build_account_card",
    "filter_accounts",
    "list_account_heroes",
    "truncate_text",
    "unique_heroes",
]
