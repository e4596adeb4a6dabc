from startaccount.db.database import get_session, init_db
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

__all__ = [
    "accounts_listing_hero",
    "count_active_accounts_by_game",
    "count_rows",
    "create_order",
    "delete_account",
    "delete_game",
    "delete_hero",
    "get_account",
    "get_configuration",
    "get_game",
    "get_recent_orders",
    "get_session",
    "init_db",
    "list_accounts",
    "list_active_accounts",
    "list_games",
    "list_heroes",
    "save_configuration",
    "set_account_status",
    "upsert_account",
    "upsert_game",
    "upsert_hero",
]
