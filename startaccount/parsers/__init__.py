from startaccount.parsers.records import (
    parse_account,
    parse_game,
    parse_hero,
    parse_many,
    parse_resources,
    parse_roster,
)

__all__ = [
    "parse_account",
    "parse_game",
    "parse_hero",
    "parse_many",
    "parse_resources",
    "parse_roster",
]
