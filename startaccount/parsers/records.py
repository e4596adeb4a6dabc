"""
Parse/validate boundary for catalog records.

Everything read from the catalog store or posted by the admin panel arrives
as loosely typed mappings: keys in snake_case or camelCase, rosters as
lists of ids or hero objects, resources as ad hoc dicts. This module turns
them into the typed entities in `startaccount.models.catalog`.

Parsing fails closed:
- A malformed record raises RecordParseError (and `parse_many` drops it)
- A malformed roster entry or resource entry is dropped from its record
- Nothing is ever returned half-populated with placeholder values
"""

import logging
import math
from collections.abc import Callable, Iterable, Mapping
from typing import Any, TypeVar

from startaccount.models.catalog import (
    Account,
    AccountStatus,
    Game,
    Hero,
    HeroType,
    Resource,
    SeoMetadata,
)
from startaccount.models.failure import RecordParseError
from startaccount.models.locale import LocalizedText

logger = logging.getLogger(__name__)

Record = Mapping[str, Any]
E = TypeVar("E")


def _camel(key: str) -> str:
    head, *rest = key.split("_")
    return head + "".join(part.capitalize() for part in rest)


def _get(raw: Record, key: str, default: Any = None) -> Any:
    """Look a field up by its snake_case name, then its camelCase name."""
    if key in raw:
        return raw[key]
    return raw.get(_camel(key), default)


def _require_id(raw: Record, key: str, entity: str) -> str:
    value = _get(raw, key)
    if isinstance(value, int) and not isinstance(value, bool):
        value = str(value)
    if not isinstance(value, str) or not value.strip():
        raise RecordParseError(entity, f"missing {key}")
    return value.strip()


def _optional_str(raw: Record, key: str) -> str | None:
    value = _get(raw, key)
    if value is None:
        return None
    if not isinstance(value, str):
        return str(value)
    return value.strip() or None


def _str(raw: Record, key: str) -> str:
    return _optional_str(raw, key) or ""


def _localized(raw: Record, base: str) -> LocalizedText:
    """
    Read a two-language field.

    Accepts `base_en`/`base_ru` (or `baseEn`/`baseRu`) and the nested
    `{"base": {"en": ..., "ru": ...}}` form used for game descriptions.
    """
    nested = _get(raw, base)
    if isinstance(nested, Mapping):
        return LocalizedText(
            en=str(nested.get("en") or ""),
            ru=str(nested.get("ru") or ""),
        )
    en = _str(raw, f"{base}_en")
    ru = _str(raw, f"{base}_ru")
    if not en and not ru and isinstance(nested, str):
        return LocalizedText(en=nested, ru=nested)
    return LocalizedText(en=en, ru=ru)


def _number(value: Any) -> float | None:
    """Coerce a numeric value; None for anything that is not a finite number."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def _optional_int(raw: Record, key: str, entity: str) -> int | None:
    value = _get(raw, key)
    if value is None or value == "":
        return None
    number = _number(value)
    if number is None or not number.is_integer():
        raise RecordParseError(entity, f"{key} must be an integer, got {value!r}")
    return int(number)


def _bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


# =============================================================================
# ENTITY PARSERS
# =============================================================================


def parse_game(raw: Record) -> Game:
    """Parse a game record."""
    if not isinstance(raw, Mapping):
        raise RecordParseError("game", "record is not a mapping")

    game_id = _require_id(raw, "id", "game")
    name = _localized(raw, "name")
    if not name.en and not name.ru:
        raise RecordParseError("game", f"game {game_id} has no name")

    return Game(
        id=game_id,
        name=name,
        description=_localized(raw, "description"),
        image=_str(raw, "image"),
        slug=_str(raw, "slug") or game_id,
        has_gacha_heroes=_bool(_get(raw, "has_gacha_heroes", False)),
    )


def parse_hero(raw: Record) -> Hero:
    """Parse a hero record. Unknown hero types reject the record."""
    if not isinstance(raw, Mapping):
        raise RecordParseError("hero", "record is not a mapping")

    hero_id = _require_id(raw, "id", "hero")
    game_id = _require_id(raw, "game_id", "hero")
    name = _localized(raw, "name")
    if not name.en and not name.ru:
        raise RecordParseError("hero", f"hero {hero_id} has no name")

    raw_type = _get(raw, "type", HeroType.EPIC.value)
    try:
        hero_type = HeroType(str(raw_type).strip().lower())
    except ValueError as e:
        raise RecordParseError("hero", f"unknown hero type {raw_type!r}") from e

    return Hero(
        id=hero_id,
        game_id=game_id,
        name=name,
        icon=_str(raw, "icon"),
        type=hero_type,
        rarity=_optional_int(raw, "rarity", "hero"),
        element=_optional_str(raw, "element"),
    )


def parse_roster(value: Any) -> tuple[str, ...]:
    """
    Parse an account roster into an ordered tuple of hero ids.

    Entries may be plain ids or hero objects carrying an `id`. Repeats are
    kept: each one is a duplicate copy. Entries without an id are dropped.

    Raises:
        RecordParseError: If the roster is neither null nor a list
    """
    if value is None:
        return ()
    if not isinstance(value, list | tuple):
        raise RecordParseError("account", f"roster must be a list, got {type(value).__name__}")

    roster: list[str] = []
    for entry in value:
        hero_id: Any = entry.get("id") if isinstance(entry, Mapping) else entry
        if isinstance(hero_id, int) and not isinstance(hero_id, bool):
            hero_id = str(hero_id)
        if isinstance(hero_id, str) and hero_id.strip():
            roster.append(hero_id.strip())
        else:
            logger.debug("Dropping roster entry without id: %r", entry)
    return tuple(roster)


def parse_resources(value: Any) -> tuple[Resource, ...]:
    """Parse resource entries, dropping any without a name or numeric value."""
    if value is None:
        return ()
    if not isinstance(value, list | tuple):
        raise RecordParseError("account", f"resources must be a list, got {type(value).__name__}")

    resources: list[Resource] = []
    for entry in value:
        if not isinstance(entry, Mapping):
            continue
        name = entry.get("name")
        amount = _number(entry.get("value"))
        if not isinstance(name, str) or not name.strip() or amount is None:
            logger.debug("Dropping malformed resource: %r", entry)
            continue
        resources.append(Resource(name=name.strip(), value=amount))
    return tuple(resources)


def parse_account(raw: Record) -> Account:
    """
    Parse an account record.

    Rejects records with a missing or negative price, an unknown status or a
    non-list roster.
    """
    if not isinstance(raw, Mapping):
        raise RecordParseError("account", "record is not a mapping")

    account_id = _require_id(raw, "id", "account")
    game_id = _require_id(raw, "game_id", "account")

    price = _number(_get(raw, "price"))
    if price is None or price < 0:
        raise RecordParseError("account", f"account {account_id} has invalid price")

    raw_status = _get(raw, "status", AccountStatus.ACTIVE.value)
    try:
        status = AccountStatus(str(raw_status).strip().lower())
    except ValueError as e:
        raise RecordParseError("account", f"unknown status {raw_status!r}") from e

    level = _optional_int(raw, "adventure_rank", "account")
    if level is None:
        level = _optional_int(raw, "level", "account")

    return Account(
        id=account_id,
        game_id=game_id,
        title=_localized(raw, "title"),
        price=price,
        description=_localized(raw, "description"),
        image=_str(raw, "image"),
        heroes=parse_roster(_get(raw, "heroes")),
        resources=parse_resources(_get(raw, "resources")),
        status=status,
        server=_optional_str(raw, "server"),
        level=level,
        guaranteed=_bool(_get(raw, "guaranteed", False)),
        seo=SeoMetadata(
            title=_localized(raw, "meta_title"),
            description=_localized(raw, "meta_description"),
            keywords=_localized(raw, "meta_keywords"),
        ),
    )


def parse_many(
    records: Iterable[Record],
    parser: Callable[[Record], E],
) -> list[E]:
    """
    Parse a batch of records, dropping (and logging) the malformed ones.

    Input order is preserved for the records that survive.
    """
    parsed: list[E] = []
    for raw in records:
        try:
            parsed.append(parser(raw))
        except RecordParseError as e:
            logger.warning(
                "Dropping malformed %s record: %s",
                e.entity,
                e.reason,
            )
    return parsed
