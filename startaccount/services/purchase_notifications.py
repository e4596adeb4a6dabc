"""
Synthetic purchase notifications.

Social-proof popups ("someone bought ... 5 minutes ago") are generated by
sampling a random active account. They never describe a real sale.
"""

import random
from collections.abc import Mapping, Sequence

from startaccount.config import NOTIFICATION_HERO_LIMIT
from startaccount.models.catalog import Account, Hero
from startaccount.models.locale import Locale
from startaccount.models.order import PurchaseNotification
from startaccount.services.messages import TIME_AGO_PHRASES


def generate_purchase_notification(
    accounts: Sequence[Account],
    locale: Locale,
    heroes_by_id: Mapping[str, Hero] | None = None,
    rng: random.Random | None = None,
) -> PurchaseNotification | None:
    """
    Build one notification from a random active account.

    Args:
        accounts: Candidate accounts; inactive ones are ignored
        locale: Language of the title, hero names and time phrase
        heroes_by_id: Hero catalog for name lookup (ids are shown otherwise)
        rng: Random source, injectable for tests

    Returns:
        A notification, or None when there is no active account
    """
    active = [account for account in accounts if account.is_active]
    if not active:
        return None

    rng = rng or random.Random()
    account = rng.choice(active)
    heroes_by_id = heroes_by_id or {}

    hero_names = [
        heroes_by_id[hero_id].name.get(locale) if hero_id in heroes_by_id else hero_id
        for hero_id in account.heroes[:NOTIFICATION_HERO_LIMIT]
    ]
    return PurchaseNotification(
        game_id=account.game_id,
        account_title=account.title.get(locale),
        heroes=hero_names,
        time_ago=rng.choice(TIME_AGO_PHRASES[locale]),
        price=account.price,
    )
