"""
Localized strings used by the service layer.

Only the strings the service itself produces live here: empty-state
prompts, the operator lead message and notification phrases. Page copy
belongs to the client.
"""

from startaccount.models.locale import Locale
from startaccount.models.order import ContactMethod

EMPTY_STATE_MESSAGES: dict[str, dict[Locale, str]] = {
    "no_criteria": {
        Locale.EN: "Select heroes to see matching accounts",
        Locale.RU: "Выберите героев, чтобы увидеть подходящие аккаунты",
    },
    "no_results": {
        Locale.EN: "No accounts found matching your criteria",
        Locale.RU: "Не найдено аккаунтов, соответствующих вашим критериям",
    },
}

CONTACT_METHOD_LABELS: dict[ContactMethod, dict[Locale, str]] = {
    ContactMethod.TELEGRAM: {Locale.EN: "Telegram", Locale.RU: "Telegram"},
    ContactMethod.WHATSAPP: {Locale.EN: "WhatsApp", Locale.RU: "WhatsApp"},
    ContactMethod.PHONE: {Locale.EN: "Phone", Locale.RU: "Телефон"},
    ContactMethod.EMAIL: {Locale.EN: "Email", Locale.RU: "Email"},
    ContactMethod.OTHER: {Locale.EN: "Other", Locale.RU: "Другое"},
}

LEAD_MESSAGE_LABELS: dict[Locale, dict[str, str]] = {
    Locale.EN: {
        "header": "🎮 New purchase request!",
        "game": "🎯 Game",
        "account": "🏷️ Account",
        "price": "💰 Price",
        "method": "📱 Contact method",
        "contact": "📞 Contact",
    },
    Locale.RU: {
        "header": "🎮 Новая заявка на покупку!",
        "game": "🎯 Игра",
        "account": "🏷️ Аккаунт",
        "price": "💰 Цена",
        "method": "📱 Способ связи",
        "contact": "📞 Контакт",
    },
}

CURRENCY_SYMBOL = "₽"

TIME_AGO_PHRASES: dict[Locale, list[str]] = {
    Locale.EN: [
        "a few seconds ago",
        "1 minute ago",
        "2 minutes ago",
        "5 minutes ago",
        "10 minutes ago",
        "15 minutes ago",
        "30 minutes ago",
        "1 hour ago",
        "2 hours ago",
    ],
    Locale.RU: [
        "несколько секунд назад",
        "1 минуту назад",
        "2 минуты назад",
        "5 минут назад",
        "10 минут назад",
        "15 минут назад",
        "30 минут назад",
        "1 час назад",
        "2 часа назад",
    ],
}


def empty_state_message(state: str, locale: Locale) -> str | None:
    """Prompt for an empty catalog state, or None for states that have results."""
    messages = EMPTY_STATE_MESSAGES.get(state)
    return messages[locale] if messages else None


def format_price(price: float) -> str:
    """Render a price without a trailing .0 for whole amounts."""
    return str(int(price)) if float(price).is_integer() else f"{price:.2f}"
