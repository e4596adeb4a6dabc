"""
Locale handling.

The active language is carried explicitly through a LocaleContext value
instead of living in a process-wide store. Each discovery session, request
or lead owns its own context.
"""

import unicodedata
from dataclasses import dataclass
from enum import Enum


class Locale(str, Enum):
    """Supported storefront languages."""

    EN = "en"
    RU = "ru"

    @classmethod
    def parse(cls, value: "str | Locale | None", default: "Locale | None" = None) -> "Locale":
        """Resolve a locale code, falling back to `default` (or RU) when unknown."""
        if isinstance(value, Locale):
            return value
        if value:
            code = value.strip().lower()[:2]
            for locale in cls:
                if locale.value == code:
                    return locale
        return default if default is not None else cls.RU


@dataclass(frozen=True)
class LocalizedText:
    """A string available in both storefront languages."""

    en: str = ""
    ru: str = ""

    def get(self, locale: Locale) -> str:
        """Return the text for `locale`, falling back to the other language if blank."""
        primary, fallback = (self.en, self.ru) if locale is Locale.EN else (self.ru, self.en)
        return primary or fallback


@dataclass(frozen=True)
class LocaleContext:
    """The language a single session or request renders in."""

    locale: Locale = Locale.RU

    def text(self, value: LocalizedText) -> str:
        return value.get(self.locale)

    def with_locale(self, locale: Locale) -> "LocaleContext":
        return LocaleContext(locale=locale)


# Marks that make a separate letter of the alphabet rather than an accent
_LETTER_FORMING_MARKS = frozenset({("и", "\u0306")})  # и + breve = й


def collation_key(text: str) -> str:
    """
    Build a locale-aware comparison key for display names.

    Case-folds and strips accents after NFKD decomposition so that
    "Ёлка" sorts next to "Елка" and "Éclair" next to "Eclair". Й keeps its
    breve and recomposes to its own code point, which orders it right
    after И as the Russian alphabet does.
    """
    decomposed = unicodedata.normalize("NFKD", text.casefold())
    kept: list[str] = []
    for ch in decomposed:
        if unicodedata.combining(ch) and not (kept and (kept[-1], ch) in _LETTER_FORMING_MARKS):
            continue
        kept.append(ch)
    return unicodedata.normalize("NFC", "".join(kept))
