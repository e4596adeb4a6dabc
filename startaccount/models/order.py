from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class ContactMethod(str, Enum):
    """Fixed set of channels a customer can be reached through."""

    TELEGRAM = "telegram"
    WHATSAPP = "whatsapp"
    PHONE = "phone"
    EMAIL = "email"
    OTHER = "other"


class OrderStatus(str, Enum):
    PENDING = "pending"


@dataclass
class Order:
    """A recorded purchase lead. Only ever created as pending."""

    account_id: str
    price: float
    contact_method: ContactMethod
    contact_value: str
    status: OrderStatus = OrderStatus.PENDING
    id: int | None = None
    created_at: datetime | None = None


@dataclass
class SiteConfiguration:
    """
    Operator-managed site configuration.

    Holds the lead channel credentials and the AI assistant endpoint.
    Blank fields mean "not configured".
    """

    telegram_bot_token: str = ""
    telegram_chat_id: str = ""
    ai_api_key: str = ""
    ai_api_url: str = "https://api.openai.com/v1/chat/completions"
    ai_model: str = "gpt-3.5-turbo"
    ai_provider: str = "openai"

    def lead_channel_ready(self) -> bool:
        return bool(self.telegram_bot_token.strip() and self.telegram_chat_id.strip())

    def missing_assistant_fields(self) -> list[str]:
        """Names of the assistant fields that still need a value."""
        required = {"ai_api_key": self.ai_api_key, "ai_model": self.ai_model}
        if self.ai_provider != "anthropic":
            required["ai_api_url"] = self.ai_api_url
        return [name for name, value in required.items() if not value.strip()]


@dataclass
class PurchaseNotification:
    """
    Synthetic social-proof record.

    Generated from a random active account; it does not describe a real sale.
    """

    game_id: str
    account_title: str
    heroes: list[str] = field(default_factory=list)
    time_ago: str = ""
    price: float = 0.0
