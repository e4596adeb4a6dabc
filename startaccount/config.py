from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env")

    app_name: str = "StartAccount"
    debug: bool = False

    database_url: str = "postgresql+asyncpg://localhost:5432/startaccount"

    # Empty token disables the admin header check (local development only)
    admin_token: str = ""

    telegram_api_base: str = "https://api.telegram.org"
    http_timeout_seconds: float = 15.0

    # Locale used for messages addressed to the shop operator
    operator_locale: str = "ru"
    default_locale: str = "ru"


settings = Settings()


# =============================================================================
# CATALOG PRESENTATION LIMITS
# =============================================================================

# Accounts revealed per "load more" step
ACCOUNTS_PER_PAGE = 6

# Unique hero badges shown on an account card before "view all"
MAX_HERO_BADGES = 8

# Description characters shown on an account card
DESCRIPTION_PREVIEW_LENGTH = 100
ELLIPSIS = "..."

# Heroes included in a synthetic purchase notification
NOTIFICATION_HERO_LIMIT = 3

# Recent orders shown on the admin dashboard
RECENT_ORDERS_LIMIT = 5
