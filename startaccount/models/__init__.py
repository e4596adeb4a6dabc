from startaccount.models.catalog import (
    Account,
    AccountStatus,
    Game,
    Hero,
    HeroType,
    Resource,
    SeoMetadata,
)
from startaccount.models.failure import (
    UNKNOWN_FAILURE_MESSAGE,
    UNKNOWN_FAILURE_SUGGESTION,
    ApiResponse,
    CatalogConflictError,
    ConfigurationMissingError,
    DeliveryError,
    FailureDetail,
    FailureKind,
    KnownError,
    LeadValidationError,
    NotFoundError,
    OutcomeType,
    RecordParseError,
    StoreUnavailableError,
    create_unknown_failure,
    finalize_response,
)
from startaccount.models.locale import Locale, LocaleContext, LocalizedText
from startaccount.models.order import (
    ContactMethod,
    Order,
    OrderStatus,
    PurchaseNotification,
    SiteConfiguration,
)

__all__ = [
    "Account",
    "AccountStatus",
    "ApiResponse",
    "CatalogConflictError",
    "ConfigurationMissingError",
    "ContactMethod",
    "DeliveryError",
    "FailureDetail",
    "FailureKind",
    "Game",
    "Hero",
    "HeroType",
    "KnownError",
    "LeadValidationError",
    "Locale",
    "LocaleContext",
    "LocalizedText",
    "NotFoundError",
    "Order",
    "OrderStatus",
    "OutcomeType",
    "PurchaseNotification",
    "RecordParseError",
    "Resource",
    "SeoMetadata",
    "SiteConfiguration",
    "StoreUnavailableError",
    "UNKNOWN_FAILURE_MESSAGE",
    "UNKNOWN_FAILURE_SUGGESTION",
    "create_unknown_failure",
    "finalize_response",
]
