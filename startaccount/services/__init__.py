from startaccount.services.catalog import (
    CatalogPage,
    CatalogSnapshot,
    PaletteEntry,
    load_catalog_snapshot,
    render_catalog_page,
    render_palette,
    search_snapshot,
)
from startaccount.services.discovery import (
    DiscoverySession,
    DiscoveryState,
    SelectionError,
    SessionRegistry,
)
from startaccount.services.lead_relay import (
    LeadRequest,
    TelegramNotifier,
    build_lead_message,
    submit_lead,
    validate_lead,
)
from startaccount.services.purchase_notifications import generate_purchase_notification

__all__ = [
    "CatalogPage",
    "CatalogSnapshot",
    "DiscoverySession",
    "DiscoveryState",
    "LeadRequest",
    "PaletteEntry",
    "SelectionError",
    "SessionRegistry",
    "TelegramNotifier",
    "build_lead_message",
    "generate_purchase_notification",
    "load_catalog_snapshot",
    "render_catalog_page",
    "render_palette",
    "search_snapshot",
    "submit_lead",
    "validate_lead",
]
