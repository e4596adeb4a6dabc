from startaccount.api.admin import router as admin_router
from startaccount.api.catalog import router as catalog_router
from startaccount.api.chat import router as chat_router
from startaccount.api.health import router as health_router
from startaccount.api.leads import router as leads_router
from startaccount.api.notifications import router as notifications_router
from startaccount.api.sessions import router as sessions_router

__all__ = [
    "admin_router",
    "catalog_router",
    "chat_router",
    "health_router",
    "leads_router",
    "notifications_router",
    "sessions_router",
]
