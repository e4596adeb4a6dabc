import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from importlib.metadata import version as pkg_version

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from startaccount.api import (
    admin_router,
    catalog_router,
    chat_router,
    health_router,
    leads_router,
    notifications_router,
    sessions_router,
)
from startaccount.config import settings
from startaccount.db.database import init_db
from startaccount.models.failure import KnownError, StoreUnavailableError, create_unknown_failure

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    await init_db()
    yield


app = FastAPI(
    title=settings.app_name,
    version=pkg_version("startaccount"),
    lifespan=lifespan,
)

app.include_router(admin_router)
app.include_router(catalog_router)
app.include_router(chat_router)
app.include_router(health_router)
app.include_router(leads_router)
app.include_router(notifications_router)
app.include_router(sessions_router)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Tighten in production
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(KnownError)
async def known_error_handler(request: Request, exc: KnownError) -> JSONResponse:
    logger.warning(
        "Request failed: %s",
        exc.message,
        extra={"path": request.url.path, "kind": exc.kind.value, "detail": exc.detail},
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_response().model_dump(mode="json"),
    )


@app.exception_handler(SQLAlchemyError)
async def store_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error("Catalog store error on %s: %s", request.url.path, type(exc).__name__)
    error = StoreUnavailableError(type(exc).__name__)
    return JSONResponse(
        status_code=error.status_code,
        content=error.to_response().model_dump(mode="json"),
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s", request.url.path)
    return JSONResponse(
        status_code=500,
        content=create_unknown_failure(exc).model_dump(mode="json"),
    )
