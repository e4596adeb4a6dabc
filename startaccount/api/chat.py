"""
Shop assistant chat endpoint.

The assistant sees the whole catalog. Configuration comes from the
operator-managed configuration record, not from the environment.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from startaccount.api.catalog import resolve_locale
from startaccount.db import get_configuration
from startaccount.db.database import async_session_factory, get_session
from startaccount.models.locale import Locale
from startaccount.services.assistant import (
    AssistantClient,
    ChatTurn,
    build_system_prompt,
    load_assistant_context,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/chat", tags=["chat"])


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Dependency providing the session factory for concurrent catalog loads."""
    return async_session_factory


class ChatMessage(BaseModel):
    """A single chat message."""

    role: str = Field(..., pattern="^(user|assistant)$")
    content: str


class ChatRequest(BaseModel):
    """Request body for chat endpoint."""

    messages: list[ChatMessage] = Field(..., min_length=1)
    locale: Locale | None = None


class ChatResponse(BaseModel):
    """Response from chat endpoint."""

    message: ChatMessage


@router.post("", response_model=ChatResponse)
async def chat(
    request: ChatRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
    session_factory: Annotated[
        async_sessionmaker[AsyncSession], Depends(get_session_factory)
    ],
) -> ChatResponse:
    """
    Ask the shop assistant.

    Returns 503 (configuration_missing) until the operator has configured
    the assistant endpoint, model and key.
    """
    config = await get_configuration(session)
    client = AssistantClient(config)

    context = await load_assistant_context(session_factory)
    system_prompt = build_system_prompt(context, resolve_locale(request.locale))
    turns = [ChatTurn(role=message.role, content=message.content) for message in request.messages]

    reply = await client.reply(system_prompt, turns)
    logger.info("Assistant replied", extra={"turns": len(turns), "provider": config.ai_provider})
    return ChatResponse(message=ChatMessage(role="assistant", content=reply))
