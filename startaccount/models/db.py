"""
SQLAlchemy ORM models for persistent storage.

Rows are stored loosely (rosters and resources as JSON) the way the
catalog has always been kept; `startaccount.parsers.records` is the only
path from these rows into the typed domain entities.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class GameDB(Base):
    """A game the shop sells accounts for."""

    __tablename__ = "games"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name_en: Mapped[str] = mapped_column(String(255), default="")
    name_ru: Mapped[str] = mapped_column(String(255), default="")
    description_en: Mapped[str] = mapped_column(Text, default="")
    description_ru: Mapped[str] = mapped_column(Text, default="")
    image: Mapped[str] = mapped_column(Text, default="")
    slug: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    has_gacha_heroes: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self) -> str:
        return f"<GameDB(id={self.id}, slug={self.slug})>"


class HeroDB(Base):
    """A selectable hero belonging to exactly one game."""

    __tablename__ = "heroes"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    game_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("games.id", ondelete="CASCADE"), index=True
    )
    name_en: Mapped[str] = mapped_column(String(255), default="")
    name_ru: Mapped[str] = mapped_column(String(255), default="")
    icon: Mapped[str] = mapped_column(Text, default="")
    type: Mapped[str] = mapped_column(String(20), default="epic")
    rarity: Mapped[int | None] = mapped_column(Integer, nullable=True)
    element: Mapped[str | None] = mapped_column(String(50), nullable=True)

    def __repr__(self) -> str:
        return f"<HeroDB(id={self.id}, game={self.game_id})>"


class AccountDB(Base):
    """
    An account listing.

    `heroes` holds the roster as a JSON list; entries are hero ids or hero
    objects and may repeat. `resources` holds [{"name": ..., "value": ...}].
    """

    __tablename__ = "accounts"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    game_id: Mapped[str] = mapped_column(String(64), ForeignKey("games.id"), index=True)
    title_en: Mapped[str] = mapped_column(String(255), default="")
    title_ru: Mapped[str] = mapped_column(String(255), default="")
    description_en: Mapped[str] = mapped_column(Text, default="")
    description_ru: Mapped[str] = mapped_column(Text, default="")
    price: Mapped[float] = mapped_column(Float, default=0.0)
    image: Mapped[str] = mapped_column(Text, default="")
    server: Mapped[str | None] = mapped_column(String(100), nullable=True)
    adventure_rank: Mapped[int | None] = mapped_column(Integer, nullable=True)
    guaranteed: Mapped[bool] = mapped_column(Boolean, default=False)
    status: Mapped[str] = mapped_column(String(20), default="active", index=True)

    heroes: Mapped[list[Any]] = mapped_column(JSON, default=list)
    resources: Mapped[list[Any]] = mapped_column(JSON, default=list)

    # SEO metadata
    meta_title_en: Mapped[str | None] = mapped_column(Text, nullable=True)
    meta_title_ru: Mapped[str | None] = mapped_column(Text, nullable=True)
    meta_description_en: Mapped[str | None] = mapped_column(Text, nullable=True)
    meta_description_ru: Mapped[str | None] = mapped_column(Text, nullable=True)
    meta_keywords_en: Mapped[str | None] = mapped_column(Text, nullable=True)
    meta_keywords_ru: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self) -> str:
        return f"<AccountDB(id={self.id}, game={self.game_id}, status={self.status})>"


class OrderDB(Base):
    """A purchase lead recorded after the operator was notified."""

    __tablename__ = "orders"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    account_id: Mapped[str] = mapped_column(String(64), index=True)
    price: Mapped[float] = mapped_column(Float)
    contact_method: Mapped[str] = mapped_column(String(20))
    contact_value: Mapped[str] = mapped_column(Text)
    status: Mapped[str] = mapped_column(String(20), default="pending")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), index=True
    )

    def __repr__(self) -> str:
        return f"<OrderDB(id={self.id}, account={self.account_id}, status={self.status})>"


class ConfigurationDB(Base):
    """Singleton row holding lead channel and assistant settings."""

    __tablename__ = "configuration"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    telegram_bot_token: Mapped[str] = mapped_column(Text, default="")
    telegram_chat_id: Mapped[str] = mapped_column(String(100), default="")
    ai_api_key: Mapped[str] = mapped_column(Text, default="")
    ai_api_url: Mapped[str] = mapped_column(Text, default="")
    ai_model: Mapped[str] = mapped_column(String(100), default="")
    ai_provider: Mapped[str] = mapped_column(String(20), default="openai")
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self) -> str:
        return f"<ConfigurationDB(id={self.id})>"
