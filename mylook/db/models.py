"""SQLAlchemy models mirroring the remote wardrobe and history tables."""

from __future__ import annotations

from typing import Any

from sqlalchemy import JSON, Boolean, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for ORM models."""


class WardrobeItemRow(Base):
    """Garment record; photos live in the media directory."""

    __tablename__ = "wardrobe_items"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(256), default="")
    category: Mapped[str] = mapped_column(String(32), default="tops")
    style_tags: Mapped[list[str]] = mapped_column(JSON, default=list)
    season: Mapped[str] = mapped_column(String(16), default="all")
    is_favorite: Mapped[bool] = mapped_column(Boolean, default=False)
    image_url: Mapped[str] = mapped_column(Text, default="")
    image_path: Mapped[str] = mapped_column(String(256), default="")
    created_at: Mapped[str] = mapped_column(String(40), index=True)


class HistoryEntryRow(Base):
    """Accepted outfit record."""

    __tablename__ = "history_entries"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    accepted_at: Mapped[str] = mapped_column(String(40), index=True)
    look_type: Mapped[str] = mapped_column(String(128), default="Look")
    outfit: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list)
    context_summary: Mapped[str] = mapped_column(Text, default="")
    is_favorite: Mapped[bool] = mapped_column(Boolean, default=False)


MODELS_BY_TABLE: dict[str, type[Base]] = {
    WardrobeItemRow.__tablename__: WardrobeItemRow,
    HistoryEntryRow.__tablename__: HistoryEntryRow,
}
