"""SQLAlchemy models for lists, articles and sections."""

from __future__ import annotations

import uuid
from datetime import datetime
from enum import Enum

from sqlalchemy import (
    Boolean,
    DateTime,
    Enum as SAEnum,
    ForeignKey,
    Index,
    Integer,
    JSON,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import Uuid


class Base(DeclarativeBase):
    """Base class for ORM models."""


class TimestampMixin:
    """Adds created_at/updated_at columns."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )


class ListType(str, Enum):
    AUTO = "auto"
    MANUAL = "manual"


class ListOrder(str, Enum):
    RECENT = "recent"


class ArticleState(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"


class Section(TimestampMixin, Base):
    """Site section used to scope auto lists."""

    __tablename__ = "sections"
    __table_args__ = (UniqueConstraint("slug", name="uq_sections_slug"),)

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    slug: Mapped[str] = mapped_column(String(128), nullable=False)
    visible: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class Article(TimestampMixin, Base):
    """Publishable content item."""

    __tablename__ = "articles"
    __table_args__ = (
        UniqueConstraint("section_id", "slug", name="uq_articles_section_slug"),
        Index("ix_articles_state_published", "state", "published_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    title: Mapped[str] = mapped_column(String(512), nullable=False)
    slug: Mapped[str] = mapped_column(String(256), nullable=False)
    summary: Mapped[str] = mapped_column(Text, nullable=False, default="")
    url: Mapped[str | None] = mapped_column(String(2048))
    image_url: Mapped[str | None] = mapped_column(String(2048))
    section_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("sections.id", ondelete="SET NULL"),
    )
    state: Mapped[ArticleState] = mapped_column(
        SAEnum(ArticleState, name="article_state", native_enum=False, length=16),
        nullable=False,
        default=ArticleState.DRAFT,
    )
    published_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    expires_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))


class ContentList(TimestampMixin, Base):
    """Stored list definition; auto rule or manual entries."""

    __tablename__ = "content_lists"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(String(256), nullable=False)
    # Plain string so rows written by other tools with unknown types still load
    type: Mapped[str] = mapped_column(String(16), nullable=False)
    limit: Mapped[int] = mapped_column(Integer, nullable=False)
    order: Mapped[str | None] = mapped_column(String(16))
    sections: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    items: Mapped[list[dict]] = mapped_column(JSON, nullable=False, default=list)
