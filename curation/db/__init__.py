"""Database utilities for the curation service."""

from .models import Article, ArticleState, Base, ContentList, ListOrder, ListType, Section  # noqa: F401
from .session import ensure_schema, get_engine, get_sessionmaker, session_scope  # noqa: F401

__all__ = [
    "Article",
    "ArticleState",
    "Base",
    "ContentList",
    "ListOrder",
    "ListType",
    "Section",
    "ensure_schema",
    "get_engine",
    "get_sessionmaker",
    "session_scope",
]
