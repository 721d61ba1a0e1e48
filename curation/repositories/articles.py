"""Item storage: published article lookups for list expansion."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Iterable

from sqlalchemy import and_, delete, or_, select
from sqlalchemy.orm import Session
from sqlalchemy.sql.elements import ColumnElement

from curation.db.models import Article, ArticleState, ListOrder
from curation.errors import NotFound
from curation.models.domain import ArticleCreate, ArticleFilter, FindOptions, ResultItem, as_utc, utcnow


def parse_uuid(value: str) -> uuid.UUID | None:
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None


def _published_clause(now: datetime) -> ColumnElement[bool]:
    return and_(
        Article.state == ArticleState.PUBLISHED,
        Article.published_at.is_not(None),
        Article.published_at <= now,
        or_(Article.expires_at.is_(None), Article.expires_at > now),
    )


def to_result_item(row: Article) -> ResultItem:
    return ResultItem(
        id=str(row.id),
        title=row.title,
        summary=row.summary or "",
        url=row.url,
        image_url=row.image_url,
        section_id=str(row.section_id) if row.section_id else None,
        published_at=as_utc(row.published_at),
    )


class ArticleRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def create(self, payload: ArticleCreate) -> ResultItem:
        entity = Article(
            title=payload.title,
            slug=payload.slug,
            summary=payload.summary,
            url=payload.url,
            image_url=payload.image_url,
            section_id=parse_uuid(payload.section_id) if payload.section_id else None,
            state=payload.state,
            published_at=as_utc(payload.published_at),
            expires_at=as_utc(payload.expires_at),
        )
        self._session.add(entity)
        self._session.flush()
        return to_result_item(entity)

    def read(self, item_id: str, *, now: datetime | None = None) -> ResultItem:
        """Return a published article by id; anything else is NotFound."""
        key = parse_uuid(item_id)
        if key is None:
            raise NotFound("item", item_id)
        stmt = select(Article).where(Article.id == key, _published_clause(as_utc(now) or utcnow()))
        row = self._session.scalars(stmt).first()
        if row is None:
            raise NotFound("item", item_id)
        return to_result_item(row)

    def find_published(self, filter_: ArticleFilter, options: FindOptions) -> list[ResultItem]:
        """Return up to ``options.limit`` published articles in list order.

        ``options.after`` continues a previous page (keyset on published_at, id)
        so consecutive pages never overlap.
        """
        now = as_utc(options.now) or utcnow()
        stmt = select(Article).where(_published_clause(now))

        if filter_.section_ids is not None:
            keys = _parse_all(filter_.section_ids)
            if not keys:
                return []
            stmt = stmt.where(Article.section_id.in_(keys))

        if options.order is ListOrder.RECENT:
            if options.after is not None:
                after_ts, after_id = options.after
                after_ts = as_utc(after_ts)
                after_key = parse_uuid(after_id)
                stmt = stmt.where(
                    or_(
                        Article.published_at < after_ts,
                        and_(Article.published_at == after_ts, Article.id < after_key),
                    )
                )
            stmt = stmt.order_by(Article.published_at.desc(), Article.id.desc())
        else:  # pragma: no cover - ListOrder has a single member today
            raise ValueError(f"unsupported order: {options.order}")

        rows = self._session.scalars(stmt.limit(options.limit)).all()
        return [to_result_item(row) for row in rows]

    def delete_all(self) -> int:
        result = self._session.execute(delete(Article))
        return result.rowcount or 0


def _parse_all(values: Iterable[str]) -> list[uuid.UUID]:
    keys = []
    for value in values:
        key = parse_uuid(value)
        if key is not None:
            keys.append(key)
    return keys
