"""Section lookups used to scope auto lists."""

from __future__ import annotations

from typing import Iterable, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from curation.db.models import Section
from curation.models.domain import SectionDTO
from curation.repositories.articles import parse_uuid


def _to_section(row: Section) -> SectionDTO:
    return SectionDTO(id=str(row.id), name=row.name, slug=row.slug, visible=row.visible)


class SectionRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def create(self, name: str, slug: str, *, visible: bool = True) -> SectionDTO:
        entity = Section(name=name, slug=slug, visible=visible)
        self._session.add(entity)
        self._session.flush()
        return _to_section(entity)

    def find_public(self, ids: Optional[Iterable[str]] = None) -> list[SectionDTO]:
        stmt = select(Section).where(Section.visible.is_(True)).order_by(Section.name)
        if ids is not None:
            keys = [key for key in (parse_uuid(i) for i in ids) if key is not None]
            if not keys:
                return []
            stmt = stmt.where(Section.id.in_(keys))
        return [_to_section(row) for row in self._session.scalars(stmt)]
