"""List storage: resolves list ids to list records."""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from curation.db.models import ContentList, ListOrder, ListType
from curation.errors import InvalidListType, NotFound
from curation.models.domain import AutoRule, ListCreate, ListRecord
from curation.repositories.articles import parse_uuid
from curation.settings import Settings, get_settings

logger = logging.getLogger(__name__)

_KNOWN_TYPES = {t.value for t in ListType}


class ListRepository:
    def __init__(self, session: Session, *, settings: Settings | None = None) -> None:
        self._session = session
        self._settings = settings

    def read(self, list_id: str) -> ListRecord:
        key = parse_uuid(list_id)
        row = self._session.get(ContentList, key) if key is not None else None
        if row is None:
            raise NotFound("list", list_id)
        if row.type not in _KNOWN_TYPES:
            raise InvalidListType(list_id, row.type)
        return to_list_record(row)

    def create(self, payload: ListCreate) -> ListRecord:
        limit = payload.limit
        if limit is None:
            limit = (self._settings or get_settings()).default_list_limit
        entity = ContentList(
            name=payload.name,
            type=payload.type.value,
            limit=int(limit),
            order=payload.order.value if payload.type is ListType.AUTO else None,
            sections=list(payload.sections),
            items=[entry.model_dump(mode="json") for entry in payload.items],
        )
        self._session.add(entity)
        self._session.flush()
        logger.info(
            "lists.created",
            extra={"list_id": str(entity.id), "list_type": entity.type, "entries": len(entity.items)},
        )
        return to_list_record(entity)


def to_list_record(row: ContentList) -> ListRecord:
    list_type = ListType(row.type)
    rule = AutoRule()
    if list_type is ListType.AUTO:
        rule = AutoRule(order=ListOrder(row.order or ListOrder.RECENT.value), sections=list(row.sections or []))
    return ListRecord(
        id=str(row.id),
        name=row.name,
        type=list_type,
        limit=row.limit,
        rule=rule,
        items=list(row.items or []) if list_type is ListType.MANUAL else [],
    )
