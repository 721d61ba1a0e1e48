"""List expanders: turn a list record into a lazy stream of candidate items."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Iterator, Optional, Protocol

from curation.errors import DanglingReference, NotFound
from curation.models.domain import (
    ArticleFilter,
    AutoRule,
    CustomItem,
    FindOptions,
    ItemReference,
    ListRecord,
    ResultItem,
    utcnow,
)
from curation.repositories.articles import ArticleRepository
from curation.repositories.sections import SectionRepository

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


class Expander(Protocol):
    def expand(self, record: ListRecord, need: int) -> Iterator[ResultItem]: ...  # noqa: D401


class AutoExpander:
    """Most-recent published articles, optionally scoped to public sections.

    Pages are fetched only when the consumer pulls past the current one. The
    first page holds ``need`` rows (capped by ``page_size``); later pages
    exist for consumers that discard candidates, and continue from the last
    row seen rather than re-reading it.
    """

    def __init__(
        self,
        articles: ArticleRepository,
        sections: SectionRepository,
        *,
        page_size: int = 50,
        clock: Clock = utcnow,
    ) -> None:
        self._articles = articles
        self._sections = sections
        self._page_size = page_size
        self._clock = clock

    def expand(self, record: ListRecord, need: int) -> Iterator[ResultItem]:
        if need < 1:
            return
        filter_ = self._build_filter(record.rule)
        if filter_ is None:
            logger.info("auto.no_public_sections", extra={"list_id": record.id})
            return

        now = self._clock()
        size = min(need, self._page_size)
        after = None
        while True:
            page = self._articles.find_published(
                filter_,
                FindOptions(order=record.rule.order, limit=size, after=after, now=now),
            )
            yield from page
            if len(page) < size:
                return
            last = page[-1]
            after = (last.published_at, last.id)

    def _build_filter(self, rule: AutoRule) -> Optional[ArticleFilter]:
        if not rule.sections:
            return ArticleFilter()
        public = self._sections.find_public(rule.sections)
        if not public:
            return None
        return ArticleFilter(section_ids=[section.id for section in public])


class ManualExpander:
    """Stored entries in order; references resolved, custom items passed through."""

    def __init__(
        self,
        articles: ArticleRepository,
        *,
        skip_dangling: bool = True,
        clock: Clock = utcnow,
    ) -> None:
        self._articles = articles
        self._skip_dangling = skip_dangling
        self._clock = clock

    def expand(self, record: ListRecord, need: int) -> Iterator[ResultItem]:
        now = self._clock()
        for position, entry in enumerate(record.items):
            if not entry.is_live(now):
                continue
            if isinstance(entry, CustomItem):
                yield entry.to_result()
                continue
            try:
                item = self.resolve(record.id, entry, now)
            except DanglingReference:
                if not self._skip_dangling:
                    raise
                logger.warning(
                    "manual.dangling_reference",
                    extra={"list_id": record.id, "item_id": entry.item_id, "position": position},
                )
                continue
            yield item

    def resolve(self, list_id: str, entry: ItemReference, now: datetime | None = None) -> ResultItem:
        try:
            item = self._articles.read(entry.item_id, now=now)
        except NotFound as exc:
            raise DanglingReference(list_id, entry.item_id) from exc
        return item.with_overrides(entry.overrides)
