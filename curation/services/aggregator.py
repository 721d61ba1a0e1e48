"""Aggregate one or more lists into a single deduplicated, limited output."""

from __future__ import annotations

import logging
import uuid
from typing import Iterator, List, Mapping, Optional, Sequence, Tuple, Union

from redis.exceptions import RedisError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from curation.db.models import ListType
from curation.db.session import session_scope
from curation.errors import CurationError, InvalidListType, UpstreamFailure
from curation.models.domain import ListRecord, ResultItem
from curation.repositories.articles import ArticleRepository
from curation.repositories.lists import ListRepository
from curation.repositories.sections import SectionRepository
from curation.services.deduplicator import DedupOracle
from curation.services.expanders import AutoExpander, Expander, ManualExpander
from curation.settings import Settings, get_settings

logger = logging.getLogger(__name__)

ListIds = Union[str, Sequence[str]]


class Aggregator:
    """Expands lists in request order, filtering through an optional dedup oracle.

    The effective limit is ``limit`` when given (a cap on the combined output
    of all lists), otherwise the configured limit of the first list. Only
    accepted items are registered with the oracle; candidates the oracle has
    already seen are dropped without counting toward the limit.
    """

    def __init__(
        self,
        lists: ListRepository,
        articles: ArticleRepository,
        sections: SectionRepository,
        *,
        settings: Settings | None = None,
        expanders: Optional[Mapping[ListType, Expander]] = None,
    ) -> None:
        self._lists = lists
        if expanders is None:
            config = settings or get_settings()
            expanders = {
                ListType.AUTO: AutoExpander(articles, sections, page_size=int(config.auto_page_size)),
                ListType.MANUAL: ManualExpander(articles, skip_dangling=config.skip_dangling_references),
            }
        self._expanders = dict(expanders)

    @classmethod
    def from_session(cls, session: Session, settings: Settings | None = None) -> "Aggregator":
        config = settings or get_settings()
        return cls(
            ListRepository(session, settings=config),
            ArticleRepository(session),
            SectionRepository(session),
            settings=config,
        )

    def aggregate(
        self,
        list_ids: ListIds,
        dedupe: DedupOracle | None = None,
        limit: int | None = None,
    ) -> List[ResultItem]:
        if limit is not None and limit < 1:
            raise ValueError("limit must be a positive integer")
        ids = [list_ids] if isinstance(list_ids, str) else list(list_ids)
        trace_id = str(uuid.uuid4())
        logger.info(
            "aggregate.start",
            extra={"trace_id": trace_id, "list_ids": ids, "limit": limit, "deduped": dedupe is not None},
        )

        # Resolve and dispatch every list before touching the oracle
        try:
            plan = [(record, self._expander_for(record)) for record in map(self._lists.read, ids)]
        except SQLAlchemyError as exc:
            raise UpstreamFailure("list storage lookup failed") from exc
        if not plan:
            return []

        effective = limit if limit is not None else plan[0][0].limit
        results: List[ResultItem] = []
        registered: List[str] = []
        try:
            for record, expander in plan:
                if len(results) >= effective:
                    break
                accepted, skipped = self._consume(record, expander, effective, results, dedupe, registered)
                logger.info(
                    "aggregate.list",
                    extra={
                        "trace_id": trace_id,
                        "list_id": record.id,
                        "list_type": record.type.value,
                        "accepted": accepted,
                        "skipped": skipped,
                    },
                )
        except (SQLAlchemyError, RedisError) as exc:
            logger.error(
                "aggregate.upstream_failure",
                extra={"trace_id": trace_id, "registered": len(registered), "error": str(exc)[:256]},
            )
            raise UpstreamFailure(f"expansion failed: {exc}", registered) from exc
        except CurationError as exc:
            exc.registered = tuple(registered)
            logger.error(
                "aggregate.aborted",
                extra={"trace_id": trace_id, "registered": len(registered), "error": str(exc)[:256]},
            )
            raise

        logger.info(
            "aggregate.done",
            extra={"trace_id": trace_id, "returned": len(results), "limit": effective},
        )
        return results

    def _expander_for(self, record: ListRecord) -> Expander:
        expander = self._expanders.get(record.type)
        if expander is None:
            raise InvalidListType(record.id, record.type)
        return expander

    def _consume(
        self,
        record: ListRecord,
        expander: Expander,
        effective: int,
        results: List[ResultItem],
        dedupe: DedupOracle | None,
        registered: List[str],
    ) -> Tuple[int, int]:
        accepted = skipped = 0
        candidates: Iterator[ResultItem] = expander.expand(record, effective - len(results))
        try:
            for item in candidates:
                if dedupe is not None:
                    if not dedupe.test_and_register(item.id):
                        skipped += 1
                        continue
                    registered.append(item.id)
                results.append(item)
                accepted += 1
                if len(results) >= effective:
                    break
        finally:
            close = getattr(candidates, "close", None)
            if close is not None:
                close()
        return accepted, skipped


def aggregate(
    list_ids: ListIds,
    dedupe: DedupOracle | None = None,
    limit: int | None = None,
    *,
    settings: Settings | None = None,
) -> List[ResultItem]:
    """Run one aggregation inside its own database session."""
    config = settings or get_settings()
    with session_scope(config) as session:
        return Aggregator.from_session(session, config).aggregate(list_ids, dedupe, limit)
