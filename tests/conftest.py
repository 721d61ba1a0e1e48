from __future__ import annotations

import itertools
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]

if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from curation.db.models import ArticleState  # noqa: E402
from curation.db.session import ensure_schema, session_scope  # noqa: E402
from curation.models.domain import ArticleCreate  # noqa: E402
from curation.repositories.articles import ArticleRepository  # noqa: E402
from curation.repositories.lists import ListRepository  # noqa: E402
from curation.repositories.sections import SectionRepository  # noqa: E402
from curation.settings import reset_settings_cache  # noqa: E402


@pytest.fixture(autouse=True)
def _set_env(monkeypatch, tmp_path: Path):
    monkeypatch.setenv("CURATION_DATABASE_URL", f"sqlite:///{tmp_path / 'curation.db'}")
    monkeypatch.delenv("DEDUP_REDIS_URL", raising=False)
    monkeypatch.delenv("SKIP_DANGLING_REFERENCES", raising=False)
    reset_settings_cache()
    yield
    reset_settings_cache()


@pytest.fixture()
def session():
    ensure_schema()
    with session_scope() as s:
        yield s


@pytest.fixture()
def articles(session) -> ArticleRepository:
    return ArticleRepository(session)


@pytest.fixture()
def sections(session) -> SectionRepository:
    return SectionRepository(session)


@pytest.fixture()
def lists(session) -> ListRepository:
    return ListRepository(session)


@pytest.fixture()
def publish(articles):
    """Create published articles; each one is more recent than the last."""
    counter = itertools.count(1)
    base = datetime.now(timezone.utc) - timedelta(days=1)

    def _publish(**fields):
        n = next(counter)
        data = {
            "title": f"Article {n}",
            "slug": f"article-{n}",
            "summary": f"Summary {n}",
            "state": ArticleState.PUBLISHED,
            "published_at": base + timedelta(minutes=n),
        }
        data.update(fields)
        return articles.create(ArticleCreate(**data))

    return _publish


@pytest.fixture()
def draft(articles):
    counter = itertools.count(1)

    def _draft(**fields):
        n = next(counter)
        data = {"title": f"Draft {n}", "slug": f"draft-{n}", "state": ArticleState.DRAFT}
        data.update(fields)
        return articles.create(ArticleCreate(**data))

    return _draft
