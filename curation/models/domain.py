"""Domain DTOs for lists, entries and aggregated results."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Annotated, Any, Dict, List, Literal, Optional, Tuple, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PositiveInt,
    field_validator,
    model_validator,
)

from curation.db.models import ArticleState, ListOrder, ListType

# ResultItem fields a manual entry may override
OVERRIDABLE_FIELDS = ("title", "summary", "url", "image_url")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Normalize to aware UTC; naive values are taken as UTC (SQLite drops tzinfo)."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class ResultItem(BaseModel):
    """Display-ready item produced by list expansion."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Dedup identity")
    title: str
    summary: str = ""
    url: Optional[str] = None
    image_url: Optional[str] = None
    section_id: Optional[str] = None
    published_at: Optional[datetime] = None
    is_custom: bool = False

    def with_overrides(self, overrides: Dict[str, Any]) -> "ResultItem":
        """Return a copy with non-empty override values applied."""
        update = {
            key: value
            for key, value in overrides.items()
            if key in OVERRIDABLE_FIELDS and value not in (None, "")
        }
        if not update:
            return self
        return self.model_copy(update=update)


class _DisplayWindow(BaseModel):
    live_at: Optional[datetime] = Field(None, description="Entry hidden before this instant")
    expires_at: Optional[datetime] = Field(None, description="Entry hidden from this instant")

    def is_live(self, now: datetime) -> bool:
        live_at = as_utc(self.live_at)
        expires_at = as_utc(self.expires_at)
        if live_at is not None and live_at > now:
            return False
        if expires_at is not None and expires_at <= now:
            return False
        return True


class ItemReference(_DisplayWindow):
    """Manual entry pointing at a stored article."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["reference"] = "reference"
    item_id: str
    overrides: Dict[str, Any] = Field(default_factory=dict)

    @property
    def identity(self) -> str:
        return self.item_id


class CustomItem(_DisplayWindow):
    """Manual entry with inline content and its own identity."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["custom"] = "custom"
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    title: str
    summary: str = ""
    url: Optional[str] = None
    image_url: Optional[str] = None

    @field_validator("title")
    @classmethod
    def _strip_title(cls, v: str) -> str:
        s = v.strip()
        if not s:
            raise ValueError("custom item title must not be blank")
        return s

    @property
    def identity(self) -> str:
        return self.id

    def to_result(self) -> ResultItem:
        return ResultItem(
            id=self.id,
            title=self.title,
            summary=self.summary,
            url=self.url,
            image_url=self.image_url,
            is_custom=True,
        )


ListEntry = Annotated[Union[ItemReference, CustomItem], Field(discriminator="kind")]


def _tag_entries(value: Any) -> Any:
    # Entries stored without a kind tag: anything carrying an item id is a reference
    if not isinstance(value, list):
        return value
    tagged = []
    for entry in value:
        if isinstance(entry, dict) and "kind" not in entry:
            entry = {**entry, "kind": "reference" if "item_id" in entry else "custom"}
        tagged.append(entry)
    return tagged


class AutoRule(BaseModel):
    """Standing rule for auto lists."""

    model_config = ConfigDict(frozen=True)

    order: ListOrder = ListOrder.RECENT
    sections: List[str] = Field(default_factory=list, description="Section ids to scope to (empty = all)")


class ListCreate(BaseModel):
    """Payload for creating a list."""

    name: str = Field(..., max_length=256)
    type: ListType
    limit: Optional[PositiveInt] = Field(None, description="Defaults to DEFAULT_LIST_LIMIT")
    order: ListOrder = ListOrder.RECENT
    sections: List[str] = Field(default_factory=list)
    items: List[ListEntry] = Field(default_factory=list)

    @field_validator("items", mode="before")
    @classmethod
    def _tag_items(cls, value: Any) -> Any:
        return _tag_entries(value)

    @model_validator(mode="after")
    def _check_payload(self) -> "ListCreate":
        if self.type is ListType.AUTO and self.items:
            raise ValueError("auto lists cannot carry manual items")
        if self.type is ListType.MANUAL and self.sections:
            raise ValueError("manual lists cannot carry section filters")
        return self


class ListRecord(BaseModel):
    """Resolved list definition."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    type: ListType
    limit: PositiveInt
    rule: AutoRule = Field(default_factory=AutoRule)
    items: List[ListEntry] = Field(default_factory=list)

    @field_validator("items", mode="before")
    @classmethod
    def _tag_items(cls, value: Any) -> Any:
        return _tag_entries(value)


class SectionDTO(BaseModel):
    id: str
    name: str
    slug: str
    visible: bool = True


class ArticleCreate(BaseModel):
    """Payload for creating an article (storage/test harness)."""

    title: str = Field(..., max_length=512)
    slug: str = Field(..., max_length=256)
    summary: str = ""
    url: Optional[str] = None
    image_url: Optional[str] = None
    section_id: Optional[str] = None
    state: ArticleState = ArticleState.DRAFT
    published_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None


class ArticleFilter(BaseModel):
    section_ids: Optional[List[str]] = Field(None, description="Restrict to these sections when set")


class FindOptions(BaseModel):
    order: ListOrder = ListOrder.RECENT
    limit: PositiveInt = 50
    after: Optional[Tuple[datetime, str]] = Field(None, description="Keyset cursor: last (published_at, id) seen")
    now: Optional[datetime] = Field(None, description="Reference instant for the published check")
