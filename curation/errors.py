"""Error taxonomy for list aggregation."""

from __future__ import annotations

from typing import Iterable


class CurationError(Exception):
    """Base error for the curation package.

    ``registered`` holds the identities an aborted aggregation had already
    registered with the dedup oracle; empty when nothing was registered.
    """

    registered: tuple[str, ...] = ()


class NotFound(CurationError):
    """A list or referenced item could not be resolved."""

    def __init__(self, kind: str, identity: str) -> None:
        super().__init__(f"{kind} not found: {identity}")
        self.kind = kind
        self.identity = identity


class InvalidListType(CurationError):
    """The stored list type is not one the aggregator can expand."""

    def __init__(self, list_id: str, list_type: object) -> None:
        super().__init__(f"list {list_id} has unsupported type {list_type!r}")
        self.list_id = list_id
        self.list_type = list_type


class DanglingReference(NotFound):
    """A manual list entry points at an item that no longer resolves."""

    def __init__(self, list_id: str, item_id: str) -> None:
        CurationError.__init__(self, f"list {list_id} references missing item {item_id}")
        self.kind = "item"
        self.identity = item_id
        self.list_id = list_id
        self.item_id = item_id


class UpstreamFailure(CurationError):
    """A storage or dedup collaborator failed while a call was in progress.

    ``registered`` lists the identities the failed call had already
    registered with the dedup oracle, so callers sharing the oracle can
    reconcile.
    """

    def __init__(self, message: str, registered: Iterable[str] = ()) -> None:
        super().__init__(message)
        self.registered = tuple(registered)
