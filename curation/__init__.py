"""Deduplicating list aggregation for a publishing platform."""

from .errors import CurationError, DanglingReference, InvalidListType, NotFound, UpstreamFailure  # noqa: F401
from .services.aggregator import Aggregator, aggregate  # noqa: F401
from .services.deduplicator import DedupOracle, InMemoryDedupOracle, RedisDedupOracle, build_dedup_oracle  # noqa: F401
from .settings import Settings, get_settings, reset_settings_cache  # noqa: F401
from .utils.logging import configure_logging, configure_logging_from_settings  # noqa: F401

__all__ = [
    "Aggregator",
    "CurationError",
    "DanglingReference",
    "DedupOracle",
    "InMemoryDedupOracle",
    "InvalidListType",
    "NotFound",
    "RedisDedupOracle",
    "Settings",
    "UpstreamFailure",
    "aggregate",
    "build_dedup_oracle",
    "configure_logging",
    "configure_logging_from_settings",
    "get_settings",
    "reset_settings_cache",
]
