"""Dedup oracles: shared test-and-register sets of shown item ids."""

from __future__ import annotations

import logging
from typing import Iterable, Protocol

import redis
from redis.exceptions import RedisError

from curation.settings import Settings, get_settings

logger = logging.getLogger(__name__)


class DedupOracle(Protocol):
    def test_and_register(self, identity: str) -> bool: ...  # noqa: D401
    def snapshot(self) -> frozenset[str]: ...  # noqa: D401


class InMemoryDedupOracle:
    """Set-backed oracle for a single process (page render, tests)."""

    def __init__(self, seen: Iterable[str] = ()) -> None:
        self._set: set[str] = set(seen)

    def test_and_register(self, identity: str) -> bool:
        if identity in self._set:
            return False
        self._set.add(identity)
        return True

    def snapshot(self) -> frozenset[str]:
        return frozenset(self._set)

    def __len__(self) -> int:
        return len(self._set)


class _RedisLikeClient(Protocol):
    def sadd(self, name: str, *values: str) -> int: ...  # number of members added
    def smembers(self, name: str) -> set: ...
    def expire(self, name: str, time: int) -> bool: ...


class RedisDedupOracle:
    """Redis-backed oracle shared across processes.

    - test-and-register: `SADD key id` returns 1 only for the first caller
    - snapshot: `SMEMBERS key`
    - the set expires `ttl_seconds` after the latest registration

    Tests inject a fake client exposing the same three methods.
    """

    def __init__(
        self,
        client: _RedisLikeClient,
        scope: str,
        *,
        prefix: str = "dedup",
        ttl_seconds: int | None = None,
    ) -> None:
        self._client = client
        self._key = f"{prefix}:{scope}"
        self._ttl = ttl_seconds

    @property
    def key(self) -> str:
        return self._key

    def test_and_register(self, identity: str) -> bool:
        added = self._client.sadd(self._key, identity)
        if added and self._ttl:
            self._client.expire(self._key, self._ttl)
        return bool(added)

    def snapshot(self) -> frozenset[str]:
        members = self._client.smembers(self._key)
        return frozenset(m.decode("utf-8") if isinstance(m, bytes) else str(m) for m in members)


def build_dedup_oracle(scope: str, settings: Settings | None = None) -> InMemoryDedupOracle | RedisDedupOracle:
    """Return a Redis oracle for ``scope`` when configured and reachable, else in-memory."""
    config = settings or get_settings()
    if not config.dedup_redis_url:
        logger.info("dedupe.oracle.memory", extra={"scope": scope, "reason": "redis_not_configured"})
        return InMemoryDedupOracle()

    client = redis.Redis.from_url(config.dedup_redis_url, socket_connect_timeout=0.2)
    try:
        client.ping()
    except RedisError:
        logger.warning("dedupe.oracle.memory", extra={"scope": scope, "reason": "redis_ping_failed"})
        return InMemoryDedupOracle()
    logger.info("dedupe.oracle.redis", extra={"scope": scope})
    return RedisDedupOracle(
        client,
        scope,
        prefix=config.dedup_key_prefix,
        ttl_seconds=int(config.dedup_ttl_seconds),
    )
