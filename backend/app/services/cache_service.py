"""
Redis caching for event listings.

CACHING STRATEGY
================

What we cache:
  - Paginated event listing responses, JSON-serialized
  - Key pattern: "events:list:page={page}&size={size}&tag={tag}"

Invalidation:
  - Every committed Event write deletes all "events:list:*" keys
  - TTL (REDIS_CACHE_TTL) bounds staleness if an invalidation is lost
  - Bookings do not touch event rows, so they never invalidate

Single events are not cached: the slug lookup is an indexed read and must
reflect a title/slug change immediately.

The cache is advisory. A disabled or unreachable Redis turns every method
into a miss / no-op and the request is served from the database.
"""

import json
from typing import Optional

import redis.asyncio as redis

from app.core.config import Settings
from app.core.logging import get_logger
from app.core.metrics import record_cache_operation

logger = get_logger(__name__)

LIST_KEY_PREFIX = "events:list:"


class EventListCache:
    def __init__(self, url: str, ttl: int, enabled: bool = True):
        self.url = url
        self.ttl = ttl
        self.enabled = enabled
        self._client: Optional[redis.Redis] = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "EventListCache":
        return cls(settings.REDIS_URL, settings.REDIS_CACHE_TTL, settings.REDIS_ENABLED)

    @property
    def is_connected(self) -> bool:
        return self._client is not None

    async def connect(self) -> bool:
        """Connect once; returns False (and stays disabled) if Redis is unreachable."""
        if not self.enabled:
            return False
        if self._client is not None:
            return True

        client = redis.from_url(
            self.url,
            encoding="utf-8",
            decode_responses=True,
            socket_connect_timeout=5,
            socket_timeout=5,
            retry_on_timeout=True,
        )
        try:
            await client.ping()
        except Exception as e:
            logger.error("redis_connection_failed", error=str(e))
            await client.aclose()
            return False

        self._client = client
        logger.info("redis_connected", url=self.url)
        return True

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    @staticmethod
    def make_list_key(page: int, page_size: int, tag: Optional[str]) -> str:
        return f"{LIST_KEY_PREFIX}page={page}&size={page_size}&tag={tag or ''}"

    async def get_list(self, page: int, page_size: int, tag: Optional[str]) -> Optional[dict]:
        if self._client is None:
            return None

        key = self.make_list_key(page, page_size, tag)
        try:
            data = await self._client.get(key)
        except Exception as e:
            record_cache_operation("get", "error")
            logger.error("cache_get_error", key=key, error=str(e))
            return None

        record_cache_operation("get", "hit" if data else "miss")
        return json.loads(data) if data else None

    async def set_list(self, page: int, page_size: int, tag: Optional[str], data: dict) -> None:
        if self._client is None:
            return

        key = self.make_list_key(page, page_size, tag)
        try:
            await self._client.setex(key, self.ttl, json.dumps(data, default=str))
            record_cache_operation("set", "ok")
        except Exception as e:
            record_cache_operation("set", "error")
            logger.error("cache_set_error", key=key, error=str(e))

    async def invalidate(self) -> int:
        if self._client is None:
            return 0

        deleted = 0
        try:
            async for key in self._client.scan_iter(match=f"{LIST_KEY_PREFIX}*", count=100):
                await self._client.delete(key)
                deleted += 1
            record_cache_operation("invalidate", "ok")
            logger.info("cache_invalidated", keys_deleted=deleted)
        except Exception as e:
            record_cache_operation("invalidate", "error")
            logger.error("cache_invalidation_error", error=str(e))
        return deleted

    async def stats(self) -> dict:
        if self._client is None:
            return {"status": "disabled" if not self.enabled else "unavailable"}

        try:
            info = await self._client.info("stats")
        except Exception as e:
            return {"status": "error", "error": str(e)}

        hits = info.get("keyspace_hits", 0)
        misses = info.get("keyspace_misses", 0)
        return {
            "status": "connected",
            "hits": hits,
            "misses": misses,
            "hit_rate": round(hits / max(hits + misses, 1) * 100, 2),
        }
