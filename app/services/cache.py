"""
Knowledge Cache - Redis
Knowledge-base reads cached in Redis with a TTL, shared by every instance.

Without REDIS_URL (or when Redis is unreachable) the cache is disabled and
every read goes straight to Supabase.
"""
import json
import logging
from typing import Any, List, Optional

import redis

from app.config import REDIS_URL, KNOWLEDGE_CACHE_TTL, KNOWLEDGE_CACHE_PREFIX

logger = logging.getLogger(__name__)


def init_redis(url: Optional[str] = REDIS_URL):
    """Connect to Redis, None when it is not configured or not reachable"""
    if not url:
        logger.warning("⚠️ REDIS_URL not set - knowledge cache disabled")
        return None

    try:
        client = redis.from_url(
            url,
            decode_responses=True,
            socket_connect_timeout=5,
            socket_timeout=5
        )
        client.ping()
        logger.info("✓ Redis initialized")
        return client
    except (redis.RedisError, ValueError) as e:
        logger.error(f"Redis connection failed: {e}")
        return None


class KnowledgeCache:
    """
    Injected into CachedKnowledgeStore. Values are stored as JSON strings
    with an expiry; callers invalidate explicitly after the knowledge table changes.
    """

    def __init__(self, client=None, ttl: int = KNOWLEDGE_CACHE_TTL, prefix: str = KNOWLEDGE_CACHE_PREFIX):
        self.client = client
        self.ttl = ttl
        self.prefix = prefix
        self.hits = 0
        self.misses = 0

    @property
    def enabled(self) -> bool:
        return self.client is not None

    def get(self, key: str) -> Optional[Any]:
        if not self.client:
            return None

        try:
            raw = self.client.get(key)
        except redis.RedisError as e:
            logger.error(f"Redis GET error [{key}]: {e}")
            self.misses += 1
            return None

        if raw is None:
            self.misses += 1
            return None

        try:
            value = json.loads(raw)
        except ValueError:
            logger.warning(f"Unreadable cache entry [{key}], ignoring")
            self.misses += 1
            return None

        self.hits += 1
        logger.debug(f"✓ Cache hit: {key}")
        return value

    def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        if not self.client:
            return False

        try:
            payload = json.dumps(value, ensure_ascii=False, default=str)
            self.client.set(key, payload, ex=ttl or self.ttl)
            logger.debug(f"✓ Cache set: {key}")
            return True
        except redis.RedisError as e:
            logger.error(f"Redis SET error [{key}]: {e}")
            return False

    def _keys(self) -> List[str]:
        return list(self.client.scan_iter(match=f"{self.prefix}*"))

    def invalidate(self, key: Optional[str] = None) -> int:
        """Drop one key, or every knowledge key when none is given. Returns keys removed."""
        if not self.client:
            return 0

        try:
            if key is None:
                keys = self._keys()
                removed = self.client.delete(*keys) if keys else 0
                logger.info(f"Knowledge cache cleared ({removed} entries)")
                return removed

            removed = self.client.delete(key)
        except redis.RedisError as e:
            logger.error(f"Redis DELETE error [{key or self.prefix + '*'}]: {e}")
            return 0

        if removed:
            logger.info(f"Knowledge cache invalidated: {key}")
        return removed

    def cleanup_expired(self) -> int:
        """
        Redis expires entries on its own. This re-arms knowledge keys that were
        written without a TTL (ttl == -1) so they cannot go stale forever.
        """
        if not self.client:
            return 0

        rearmed = 0
        try:
            for key in self._keys():
                if self.client.ttl(key) == -1:
                    self.client.expire(key, self.ttl)
                    rearmed += 1
        except redis.RedisError as e:
            logger.error(f"Cache cleanup error: {e}")
            return rearmed

        if rearmed:
            logger.info(f"Cache cleanup: set TTL on {rearmed} knowledge keys")
        return rearmed

    def stats(self) -> dict:
        stats = {
            "total_cache_items": 0,
            "hits": self.hits,
            "misses": self.misses,
            "ttl_seconds": self.ttl,
            "storage": "redis" if self.client else "disabled",
        }
        if self.client:
            try:
                stats["total_cache_items"] = len(self._keys())
            except redis.RedisError as e:
                stats["error"] = str(e)
        return stats
