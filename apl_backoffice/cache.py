"""
Redis caching utilities with an in-memory TTL fallback
Used when Redis is not configured or a Redis call fails
"""
import json
import logging
import time
from threading import Lock
from typing import Any, Callable, Optional

from .redis_client import get_redis_client, is_redis_configured

logger = logging.getLogger(__name__)

KEY_PREFIX = "apl:cache:"


class MemoryCache:
    """Process-local TTL cache"""

    def __init__(self):
        self._store: dict[str, tuple[Any, float]] = {}
        self._lock = Lock()

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                return None
            value, expires_at = entry
            if time.monotonic() > expires_at:
                del self._store[key]
                return None
            return value

    def set(self, key: str, value: Any, ttl: int) -> None:
        with self._lock:
            self._store[key] = (value, time.monotonic() + ttl)

    def delete(self, key: str) -> None:
        with self._lock:
            self._store.pop(key, None)

    def delete_prefix(self, prefix: str) -> int:
        with self._lock:
            keys = [k for k in self._store if k.startswith(prefix)]
            for k in keys:
                del self._store[k]
            return len(keys)

    def clear(self) -> None:
        with self._lock:
            self._store.clear()


class Cache:
    """Redis cache wrapper with automatic serialization and memory fallback"""

    def __init__(self):
        self.redis_client = None
        self.memory = MemoryCache()

    def _get_client(self):
        """Lazy load Redis client"""
        if not is_redis_configured():
            return None
        if self.redis_client is None:
            try:
                self.redis_client = get_redis_client()
            except Exception as e:
                logger.warning(f"⚠️ Redis cache unavailable, using memory: {e}")
                return None
        return self.redis_client

    def get(self, key: str) -> Optional[Any]:
        """Get value from cache"""
        client = self._get_client()
        if not client:
            return self.memory.get(key)

        try:
            value = client.get(KEY_PREFIX + key)
            if value:
                logger.debug(f"✅ Cache HIT: {key}")
                return json.loads(value)
            logger.debug(f"❌ Cache MISS: {key}")
            return None
        except Exception as e:
            logger.warning(f"⚠️ Redis cache get failed for {key}; falling back to memory: {e}")
            return self.memory.get(key)

    def set(self, key: str, value: Any, ttl: int = 60) -> bool:
        """Set value in cache with TTL in seconds"""
        client = self._get_client()
        if not client:
            self.memory.set(key, value, ttl)
            return True

        try:
            client.setex(KEY_PREFIX + key, max(1, ttl), json.dumps(value, default=str))
            logger.debug(f"✅ Cache SET: {key} (TTL: {ttl}s)")
            return True
        except Exception as e:
            logger.warning(f"⚠️ Redis cache set failed for {key}; falling back to memory: {e}")
            self.memory.set(key, value, ttl)
            return False

    def delete(self, key: str) -> bool:
        """Delete value from cache"""
        self.memory.delete(key)
        client = self._get_client()
        if not client:
            return True

        try:
            client.delete(KEY_PREFIX + key)
            logger.debug(f"✅ Cache DELETE: {key}")
            return True
        except Exception as e:
            logger.warning(f"⚠️ Redis cache delete failed for {key}: {e}")
            return False

    def delete_prefix(self, prefix: str) -> int:
        """Delete all keys starting with prefix (e.g., 'reminders:')"""
        deleted = self.memory.delete_prefix(prefix)
        client = self._get_client()
        if not client:
            return deleted

        try:
            keys = list(client.scan_iter(match=f"{KEY_PREFIX}{prefix}*", count=200))
            if keys:
                deleted += client.delete(*keys)
                logger.debug(f"✅ Cache DELETE prefix: {prefix} ({len(keys)} keys)")
            return deleted
        except Exception as e:
            logger.warning(f"⚠️ Redis cache delete prefix failed for {prefix}: {e}")
            return deleted

    def get_or_set(self, key: str, ttl: int, loader: Callable[[], Any]) -> Any:
        """Return the cached value or compute it with loader and cache it"""
        cached_value = self.get(key)
        if cached_value is not None:
            return cached_value

        value = loader()
        if value is not None:
            self.set(key, value, ttl)
        return value


# Global cache instance
cache = Cache()


def invalidate_reminder_cache() -> int:
    """Drop cached reminder statistics after any reminder mutation"""
    return cache.delete_prefix("reminders:")
