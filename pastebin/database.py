"""
Storage layer for pastes: Redis hashes, with an in-memory store for
development and testing.
Handles paste insert, lookup, atomic view counting, and health checks.
"""
import logging
import math
import threading
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Dict, Optional

from redis import Redis
from redis.exceptions import RedisError, WatchError

from pastebin.config import Settings
from pastebin.errors import ConflictError, StorageError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Paste:
    """A stored paste record."""
    id: str
    content: str
    created_at: datetime
    expires_at: Optional[datetime] = None
    max_views: Optional[int] = None
    view_count: int = 0


def _to_epoch_ms(value: datetime) -> int:
    return int(round(value.timestamp() * 1000))


def _from_epoch_ms(value) -> datetime:
    return datetime.fromtimestamp(int(value) / 1000, tz=timezone.utc)


class InMemoryPasteStore:
    """Simple in-memory store for development/testing (when Redis unavailable)."""

    backend_name = "memory"

    def __init__(self):
        self.store: Dict[str, Paste] = {}
        self._lock = threading.Lock()

    def insert(
        self,
        paste_id: str,
        content: str,
        created_at: datetime,
        expires_at: Optional[datetime] = None,
        max_views: Optional[int] = None,
    ) -> None:
        with self._lock:
            if paste_id in self.store:
                raise ConflictError(f"Paste {paste_id} already exists")
            self.store[paste_id] = Paste(
                id=paste_id,
                content=content,
                created_at=created_at,
                expires_at=expires_at,
                max_views=max_views,
            )

    def get_by_id(self, paste_id: str) -> Optional[Paste]:
        with self._lock:
            return self.store.get(paste_id)

    def increment_view_and_get(self, paste_id: str) -> Optional[Paste]:
        with self._lock:
            paste = self.store.get(paste_id)
            if paste is None:
                return None
            updated = replace(paste, view_count=paste.view_count + 1)
            self.store[paste_id] = updated
            return updated

    def delete(self, paste_id: str) -> None:
        with self._lock:
            self.store.pop(paste_id, None)

    def ping(self) -> None:
        """Health check."""
        return None


class RedisPasteStore:
    """Paste store backed by one Redis hash per paste."""

    backend_name = "redis"

    def __init__(self, redis: Redis, key_prefix: str = "paste:"):
        self.redis = redis
        self.key_prefix = key_prefix

    def _key(self, paste_id: str) -> str:
        return f"{self.key_prefix}{paste_id}"

    def insert(
        self,
        paste_id: str,
        content: str,
        created_at: datetime,
        expires_at: Optional[datetime] = None,
        max_views: Optional[int] = None,
    ) -> None:
        """
        Save a paste as a hash.

        Args:
            paste_id: Unique paste identifier
            content: Text content of the paste
            created_at: Creation timestamp
            expires_at: Optional expiry timestamp
            max_views: Optional maximum view count

        Raises:
            ConflictError: If the id is already taken
            StorageError: If Redis fails
        """
        key = self._key(paste_id)
        paste_data = {
            "id": paste_id,
            "content": content,
            "created_at": _to_epoch_ms(created_at),
            "views": 0,
        }
        if expires_at is not None:
            paste_data["expires_at"] = _to_epoch_ms(expires_at)
        if max_views is not None:
            paste_data["max_views"] = max_views

        # Let Redis drop the key once its lifetime is over
        ttl_seconds = None
        if expires_at is not None:
            ttl_seconds = max(1, math.ceil((expires_at - created_at).total_seconds()))

        try:
            with self.redis.pipeline() as pipe:
                while True:
                    try:
                        pipe.watch(key)
                        if pipe.exists(key):
                            raise ConflictError(f"Paste {paste_id} already exists")
                        pipe.multi()
                        pipe.hset(key, mapping=paste_data)
                        if ttl_seconds is not None:
                            pipe.expire(key, ttl_seconds)
                        pipe.execute()
                        return
                    except WatchError:
                        continue
        except RedisError as e:
            logger.error(f"Error saving paste {paste_id}: {e}")
            raise StorageError(str(e)) from e

    def get_by_id(self, paste_id: str) -> Optional[Paste]:
        try:
            paste_data = self.redis.hgetall(self._key(paste_id))
        except RedisError as e:
            logger.error(f"Error fetching paste {paste_id}: {e}")
            raise StorageError(str(e)) from e
        return self._decode(paste_id, paste_data)

    def increment_view_and_get(self, paste_id: str) -> Optional[Paste]:
        """
        Increment the view count and return the updated paste.

        HINCRBY and HGETALL run inside one MULTI/EXEC block, so each caller
        sees its own counter value. WATCH keeps a vanished key from being
        recreated by HINCRBY.
        """
        key = self._key(paste_id)
        try:
            with self.redis.pipeline() as pipe:
                while True:
                    try:
                        pipe.watch(key)
                        if not pipe.exists(key):
                            return None
                        pipe.multi()
                        pipe.hincrby(key, "views", 1)
                        pipe.hgetall(key)
                        _, paste_data = pipe.execute()
                        break
                    except WatchError:
                        continue
        except RedisError as e:
            logger.error(f"Error incrementing views for {paste_id}: {e}")
            raise StorageError(str(e)) from e
        return self._decode(paste_id, paste_data)

    def delete(self, paste_id: str) -> None:
        try:
            self.redis.delete(self._key(paste_id))
        except RedisError as e:
            logger.error(f"Error deleting paste {paste_id}: {e}")
            raise StorageError(str(e)) from e

    def ping(self) -> None:
        try:
            self.redis.ping()
        except RedisError as e:
            logger.error(f"Health check failed: {e}")
            raise StorageError(str(e)) from e

    @staticmethod
    def _decode(paste_id: str, paste_data: Dict[str, str]) -> Optional[Paste]:
        # A hash without content is not a complete paste
        if not paste_data or "content" not in paste_data:
            return None

        return Paste(
            id=paste_data.get("id", paste_id),
            content=paste_data["content"],
            created_at=_from_epoch_ms(paste_data["created_at"]),
            expires_at=_from_epoch_ms(paste_data["expires_at"]) if "expires_at" in paste_data else None,
            max_views=int(paste_data["max_views"]) if "max_views" in paste_data else None,
            view_count=int(paste_data.get("views", 0)),
        )


def build_store(settings: Settings):
    """
    Connect to Redis, falling back to the in-memory store when allowed.

    REDIS_URL=memory:// selects the in-memory store directly.
    """
    if settings.REDIS_URL.startswith("memory://"):
        logger.info("Using in-memory paste store")
        return InMemoryPasteStore()

    try:
        logger.info(f"Attempting to connect to Redis: {settings.REDIS_URL[:30]}...")
        redis = Redis.from_url(settings.REDIS_URL, decode_responses=True)
        redis.ping()
        logger.info("Redis connected successfully")
        return RedisPasteStore(redis, key_prefix=settings.REDIS_KEY_PREFIX)
    except (RedisError, ValueError) as e:
        logger.error(f"Error connecting to Redis: {type(e).__name__}: {e}")
        if not settings.ALLOW_MEMORY_FALLBACK:
            raise StorageError(f"Redis unavailable: {e}") from e
        logger.warning("Using in-memory fallback. Data will NOT persist across restarts.")
        return InMemoryPasteStore()
