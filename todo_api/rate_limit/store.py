"""Storage backends for token bucket state.

The memory backend keeps buckets in a process-local TTLCache and is the
default for a single API instance. The redis backend shares buckets across
instances and serializes state as JSON.
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from collections.abc import Generator
from contextlib import AbstractContextManager, contextmanager
from typing import TYPE_CHECKING, TypeVar

from cachetools import TTLCache
from pydantic import BaseModel
from redis import Redis
from redis.exceptions import RedisError

from todo_api.logger import get_logger

if TYPE_CHECKING:
    from todo_api.config import RateLimitSettings

logger = get_logger(__name__)

T = TypeVar("T", bound=BaseModel)


class BucketStore(ABC):
    """Key/value store for bucket state with per-key locking."""

    @abstractmethod
    def get_obj(self, key: str, cls: type[T]) -> T | None:
        """Return the stored state or None if the key is unknown or expired."""

    @abstractmethod
    def set_obj(self, key: str, value: BaseModel, ttl: int) -> None:
        """Store state for ttl seconds."""

    @abstractmethod
    def lock(self, key: str) -> AbstractContextManager[None]:
        """Serialize read-modify-write cycles on one key."""

    @abstractmethod
    def ping(self) -> bool:
        """Check if the store is reachable."""

    def close(self) -> None:  # noqa: B027 - optional hook
        """Release resources."""


class MemoryBucketStore(BucketStore):
    """Process-local store.

    Args:
        max_size: Max number of buckets kept; least recently used buckets are evicted
        ttl: Seconds after which an idle bucket is forgotten (it refills anyway)
    """

    def __init__(self, max_size: int = 10_000, ttl: int = 3600) -> None:
        self._cache: TTLCache[str, BaseModel] = TTLCache(maxsize=max_size, ttl=ttl)
        self._lock = threading.Lock()

    def get_obj(self, key: str, cls: type[T]) -> T | None:
        value = self._cache.get(key)
        return cls.model_validate(value) if value is not None else None

    def set_obj(self, key: str, value: BaseModel, ttl: int) -> None:  # noqa: ARG002
        # TTLCache has a single ttl for all keys
        self._cache[key] = value.model_copy()

    @contextmanager
    def lock(self, key: str) -> Generator[None, None, None]:  # noqa: ARG002
        with self._lock:
            yield

    def ping(self) -> bool:  # noqa: PLR6301
        return True

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()


class RedisBucketStore(BucketStore):
    """Redis/Valkey store shared by all API instances.

    Args:
        client: Synchronous Redis client created with decode_responses=True
        lock_timeout: Seconds after which an abandoned lock expires
    """

    def __init__(self, client: Redis, lock_timeout: float = 5) -> None:
        self._client = client
        self.lock_timeout = lock_timeout

    @property
    def client(self) -> Redis:
        """Return the underlying Redis client."""
        return self._client

    def get_obj(self, key: str, cls: type[T]) -> T | None:
        try:
            value = self.client.get(key)
        except RedisError as e:
            logger.warning(
                f"Rate limit store unavailable, treating bucket as full: {e}",
                extra={"bucket_key": key},
            )
            return None
        return cls.model_validate_json(value) if value else None

    def set_obj(self, key: str, value: BaseModel, ttl: int) -> None:
        try:
            self.client.setex(key, max(ttl, 1), value.model_dump_json())
        except RedisError as e:
            logger.warning(
                f"Rate limit store unavailable, state not saved: {e}",
                extra={"bucket_key": key},
            )

    @contextmanager
    def lock(self, key: str) -> Generator[None, None, None]:
        """Distributed lock using the redis native lock.

        When redis fails or the lock stays contended past lock_timeout, the
        block runs unlocked.
        """
        lock = self.client.lock(
            f"{key}:lock", timeout=self.lock_timeout, blocking_timeout=self.lock_timeout
        )
        try:
            acquired = lock.acquire()
        except RedisError as e:
            logger.warning(
                f"Rate limit store unavailable, proceeding unlocked: {e}",
                extra={"bucket_key": key},
            )
            yield
            return
        if not acquired:
            logger.warning(
                f"Could not acquire lock for {key}, proceeding unlocked",
                extra={"bucket_key": key},
            )
            yield
            return
        try:
            yield
        finally:
            try:
                lock.release()
            except RedisError as e:
                # lock expired while held, or the connection dropped
                logger.warning(f"Could not release lock for {key}: {e}")

    def ping(self) -> bool:
        try:
            return bool(self.client.ping())
        except RedisError:
            return False

    def close(self) -> None:
        self.client.close()


def get_bucket_store(config: RateLimitSettings) -> BucketStore:
    """Create the bucket store selected by config.backend.

    Raises:
        ValueError: If the backend is not supported
    """
    if config.backend == "memory":
        return MemoryBucketStore(max_size=config.memory_max_size)
    if config.backend == "redis":
        client = Redis.from_url(
            config.redis_url,
            encoding="utf-8",
            decode_responses=True,
        )
        return RedisBucketStore(client)
    msg = f"Unsupported rate limit backend: {config.backend}"
    raise ValueError(msg)
