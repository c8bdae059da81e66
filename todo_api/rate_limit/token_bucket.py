"""Token Bucket rate limiting algorithm with a pluggable state store."""

import logging
import time
from collections.abc import Callable

from pydantic import BaseModel

from todo_api.rate_limit.store import BucketStore

logger = logging.getLogger(__name__)


class TokenBucketState(BaseModel):
    """Token bucket state kept in the store."""

    tokens: float
    last_refill_time: float


class TokenBucket:
    """
    Token Bucket rate limiter with store-backed state.

    The bucket allows bursts up to its capacity while holding sustained
    throughput to the refill rate. A bucket that was never used, or whose
    state expired from the store, starts full.

    Attributes:
        store: Bucket state store (memory or redis)
        bucket_name: Unique identifier for this bucket, e.g. "client:10.0.0.1"
        capacity: Maximum number of tokens in the bucket
        refill_rate: Number of tokens added per second
    """

    def __init__(
        self,
        store: BucketStore,
        bucket_name: str,
        capacity: int,
        refill_rate: float,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if capacity <= 0 or refill_rate <= 0:
            msg = "capacity and refill_rate must be positive"
            raise ValueError(msg)
        self.store = store
        self.bucket_name = bucket_name
        self.capacity = capacity
        self.refill_rate = refill_rate
        self._clock = clock

    @property
    def key(self) -> str:
        return f"rate_limit:{self.bucket_name}:state"

    def try_acquire(self, tokens: int = 1) -> bool:
        """Take tokens if available. Never blocks.

        Returns:
            True if the tokens were taken, False if the bucket is short
        """
        with self.store.lock(self.key):
            now = self._clock()
            current_tokens = self._refill_tokens(now)
            if current_tokens < tokens:
                logger.debug(
                    "Bucket '%s' short: requested %d, %.2f available",
                    self.bucket_name,
                    tokens,
                    current_tokens,
                )
                # keep the refilled amount so the next check starts from now
                self._update_bucket_state(current_tokens, now)
                return False
            self._update_bucket_state(current_tokens - tokens, now)
            return True

    def retry_after(self, tokens: int = 1) -> float:
        """Seconds until the bucket holds enough tokens (0 if it already does)."""
        now = self._clock()
        missing = tokens - self._refill_tokens(now)
        return max(missing, 0) / self.refill_rate

    def _refill_tokens(
        self, now: float, state: TokenBucketState | None = None
    ) -> float:
        """Current token count: stored tokens plus elapsed time x refill rate, capped at capacity."""
        state = state or self._get_bucket_state(now)
        elapsed = max(now - state.last_refill_time, 0)
        return min(state.tokens + elapsed * self.refill_rate, self.capacity)

    def _get_bucket_state(self, now: float) -> TokenBucketState:
        cached_state = self.store.get_obj(self.key, cls=TokenBucketState)
        if cached_state:
            return cached_state
        return TokenBucketState(tokens=self.capacity, last_refill_time=now)

    def _update_bucket_state(self, new_tokens: float, refill_time: float) -> None:
        # TTL: 2x the time to fully refill; an expired bucket restarts full
        ttl = int((self.capacity / self.refill_rate) * 2) + 1
        self.store.set_obj(
            self.key,
            TokenBucketState(tokens=new_tokens, last_refill_time=refill_time),
            ttl=ttl,
        )
