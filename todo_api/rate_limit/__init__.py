from todo_api.rate_limit.exceptions import RateLimitExceeded
from todo_api.rate_limit.store import (
    BucketStore,
    MemoryBucketStore,
    RedisBucketStore,
    get_bucket_store,
)
from todo_api.rate_limit.token_bucket import TokenBucket, TokenBucketState

__all__ = [
    "BucketStore",
    "MemoryBucketStore",
    "RateLimitExceeded",
    "RedisBucketStore",
    "TokenBucket",
    "TokenBucketState",
    "get_bucket_store",
]
