"""
Rate limiting for mutations, keyed by user.

Each named bucket is configured as a token bucket (sustained rate per
period plus a burst capacity). Accounting is delegated to the `limits`
library: the bucket becomes two moving windows, one for the sustained
rate and a short one sized so that at most `capacity` requests land
back-to-back.

Each window is consumed with a single atomic `hit`, burst window first,
so concurrent requests sharing a storage backend cannot both pass the
same last slot. A request refused by the sustained window keeps the
burst slot it already took.

Usage in endpoints:
    status = await limiter.limit("createTask", key=str(user.id))
    if not status.ok:
        raise RateLimitedError(status.retry_after)
"""
import math
import time
from dataclasses import dataclass
from functools import lru_cache
from types import MappingProxyType
from typing import List, Mapping

from limits import RateLimitItem, RateLimitItemPerSecond
from limits.aio.strategies import MovingWindowRateLimiter
from limits.storage import storage_from_string

from focuslist.config import get_settings
from focuslist.utils.logger import get_logger

logger = get_logger(__name__)

MINUTE = 60


@dataclass(frozen=True)
class TokenBucket:
    rate: int          # requests allowed per period
    period: int        # seconds
    capacity: int      # burst size

    def windows(self) -> List[RateLimitItem]:
        burst_seconds = max(1, math.ceil(self.capacity * self.period / self.rate))
        return [
            RateLimitItemPerSecond(self.capacity, burst_seconds),
            RateLimitItemPerSecond(self.rate, self.period),
        ]


RATE_LIMITS: Mapping[str, TokenBucket] = MappingProxyType({
    # Tasks
    "createTask": TokenBucket(rate=30, period=MINUTE, capacity=5),
    "updateTask": TokenBucket(rate=60, period=MINUTE, capacity=10),
    "deleteTask": TokenBucket(rate=20, period=MINUTE, capacity=3),
    "batchUpdatePositions": TokenBucket(rate=10, period=MINUTE, capacity=2),
    # Comments
    "createComment": TokenBucket(rate=20, period=MINUTE, capacity=3),
    "updateComment": TokenBucket(rate=30, period=MINUTE, capacity=5),
    "deleteComment": TokenBucket(rate=15, period=MINUTE, capacity=2),
    # AI assistant (expensive)
    "sendMessage": TokenBucket(rate=10, period=MINUTE, capacity=2),
    "createThread": TokenBucket(rate=5, period=MINUTE, capacity=1),
    "updateThread": TokenBucket(rate=30, period=MINUTE, capacity=5),
    "deleteThread": TokenBucket(rate=10, period=MINUTE, capacity=2),
    # Preferences
    "updatePreferences": TokenBucket(rate=20, period=MINUTE, capacity=3),
})


@dataclass(frozen=True)
class RateLimitStatus:
    ok: bool
    retry_after: float = 0.0  # seconds

    @property
    def retry_after_ms(self) -> int:
        return math.ceil(self.retry_after * 1000)


class RateLimiter:
    def __init__(
        self,
        buckets: Mapping[str, TokenBucket] = RATE_LIMITS,
        storage_uri: str = "async+memory://",
        enabled: bool = True,
    ):
        self.buckets = buckets
        self.enabled = enabled
        self._strategy = MovingWindowRateLimiter(storage_from_string(storage_uri))

    async def limit(self, name: str, key: str) -> RateLimitStatus:
        """Consume one request from bucket `name` for `key`"""
        if not self.enabled:
            return RateLimitStatus(ok=True)

        bucket = self.buckets.get(name)
        if bucket is None:
            raise KeyError(f"Unknown rate limit bucket: {name}")

        for window in bucket.windows():
            if not await self._strategy.hit(window, name, key):
                stats = await self._strategy.get_window_stats(window, name, key)
                retry_after = max(0.0, stats.reset_time - time.time())
                logger.info(f"Rate limit '{name}' denied for key {key}, retry after {retry_after:.2f}s")
                return RateLimitStatus(ok=False, retry_after=retry_after)
        return RateLimitStatus(ok=True)


@lru_cache()
def get_rate_limiter() -> RateLimiter:
    """Process-wide limiter, injected into endpoints as a dependency"""
    settings = get_settings()
    return RateLimiter(
        RATE_LIMITS,
        storage_uri=settings.RATE_LIMIT_STORAGE_URI,
        enabled=settings.RATE_LIMIT_ENABLED,
    )
