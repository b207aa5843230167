import math
import threading
import time
from dataclasses import dataclass
from typing import Optional

from fastapi import Request
from limits import RateLimitItemPerSecond
from limits.storage import Storage, storage_from_string
from limits.strategies import FixedWindowRateLimiter as FixedWindowStrategy
from slowapi.util import get_remote_address

from config import (
    RATE_LIMIT_MAX_REQUESTS,
    RATE_LIMIT_MESSAGE,
    RATE_LIMIT_STORAGE_URI,
    RATE_LIMIT_WINDOW_SECONDS,
)
from errors import RateLimitedError
from logging_config import get_logger

logger = get_logger("storefront.ratelimit")


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    count: int
    limit: int
    remaining: int
    reset_in_seconds: float


# Fixed-window limiter over a `limits` storage (memory:// by default, redis:// works too).
# The window opens on a key's first hit and expires after window_seconds; rejected
# requests still count. Across a window boundary a client can get up to twice the limit.
class FixedWindowRateLimiter:

    def __init__(
        self,
        storage: Optional[Storage] = None,
        window_seconds: int = RATE_LIMIT_WINDOW_SECONDS,
        max_requests: int = RATE_LIMIT_MAX_REQUESTS,
        message: str = RATE_LIMIT_MESSAGE,
    ):
        if window_seconds <= 0 or max_requests <= 0:
            raise ValueError("window_seconds and max_requests must be positive")
        self.storage = storage if storage is not None else storage_from_string(RATE_LIMIT_STORAGE_URI)
        self.strategy = FixedWindowStrategy(self.storage)
        self.item = RateLimitItemPerSecond(max_requests, window_seconds)
        self.window_seconds = window_seconds
        self.max_requests = max_requests
        self.message = message
        # MemoryStorage checks expiry outside its per-key lock; serialize hits here
        self._lock = threading.Lock()

    def check(self, group: str, client_id: str) -> RateLimitDecision:
        key = self.item.key_for(group, client_id)
        with self._lock:
            allowed = self.strategy.hit(self.item, group, client_id)
            count = self.storage.get(key)
            reset_time, remaining = self.strategy.get_window_stats(self.item, group, client_id)
        return RateLimitDecision(
            allowed=allowed,
            count=count,
            limit=self.max_requests,
            remaining=remaining,
            reset_in_seconds=max(0.0, reset_time - time.time()),
        )

    def enforce(self, group: str, client_id: str) -> RateLimitDecision:
        decision = self.check(group, client_id)
        if not decision.allowed:
            logger.warning(
                "Rate limit exceeded",
                group=group,
                client_id=client_id,
                count=decision.count,
                limit=decision.limit,
            )
            raise RateLimitedError(
                self.message,
                retry_after=max(1, math.ceil(decision.reset_in_seconds)),
            )
        return decision

    def reset(self) -> None:
        self.storage.reset()


# Dependency gating one route group; counters belong to the limiter on app.state
class RateLimit:

    def __init__(self, group: str):
        self.group = group

    def __call__(self, request: Request) -> RateLimitDecision:
        limiter: FixedWindowRateLimiter = request.app.state.rate_limiter
        return limiter.enforce(self.group, get_remote_address(request))
