"""
Per-actor sliding-window rate limiting for admin operations.

The request history is a list of timestamps kept in the Django cache, newest
first, the same way DRF's SimpleRateThrottle keeps it. With a Redis cache the
window is shared by every process; with LocMemCache it is per process. The
get/set pair is not atomic, so two concurrent hits may both be admitted at the
boundary.
"""
import math
import time
from dataclasses import dataclass

from django.conf import settings
from django.core.cache import caches


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    attempts: int
    retry_after: int = 0


class SlidingWindowRateLimiter:
    cache_format = "admin-gateway:%(scope)s:%(ident)s"

    def __init__(self, window=None, max_actions=None, cache_alias=None, timer=time.time):
        conf = getattr(settings, "ADMIN_GATEWAY", {}) or {}
        self.window = int(window if window is not None else conf.get("RATE_LIMIT_WINDOW_SECONDS", 15 * 60))
        self.max_actions = int(max_actions if max_actions is not None else conf.get("RATE_LIMIT_MAX_ACTIONS", 100))
        self.cache_alias = cache_alias or conf.get("CACHE_ALIAS", "default")
        self.timer = timer

    @property
    def cache(self):
        return caches[self.cache_alias]

    def get_cache_key(self, ident, scope: str) -> str:
        return self.cache_format % {"scope": scope, "ident": ident}

    def _recent(self, key, now):
        history = self.cache.get(key, [])
        # Drop any requests from the history which have now passed the window
        while history and history[-1] <= now - self.window:
            history.pop()
        return history

    def hit(self, ident, scope: str = "admin") -> RateLimitDecision:
        """
        Count one action for ``ident``. Rejected actions are not added to the
        history, so a caller that keeps retrying does not extend its own wait.
        """
        key = self.get_cache_key(ident, scope)
        now = self.timer()
        history = self._recent(key, now)

        if len(history) >= self.max_actions:
            retry_after = max(1, math.ceil(self.window - (now - history[-1])))
            return RateLimitDecision(allowed=False, attempts=len(history), retry_after=retry_after)

        history.insert(0, now)
        self.cache.set(key, history, self.window)
        return RateLimitDecision(allowed=True, attempts=len(history))

    def reset(self, ident, scope: str = "admin") -> None:
        self.cache.delete(self.get_cache_key(ident, scope))
