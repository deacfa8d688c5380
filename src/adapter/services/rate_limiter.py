"""
Moving-window rate limiters.

The in-memory limiter serves single-instance deployments; the Redis limiter
keeps one sorted set of hit timestamps per (rule, key) so several API
instances share the same counters.
"""

import logging
import math
import threading
import time
import uuid
from collections import deque
from typing import Callable, Deque, Dict, Mapping, Tuple

import redis.asyncio as aioredis

from src.app.services.rate_limiter import IRateLimiter, RateLimitDecision

logger = logging.getLogger(__name__)


def _parse_rules(rules: Mapping[str, Mapping[str, int]]) -> Dict[str, Tuple[int, int]]:
    return {
        name: (int(rule["max"]), int(rule["window_seconds"]))
        for name, rule in rules.items()
    }


class InMemoryRateLimiter(IRateLimiter):
    def __init__(
        self,
        rules: Mapping[str, Mapping[str, int]],
        clock: Callable[[], float] = time.monotonic,
    ):
        self.rules = _parse_rules(rules)
        self.clock = clock
        self._hits: Dict[Tuple[str, str], Deque[float]] = {}
        self._lock = threading.Lock()

    async def hit(self, rule: str, key: str) -> RateLimitDecision:
        limit, window = self.rules[rule]
        now = self.clock()

        with self._lock:
            hits = self._hits.setdefault((rule, key), deque())
            while hits and hits[0] <= now - window:
                hits.popleft()

            if len(hits) >= limit:
                retry_after = max(1, math.ceil(hits[0] + window - now))
                logger.info("Rate limit %s exceeded for %s", rule, key)
                return RateLimitDecision(
                    allowed=False, limit=limit, remaining=0, retry_after=retry_after
                )

            hits.append(now)
            return RateLimitDecision(allowed=True, limit=limit, remaining=limit - len(hits))

    async def reset(self) -> None:
        with self._lock:
            self._hits.clear()


class RedisRateLimiter(IRateLimiter):
    """Shared counters for multi-instance deployments."""

    KEY_PREFIX = "ratelimit:"

    # Trim, count and conditionally record in one atomic step
    _MOVING_WINDOW_SCRIPT = """
local key = KEYS[1]
local now = tonumber(ARGV[1])
local window = tonumber(ARGV[2])
local limit = tonumber(ARGV[3])
local member = ARGV[4]

redis.call('ZREMRANGEBYSCORE', key, '-inf', now - window)
local count = redis.call('ZCARD', key)

if count >= limit then
  local oldest = redis.call('ZRANGE', key, 0, 0, 'WITHSCORES')
  local retry_after = math.ceil(tonumber(oldest[2]) + window - now)
  return {0, 0, math.max(retry_after, 1)}
end

redis.call('ZADD', key, now, member)
redis.call('EXPIRE', key, math.ceil(window))
return {1, limit - count - 1, 0}
"""

    def __init__(
        self,
        rules: Mapping[str, Mapping[str, int]],
        redis_url: str,
        socket_timeout: float = 5.0,
    ):
        self.rules = _parse_rules(rules)
        self.client = aioredis.from_url(
            redis_url,
            decode_responses=True,
            socket_timeout=socket_timeout,
            socket_connect_timeout=socket_timeout,
        )
        self._moving_window = self.client.register_script(self._MOVING_WINDOW_SCRIPT)

    async def hit(self, rule: str, key: str) -> RateLimitDecision:
        limit, window = self.rules[rule]
        allowed, remaining, retry_after = await self._moving_window(
            keys=[f"{self.KEY_PREFIX}{rule}:{key}"],
            args=[time.time(), window, limit, uuid.uuid4().hex],
        )
        if not int(allowed):
            logger.info("Rate limit %s exceeded for %s", rule, key)
        return RateLimitDecision(
            allowed=bool(int(allowed)),
            limit=limit,
            remaining=max(int(remaining), 0),
            retry_after=int(retry_after),
        )

    async def reset(self) -> None:
        async for redis_key in self.client.scan_iter(match=f"{self.KEY_PREFIX}*"):
            await self.client.delete(redis_key)

    async def close(self) -> None:
        await self.client.aclose()
