"""
Token denylist stores.

Raw tokens are never kept; entries are keyed by their SHA-256 digest.
"""

import hashlib
import threading
import time
from typing import Dict

import redis.asyncio as aioredis

from src.app.services.token_denylist import ITokenDenylist


def _digest(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


class InMemoryTokenDenylist(ITokenDenylist):
    """Single-instance denylist; entries expire with the token they deny."""

    def __init__(self):
        self._entries: Dict[str, float] = {}
        self._lock = threading.Lock()

    async def contains(self, token: str) -> bool:
        now = time.monotonic()
        with self._lock:
            expires_at = self._entries.get(_digest(token))
            if expires_at is None:
                return False
            if expires_at <= now:
                del self._entries[_digest(token)]
                return False
            return True

    async def add(self, token: str, ttl_seconds: int) -> None:
        now = time.monotonic()
        with self._lock:
            self._entries[_digest(token)] = now + ttl_seconds
            self._purge(now)

    def _purge(self, now: float) -> None:
        expired = [key for key, expires_at in self._entries.items() if expires_at <= now]
        for key in expired:
            del self._entries[key]

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class RedisTokenDenylist(ITokenDenylist):
    """Shared denylist for multi-instance deployments."""

    KEY_PREFIX = "denylist:"

    def __init__(self, redis_url: str, socket_timeout: float = 5.0):
        self.client = aioredis.from_url(
            redis_url,
            decode_responses=True,
            socket_timeout=socket_timeout,
            socket_connect_timeout=socket_timeout,
        )

    async def contains(self, token: str) -> bool:
        return bool(await self.client.exists(self.KEY_PREFIX + _digest(token)))

    async def add(self, token: str, ttl_seconds: int) -> None:
        await self.client.set(self.KEY_PREFIX + _digest(token), "1", ex=max(ttl_seconds, 1))

    async def close(self) -> None:
        await self.client.aclose()
