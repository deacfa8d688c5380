from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    limit: int
    remaining: int
    retry_after: int = 0


class IRateLimiter(ABC):
    """Per-rule sliding-window counters keyed by client IP or actor id"""

    @abstractmethod
    async def hit(self, rule: str, key: str) -> RateLimitDecision:
        """Count one request against rule for key and report whether it is allowed"""
        pass

    @abstractmethod
    async def reset(self) -> None:
        pass
