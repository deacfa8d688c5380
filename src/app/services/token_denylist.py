from abc import ABC, abstractmethod


class ITokenDenylist(ABC):
    """Process-wide (or shared) set of explicitly invalidated bearer tokens"""

    @abstractmethod
    async def contains(self, token: str) -> bool:
        pass

    @abstractmethod
    async def add(self, token: str, ttl_seconds: int) -> None:
        """Deny token for ttl_seconds (normally until its own expiry)"""
        pass
