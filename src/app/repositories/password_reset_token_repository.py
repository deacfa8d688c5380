from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional
from uuid import UUID

from src.domain.entities import PasswordResetToken


class IPasswordResetTokenRepository(ABC):
    @abstractmethod
    async def create(self, token: PasswordResetToken) -> PasswordResetToken:
        pass

    @abstractmethod
    async def get_by_hash(self, token_hash: str) -> Optional[PasswordResetToken]:
        """Token row for a digest, whatever its state"""
        pass

    @abstractmethod
    async def update(self, token: PasswordResetToken) -> PasswordResetToken:
        pass

    @abstractmethod
    async def invalidate_all_for_user(self, user_id: UUID, now: datetime) -> int:
        """Consume every open token of a user. Returns count."""
        pass
