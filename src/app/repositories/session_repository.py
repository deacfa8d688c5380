from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from src.domain.entities import AdminSession


class IAdminSessionRepository(ABC):
    """AdminSession repository interface - application layer"""

    @abstractmethod
    async def create(self, session: AdminSession) -> AdminSession:
        """Create a new admin session"""
        pass

    @abstractmethod
    async def get_by_id(self, session_id: str) -> Optional[AdminSession]:
        """Get session by ID regardless of state"""
        pass

    @abstractmethod
    async def get_active(
        self, session_id: str, user_id: UUID, now: datetime
    ) -> Optional[AdminSession]:
        """Get session only if it belongs to user, is active and unexpired"""
        pass

    @abstractmethod
    async def touch(self, session_id: str, now: datetime) -> None:
        """Update last_activity"""
        pass

    @abstractmethod
    async def revoke(
        self, session_id: str, revoked_by: Optional[UUID], now: datetime
    ) -> bool:
        """Revoke an active session. Returns True if a session was revoked."""
        pass

    @abstractmethod
    async def revoke_all_by_user_id(
        self, user_id: UUID, revoked_by: Optional[UUID], now: datetime
    ) -> int:
        """Revoke all active sessions of a user. Returns count of revoked sessions."""
        pass

    @abstractmethod
    async def list_active_by_user_id(self, user_id: UUID, now: datetime) -> List[AdminSession]:
        """Active, unexpired sessions of a user, most recently used first"""
        pass

    @abstractmethod
    async def delete_expired(self, now: datetime) -> int:
        """Hard-delete sessions past expires_at. Returns count of deleted rows."""
        pass
