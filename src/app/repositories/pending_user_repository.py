from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from src.domain.entities import PendingUser, PendingUserStatus


class IPendingUserRepository(ABC):
    """PendingUser repository interface - application layer"""

    @abstractmethod
    async def create(self, pending_user: PendingUser) -> PendingUser:
        """Create a staged registration"""
        pass

    @abstractmethod
    async def get_by_id(self, pending_user_id: UUID) -> Optional[PendingUser]:
        """Get staged registration by ID"""
        pass

    @abstractmethod
    async def get_by_email(self, email: str) -> Optional[PendingUser]:
        """Get staged registration by email"""
        pass

    @abstractmethod
    async def get_by_valid_verification_token(
        self, token: str, now: datetime
    ) -> Optional[PendingUser]:
        """Get staged registration whose verification token matches and has not expired"""
        pass

    @abstractmethod
    async def update(self, pending_user: PendingUser) -> PendingUser:
        """Update staged registration"""
        pass

    @abstractmethod
    async def delete(self, pending_user: PendingUser) -> None:
        """Delete staged registration"""
        pass

    @abstractmethod
    async def list_by_status(
        self, status: Optional[PendingUserStatus] = None
    ) -> List[PendingUser]:
        """List staged registrations, newest first"""
        pass
