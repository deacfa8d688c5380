from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional, Tuple
from uuid import UUID

from src.domain.entities import User, UserStatus


class IUserRepository(ABC):
    """User repository interface - application layer"""

    @abstractmethod
    async def get_by_email(self, email: str) -> Optional[User]:
        """Get user by (normalized) email address"""
        pass

    @abstractmethod
    async def get_by_id(self, user_id: UUID) -> Optional[User]:
        """Get user by ID"""
        pass

    @abstractmethod
    async def get_by_tax_id(self, tax_id: str) -> Optional[User]:
        """Get user by company tax id"""
        pass

    @abstractmethod
    async def create(self, user: User) -> User:
        """Create a new user"""
        pass

    @abstractmethod
    async def update(self, user: User) -> User:
        """Update existing user"""
        pass

    @abstractmethod
    async def delete(self, user: User) -> None:
        """Hard-delete a user row"""
        pass

    @abstractmethod
    async def get_by_valid_verification_token(
        self, token: str, now: datetime
    ) -> Optional[User]:
        """Get user whose verification token matches and has not expired"""
        pass

    @abstractmethod
    async def register_failed_login(
        self, user_id: UUID, threshold: int, lock_until: datetime
    ) -> Tuple[int, Optional[datetime]]:
        """
        Atomically increment the failed-login counter and lock the account
        when the counter reaches the threshold.

        Returns:
            Tuple of (new failed-login count, lock expiry or None)
        """
        pass

    @abstractmethod
    async def list_paginated(
        self, status: Optional[UserStatus] = None, limit: int = 50, offset: int = 0
    ) -> Tuple[List[User], int]:
        """List users ordered by creation date (newest first) with total count"""
        pass
