from datetime import datetime
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import case, func
from sqlmodel import select, update
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.user_repository import IUserRepository
from src.domain.base import utc_now
from src.domain.entities import User, UserStatus


class UserRepository(IUserRepository):
    """User repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_email(self, email: str) -> Optional[User]:
        """Get user by email address"""
        stmt = select(User).where(User.email == email)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def get_by_id(self, user_id: UUID) -> Optional[User]:
        """Get user by ID"""
        stmt = select(User).where(User.id == user_id)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def get_by_tax_id(self, tax_id: str) -> Optional[User]:
        stmt = select(User).where(User.tax_id == tax_id)
        result = await self.session.exec(stmt)
        return result.first()

    async def create(self, user: User) -> User:
        """Create a new user"""
        self.session.add(user)
        await self.session.flush()
        await self.session.refresh(user)
        return user

    async def update(self, user: User) -> User:
        """Update existing user"""
        user.updated_at = utc_now()
        self.session.add(user)
        await self.session.flush()
        await self.session.refresh(user)
        return user

    async def delete(self, user: User) -> None:
        await self.session.delete(user)
        await self.session.flush()

    async def get_by_valid_verification_token(
        self, token: str, now: datetime
    ) -> Optional[User]:
        """Get user by email verification token, ignoring expired tokens"""
        stmt = select(User).where(
            User.email_verification_token == token,
            User.email_verification_expires_at > now,
        )
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def register_failed_login(
        self, user_id: UUID, threshold: int, lock_until: datetime
    ) -> Tuple[int, Optional[datetime]]:
        """
        Increment the counter in a single UPDATE so concurrent failures
        cannot lose increments. SET expressions see the pre-update row,
        hence the ``+ 1`` in the lock condition.
        """
        stmt = (
            update(User)
            .where(User.id == user_id)
            .values(
                failed_login_attempts=User.failed_login_attempts + 1,
                account_locked_until=case(
                    (User.failed_login_attempts + 1 >= threshold, lock_until),
                    else_=User.account_locked_until,
                ),
                updated_at=utc_now(),
            )
            .execution_options(synchronize_session=False)
        )
        await self.session.execute(stmt)
        await self.session.flush()

        # Reload so any identity-mapped instance reflects the new counter
        refreshed = select(User).where(User.id == user_id).execution_options(
            populate_existing=True
        )
        result = await self.session.exec(refreshed)
        user = result.one()
        return user.failed_login_attempts, user.account_locked_until

    async def list_paginated(
        self, status: Optional[UserStatus] = None, limit: int = 50, offset: int = 0
    ) -> Tuple[List[User], int]:
        stmt = select(User)
        count_stmt = select(func.count()).select_from(User)
        if status is not None:
            stmt = stmt.where(User.status == status)
            count_stmt = count_stmt.where(User.status == status)

        stmt = stmt.order_by(User.created_at.desc()).offset(offset).limit(limit)

        result = await self.session.exec(stmt)
        total = await self.session.exec(count_stmt)
        return list(result.all()), total.one()
