from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.pending_user_repository import IPendingUserRepository
from src.domain.entities import PendingUser, PendingUserStatus


class PendingUserRepository(IPendingUserRepository):
    """PendingUser repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, pending_user: PendingUser) -> PendingUser:
        self.session.add(pending_user)
        await self.session.flush()
        await self.session.refresh(pending_user)
        return pending_user

    async def get_by_id(self, pending_user_id: UUID) -> Optional[PendingUser]:
        stmt = select(PendingUser).where(PendingUser.id == pending_user_id)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def get_by_email(self, email: str) -> Optional[PendingUser]:
        stmt = select(PendingUser).where(PendingUser.email == email)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def get_by_valid_verification_token(
        self, token: str, now: datetime
    ) -> Optional[PendingUser]:
        stmt = select(PendingUser).where(
            PendingUser.email_verification_token == token,
            PendingUser.email_verification_expires_at > now,
        )
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def update(self, pending_user: PendingUser) -> PendingUser:
        self.session.add(pending_user)
        await self.session.flush()
        await self.session.refresh(pending_user)
        return pending_user

    async def delete(self, pending_user: PendingUser) -> None:
        await self.session.delete(pending_user)
        await self.session.flush()

    async def list_by_status(
        self, status: Optional[PendingUserStatus] = None
    ) -> List[PendingUser]:
        stmt = select(PendingUser)
        if status is not None:
            stmt = stmt.where(PendingUser.status == status)
        stmt = stmt.order_by(PendingUser.created_at.desc())
        result = await self.session.exec(stmt)
        return list(result.all())
