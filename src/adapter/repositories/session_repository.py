from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy import delete
from sqlmodel import select, update
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.session_repository import IAdminSessionRepository
from src.domain.entities import AdminSession


class AdminSessionRepository(IAdminSessionRepository):
    """AdminSession repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, session_obj: AdminSession) -> AdminSession:
        """Create a new session"""
        self.session.add(session_obj)
        await self.session.flush()
        await self.session.refresh(session_obj)
        return session_obj

    async def get_by_id(self, session_id: str) -> Optional[AdminSession]:
        """Get session by ID"""
        stmt = select(AdminSession).where(AdminSession.id == session_id)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def get_active(
        self, session_id: str, user_id: UUID, now: datetime
    ) -> Optional[AdminSession]:
        stmt = select(AdminSession).where(
            AdminSession.id == session_id,
            AdminSession.user_id == user_id,
            AdminSession.is_active == True,
            AdminSession.expires_at > now,
        )
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def touch(self, session_id: str, now: datetime) -> None:
        stmt = (
            update(AdminSession)
            .where(AdminSession.id == session_id)
            .values(last_activity=now)
            .execution_options(synchronize_session=False)
        )
        await self.session.execute(stmt)
        await self.session.flush()

    async def revoke(
        self, session_id: str, revoked_by: Optional[UUID], now: datetime
    ) -> bool:
        """Revoke a specific session by ID"""
        stmt = (
            update(AdminSession)
            .where(AdminSession.id == session_id, AdminSession.is_active == True)
            .values(is_active=False, revoked_at=now, revoked_by=revoked_by)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount > 0

    async def revoke_all_by_user_id(
        self, user_id: UUID, revoked_by: Optional[UUID], now: datetime
    ) -> int:
        """Revoke all active sessions for a user"""
        stmt = (
            update(AdminSession)
            .where(AdminSession.user_id == user_id, AdminSession.is_active == True)
            .values(is_active=False, revoked_at=now, revoked_by=revoked_by)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount

    async def list_active_by_user_id(self, user_id: UUID, now: datetime) -> List[AdminSession]:
        stmt = (
            select(AdminSession)
            .where(
                AdminSession.user_id == user_id,
                AdminSession.is_active == True,
                AdminSession.expires_at > now,
            )
            .order_by(AdminSession.last_activity.desc())
        )
        result = await self.session.exec(stmt)
        return list(result.all())

    async def delete_expired(self, now: datetime) -> int:
        stmt = delete(AdminSession).where(AdminSession.expires_at <= now)
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount
