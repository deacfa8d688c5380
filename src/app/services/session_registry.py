"""
Session Registry

Server-side record of administrator sessions. validate() re-checks expiry on
every call, so the periodic sweep is cleanup only.
"""

from datetime import timedelta
from typing import List, Optional
from uuid import UUID

from src.app.services.security_audit import ClientInfo
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utc_now
from src.domain.entities import AdminSession


class SessionRegistry:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def create_session(
        self, user_id: UUID, client: ClientInfo, ttl_hours: int
    ) -> AdminSession:
        session = AdminSession.open(
            user_id=user_id,
            ip_address=client.ip_address,
            user_agent=client.user_agent,
            ttl=timedelta(hours=ttl_hours),
            now=utc_now(),
        )
        return await self.uow.admin_sessions.create(session)

    async def validate(self, session_id: str, user_id: UUID) -> Optional[AdminSession]:
        """Unknown, foreign, revoked and expired sessions all yield None."""
        return await self.uow.admin_sessions.get_active(session_id, user_id, utc_now())

    async def touch(self, session_id: str) -> None:
        await self.uow.admin_sessions.touch(session_id, utc_now())

    async def revoke(self, session_id: str, revoked_by: Optional[UUID]) -> bool:
        return await self.uow.admin_sessions.revoke(session_id, revoked_by, utc_now())

    async def revoke_all(self, user_id: UUID, revoked_by: Optional[UUID]) -> int:
        return await self.uow.admin_sessions.revoke_all_by_user_id(
            user_id, revoked_by, utc_now()
        )

    async def list_active(self, user_id: UUID) -> List[AdminSession]:
        return await self.uow.admin_sessions.list_active_by_user_id(user_id, utc_now())

    async def sweep_expired(self) -> int:
        return await self.uow.admin_sessions.delete_expired(utc_now())
