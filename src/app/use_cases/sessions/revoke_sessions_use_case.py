"""
Revoke Sessions Use Case

Handles listing and revocation of administrator sessions.
"""

from typing import Optional
from uuid import UUID

from libs.result import Error, Result, Return
from src.app.services.security_audit import ClientInfo, record_security_event
from src.app.services.session_registry import SessionRegistry
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import SecurityEventType, SecurityOutcome
from .dtos import AdminSessionInfo, SessionListResponse


class RevokeSessionsUseCase:
    """
    Use case for administrator session management.

    Business Rules:
    - Admins list and revoke their own sessions
    - Admins can revoke every session of another user
    - Revocation is audit-logged
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def list_sessions(
        self, user_id: UUID, current_session_id: Optional[str]
    ) -> Result[SessionListResponse]:
        async with self.uow:
            sessions = await SessionRegistry(self.uow).list_active(user_id)
            return Return.ok(
                SessionListResponse(
                    sessions=[AdminSessionInfo.from_session(s, current_session_id) for s in sessions]
                )
            )

    async def revoke_session(
        self, session_id: str, requesting_user_id: UUID, client: ClientInfo
    ) -> Result[dict]:
        """
        Revoke one of the requester's own sessions.

        Errors:
            - SESSION_NOT_FOUND: unknown, foreign or already revoked session
        """
        async with self.uow:
            session = await self.uow.admin_sessions.get_by_id(session_id)
            if session is None or session.user_id != requesting_user_id or not session.is_active:
                return Return.err(Error("SESSION_NOT_FOUND", "Session not found"))

            await SessionRegistry(self.uow).revoke(session_id, requesting_user_id)

            await record_security_event(
                self.uow,
                SecurityEventType.session_revoked,
                SecurityOutcome.success,
                client=client,
                user_id=requesting_user_id,
                details={"session_id": session_id},
            )
            await self.uow.commit()

            return Return.ok({"session_id": session_id, "revoked": True})

    async def revoke_all_sessions(
        self, target_user_id: UUID, requesting_user_id: UUID, client: ClientInfo
    ) -> Result[dict]:
        async with self.uow:
            target_user = await self.uow.users.get_by_id(target_user_id)
            if not target_user:
                return Return.err(Error("USER_NOT_FOUND", "User not found"))

            count = await SessionRegistry(self.uow).revoke_all(target_user_id, requesting_user_id)

            await record_security_event(
                self.uow,
                SecurityEventType.session_revoked,
                SecurityOutcome.success,
                client=client,
                user_id=requesting_user_id,
                details={
                    "target_user_id": str(target_user_id),
                    "revoked_count": count,
                    "is_self": target_user_id == requesting_user_id,
                },
            )
            await self.uow.commit()

            return Return.ok({"revoked_count": count, "target_user_id": str(target_user_id)})
