from typing import Optional
from uuid import UUID

from libs.result import Result, Return
from src.app.services.security_audit import ClientInfo, record_security_event
from src.app.services.session_registry import SessionRegistry
from src.app.services.token_authority import TokenAuthority
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import SecurityEventType, SecurityOutcome
from .dtos import MessageResponse


class LogoutUseCase:
    """Denylist the presented token and revoke its admin session, if any."""

    def __init__(self, uow: UnitOfWork, tokens: TokenAuthority):
        self.uow = uow
        self.tokens = tokens

    async def execute(
        self, user_id: UUID, token: str, session_id: Optional[str], client: ClientInfo
    ) -> Result[MessageResponse]:
        await self.tokens.invalidate(token)

        async with self.uow:
            if session_id:
                await SessionRegistry(self.uow).revoke(session_id, user_id)

            await record_security_event(
                self.uow,
                SecurityEventType.logout,
                SecurityOutcome.success,
                client=client,
                user_id=user_id,
                details={"session_id": session_id},
            )
            await self.uow.commit()

        return Return.ok(MessageResponse(status="logged_out", message="Logged out"))
