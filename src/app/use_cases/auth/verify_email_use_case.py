"""
Verify Email Use Case

Handles email verification via single-use token, for both registered users
and staged (pending) registrations.
"""

from libs.result import Error, Result, Return
from src.app.services.security_audit import ClientInfo, record_security_event
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utc_now
from src.domain.entities import PendingUserStatus, SecurityEventType, SecurityOutcome
from .dtos import MessageResponse


class VerifyEmailUseCase:
    """
    Use case for email verification.

    Business Rules:
    - Token must match exactly and must not be expired
    - Wrong and expired tokens produce the same INVALID_TOKEN outcome
    - Sets email_verified and advances status to pending_admin_approval
    - Clears verification token (single-use)
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, token: str, client: ClientInfo) -> Result[MessageResponse]:
        if not token:
            return Return.err(Error("INVALID_TOKEN", "Invalid or expired verification token"))

        now = utc_now()
        async with self.uow:
            user = await self.uow.users.get_by_valid_verification_token(token, now)
            if user is not None:
                user.mark_email_verified()
                await self.uow.users.update(user)
                user_id = user.id
            else:
                pending = await self.uow.pending_users.get_by_valid_verification_token(token, now)
                if pending is None:
                    return Return.err(
                        Error("INVALID_TOKEN", "Invalid or expired verification token")
                    )
                pending.status = PendingUserStatus.pending_admin_approval
                pending.email_verification_token = None
                pending.email_verification_expires_at = None
                await self.uow.pending_users.update(pending)
                user_id = None

            await record_security_event(
                self.uow,
                SecurityEventType.email_verified,
                SecurityOutcome.success,
                client=client,
                user_id=user_id,
                details=None if user_id else {"pending_user_id": str(pending.id)},
            )
            await self.uow.commit()

            return Return.ok(
                MessageResponse(
                    status="verified",
                    message="Email verified. Your account is awaiting administrator approval.",
                )
            )
