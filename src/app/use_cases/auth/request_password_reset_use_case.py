"""
Request Password Reset Use Case

Handles generating and sending password reset tokens.
"""

from datetime import timedelta

from libs.result import Result, Return
from src.app.services.auth_policy import AuthPolicy
from src.app.services.notification import (
    INotificationSink,
    notify_safely,
    password_reset_notification,
)
from src.app.services.security_audit import ClientInfo, record_security_event
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utc_now
from src.domain.entities import PasswordResetToken, SecurityEventType, SecurityOutcome
from src.domain.validation import normalize_email
from .dtos import MessageResponse

GENERIC_RESPONSE = MessageResponse(
    status="sent",
    message="If the email exists, a password reset link has been sent",
)


class RequestPasswordResetUseCase:
    """
    Issues a reset token for a known email and mails the secret.

    Unknown emails get the same response and no email. A new request
    consumes any earlier open token of the user.
    """

    def __init__(self, uow: UnitOfWork, notifier: INotificationSink, policy: AuthPolicy = None):
        self.uow = uow
        self.notifier = notifier
        self.policy = policy or AuthPolicy()

    async def execute(self, email: str, client: ClientInfo) -> Result[MessageResponse]:
        async with self.uow:
            user = await self.uow.users.get_by_email(normalize_email(email))

            # No email enumeration - return success even if user not found
            if user is None:
                return Return.ok(GENERIC_RESPONSE)

            now = utc_now()
            await self.uow.password_reset_tokens.invalidate_all_for_user(user.id, now)
            password_reset_token, reset_token = PasswordResetToken.issue(
                user.id, timedelta(minutes=self.policy.password_reset_ttl_minutes), now
            )
            await self.uow.password_reset_tokens.create(password_reset_token)

            await record_security_event(
                self.uow,
                SecurityEventType.password_reset_requested,
                SecurityOutcome.success,
                client=client,
                user_id=user.id,
                details={"token_id": str(password_reset_token.id)},
            )
            await self.uow.commit()

        await notify_safely(
            self.notifier,
            password_reset_notification(user.email, reset_token, self.policy.frontend_url),
        )
        return Return.ok(GENERIC_RESPONSE)
