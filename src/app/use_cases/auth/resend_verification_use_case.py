"""
Resend Verification Email Use Case

Handles resending email verification tokens to users.
"""

from datetime import timedelta

from libs.result import Result, Return
from src.app.services.auth_policy import AuthPolicy
from src.app.services.notification import (
    INotificationSink,
    notify_safely,
    verification_notification,
)
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utc_now
from src.domain.validation import normalize_email
from .dtos import MessageResponse

GENERIC_RESPONSE = MessageResponse(
    status="sent",
    message="If the account exists and is unverified, a verification link has been sent",
)


class ResendVerificationUseCase:
    """
    Use case for resending email verification.

    Business Rules:
    - Unknown or already verified email: same success response, nothing sent
    - Otherwise a new token replaces the old one with a fresh 24h expiry
    """

    def __init__(self, uow: UnitOfWork, notifier: INotificationSink, policy: AuthPolicy = None):
        self.uow = uow
        self.notifier = notifier
        self.policy = policy or AuthPolicy()

    async def execute(self, email: str) -> Result[MessageResponse]:
        async with self.uow:
            user = await self.uow.users.get_by_email(normalize_email(email))

            if user is None or user.email_verified:
                return Return.ok(GENERIC_RESPONSE)

            token = user.issue_verification_token(
                utc_now(), timedelta(hours=self.policy.email_verification_ttl_hours)
            )
            await self.uow.users.update(user)
            await self.uow.commit()

        await notify_safely(
            self.notifier, verification_notification(user.email, token, self.policy.frontend_url)
        )
        return Return.ok(GENERIC_RESPONSE)
