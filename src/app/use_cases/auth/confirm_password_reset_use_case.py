"""
Confirm Password Reset Use Case

Handles password reset confirmation with secure token validation.
"""

from libs.result import Error, Result, Return
from src.app.services.security_audit import ClientInfo, record_security_event
from src.app.services.session_registry import SessionRegistry
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utc_now
from src.domain.entities import PasswordResetToken, SecurityEventType, SecurityOutcome
from src.domain.validation import password_policy_violations
from .dtos import MessageResponse


class ConfirmPasswordResetUseCase:
    """
    Use case for confirming password reset.

    Business Rules:
    - Token is validated by hashing and comparing with stored hash
    - Unknown, expired and already used tokens give the same INVALID_TOKEN
    - New password must satisfy the password policy
    - Lockout state is cleared and all admin sessions are revoked
    - Token is marked as used after successful reset
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self, token: str, new_password: str, client: ClientInfo
    ) -> Result[MessageResponse]:
        """
        Execute confirm password reset use case.

        Args:
            token: Password reset token (plain text from email)
            new_password: New password to set
            client: Request origin

        Returns:
            Result with confirmation status, or Error

        Errors:
            - WEAK_PASSWORD: Password does not meet the policy
            - INVALID_TOKEN: Token not found, expired or already used
        """
        weak = password_policy_violations(new_password)
        if weak:
            return Return.err(
                Error("WEAK_PASSWORD", "Password must contain " + ", ".join(weak), {"password": weak})
            )

        invalid = Error("INVALID_TOKEN", "Invalid or expired password reset token")
        now = utc_now()

        async with self.uow:
            reset_token = await self.uow.password_reset_tokens.get_by_hash(
                PasswordResetToken.hash_secret(token)
            )
            if reset_token is None or not reset_token.is_usable(now):
                return Return.err(invalid)

            user = await self.uow.users.get_by_id(reset_token.user_id)
            if user is None:
                return Return.err(invalid)

            user.set_password(new_password)
            user.reset_failed_logins()
            await self.uow.users.update(user)

            reset_token.consume(now)
            await self.uow.password_reset_tokens.update(reset_token)

            revoked_count = await SessionRegistry(self.uow).revoke_all(user.id, user.id)

            await record_security_event(
                self.uow,
                SecurityEventType.password_reset,
                SecurityOutcome.success,
                client=client,
                user_id=user.id,
                details={"token_id": str(reset_token.id), "sessions_revoked": revoked_count},
            )
            await self.uow.commit()

            return Return.ok(
                MessageResponse(status="success", message="Password has been reset successfully")
            )
