"""
Delete Account Use Case

Self-service deletion: the account is anonymized and deactivated, not removed.
"""

from uuid import UUID

from libs.result import Error, Result, Return
from src.app.services.security_audit import ClientInfo, record_security_event
from src.app.services.session_registry import SessionRegistry
from src.app.services.token_authority import TokenAuthority
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utc_now
from src.domain.entities import SecurityEventType, SecurityOutcome, UserRole
from .dtos import UserActionResponse


class DeleteAccountUseCase:
    """
    Business Rules:
    - Current password must be confirmed
    - Administrators cannot delete their own account
    - Personal data is scrubbed and status forced to inactive
    - All sessions are revoked and the presented token is denylisted
    """

    def __init__(self, uow: UnitOfWork, tokens: TokenAuthority):
        self.uow = uow
        self.tokens = tokens

    async def execute(
        self, user_id: UUID, password: str, token: str, client: ClientInfo
    ) -> Result[UserActionResponse]:
        async with self.uow:
            user = await self.uow.users.get_by_id(user_id)
            if user is None:
                return Return.err(Error("USER_NOT_FOUND", "User not found"))

            if user.role == UserRole.admin:
                await record_security_event(
                    self.uow,
                    SecurityEventType.access_denied,
                    SecurityOutcome.denied,
                    client=client,
                    user_id=user.id,
                    details={"reason": "self_target", "action": "delete_account"},
                )
                await self.uow.commit()
                return Return.err(
                    Error("CANNOT_TARGET_SELF", "Administrators cannot delete their own account")
                )

            if not user.verify_password(password):
                await record_security_event(
                    self.uow,
                    SecurityEventType.access_denied,
                    SecurityOutcome.denied,
                    client=client,
                    user_id=user.id,
                    details={"reason": "account_deletion_bad_password"},
                )
                await self.uow.commit()
                return Return.err(Error("INVALID_CREDENTIALS", "Invalid password"))

            user.anonymize()
            await self.uow.users.update(user)
            await SessionRegistry(self.uow).revoke_all(user.id, user.id)
            await self.uow.password_reset_tokens.invalidate_all_for_user(user.id, utc_now())

            await record_security_event(
                self.uow,
                SecurityEventType.account_deleted,
                SecurityOutcome.success,
                client=client,
                user_id=user.id,
            )
            await self.uow.commit()

        await self.tokens.invalidate(token)

        return Return.ok(UserActionResponse(status="deleted", message="Account deleted"))
