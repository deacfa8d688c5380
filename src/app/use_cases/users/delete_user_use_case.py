from uuid import UUID

from libs.result import Error, Result, Return
from src.app.services.security_audit import ClientInfo, record_security_event, refuse_self_target
from src.app.services.session_registry import SessionRegistry
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utc_now
from src.domain.entities import SecurityEventType, SecurityOutcome
from .dtos import UserActionResponse


class DeleteUserUseCase:
    """
    Administrator-initiated hard delete.

    Sessions of the target are revoked first; security log entries that
    reference the user are retained.
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self, actor_id: UUID, target_user_id: UUID, client: ClientInfo
    ) -> Result[UserActionResponse]:
        if actor_id == target_user_id:
            return await refuse_self_target(
                self.uow, actor_id, "delete", "You cannot delete your own account", client
            )

        async with self.uow:
            user = await self.uow.users.get_by_id(target_user_id)
            if user is None:
                return Return.err(Error("USER_NOT_FOUND", "User not found"))

            email = user.email
            revoked = await SessionRegistry(self.uow).revoke_all(user.id, actor_id)
            await self.uow.password_reset_tokens.invalidate_all_for_user(user.id, utc_now())
            await self.uow.users.delete(user)

            await record_security_event(
                self.uow,
                SecurityEventType.user_deleted,
                SecurityOutcome.success,
                client=client,
                user_id=actor_id,
                details={
                    "target_user_id": str(target_user_id),
                    "email": email,
                    "sessions_revoked": revoked,
                },
            )
            await self.uow.commit()

            return Return.ok(UserActionResponse(status="deleted", message="User deleted"))
