"""
Block / Unblock User Use Cases

Toggle a user's lifecycle status between active and inactive.
"""

from typing import Optional
from uuid import UUID

from libs.result import Error, Result, Return
from src.app.services.notification import (
    INotificationSink,
    block_notification,
    notify_safely,
)
from src.app.services.security_audit import ClientInfo, record_security_event, refuse_self_target
from src.app.services.session_registry import SessionRegistry
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import SecurityEventType, SecurityOutcome, UserStatus
from .dtos import UserActionResponse, UserProfile


class BlockUserUseCase:
    """
    Business Rules:
    - An admin cannot block their own account
    - Only active users can be blocked
    - Blocking revokes every admin session of the target
    """

    def __init__(self, uow: UnitOfWork, notifier: INotificationSink):
        self.uow = uow
        self.notifier = notifier

    async def execute(
        self,
        actor_id: UUID,
        target_user_id: UUID,
        reason: Optional[str],
        client: ClientInfo,
    ) -> Result[UserActionResponse]:
        if actor_id == target_user_id:
            return await refuse_self_target(
                self.uow, actor_id, "block", "You cannot block your own account", client
            )

        async with self.uow:
            user = await self.uow.users.get_by_id(target_user_id)
            if user is None:
                return Return.err(Error("USER_NOT_FOUND", "User not found"))

            if user.status != UserStatus.active:
                return Return.err(Error("INVALID_STATE", "Only active users can be blocked"))

            user.status = UserStatus.inactive
            await self.uow.users.update(user)
            revoked = await SessionRegistry(self.uow).revoke_all(user.id, actor_id)

            await record_security_event(
                self.uow,
                SecurityEventType.user_blocked,
                SecurityOutcome.success,
                client=client,
                user_id=actor_id,
                details={
                    "target_user_id": str(user.id),
                    "reason": reason,
                    "sessions_revoked": revoked,
                },
            )
            await self.uow.commit()

        await notify_safely(self.notifier, block_notification(user.email, user.first_name, reason))

        return Return.ok(
            UserActionResponse(status="blocked", message="User blocked", user=UserProfile.from_user(user))
        )


class UnblockUserUseCase:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self, actor_id: UUID, target_user_id: UUID, client: ClientInfo
    ) -> Result[UserActionResponse]:
        if actor_id == target_user_id:
            return await refuse_self_target(
                self.uow, actor_id, "unblock", "You cannot unblock your own account", client
            )

        async with self.uow:
            user = await self.uow.users.get_by_id(target_user_id)
            if user is None:
                return Return.err(Error("USER_NOT_FOUND", "User not found"))

            if user.status != UserStatus.inactive:
                return Return.err(Error("INVALID_STATE", "Only blocked users can be unblocked"))

            user.status = UserStatus.active
            user.reset_failed_logins()
            await self.uow.users.update(user)

            await record_security_event(
                self.uow,
                SecurityEventType.user_unblocked,
                SecurityOutcome.success,
                client=client,
                user_id=actor_id,
                details={"target_user_id": str(user.id)},
            )
            await self.uow.commit()

            return Return.ok(
                UserActionResponse(
                    status="active", message="User unblocked", user=UserProfile.from_user(user)
                )
            )
