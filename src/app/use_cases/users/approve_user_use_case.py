"""
Approve User Use Case

Moves a verified registration to active.
"""

from uuid import UUID

from libs.result import Error, Result, Return
from src.app.services.notification import (
    INotificationSink,
    approval_notification,
    notify_safely,
)
from src.app.services.security_audit import ClientInfo, record_security_event
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import SecurityEventType, SecurityOutcome, UserStatus
from .dtos import UserActionResponse, UserProfile


class ApproveUserUseCase:
    """
    Use case for administrative approval.

    Business Rules:
    - Email must be verified first
    - Already active users cannot be approved again
    - Approval notification is best-effort
    """

    def __init__(self, uow: UnitOfWork, notifier: INotificationSink):
        self.uow = uow
        self.notifier = notifier

    async def execute(
        self, actor_id: UUID, target_user_id: UUID, client: ClientInfo
    ) -> Result[UserActionResponse]:
        async with self.uow:
            user = await self.uow.users.get_by_id(target_user_id)
            if user is None:
                return Return.err(Error("USER_NOT_FOUND", "User not found"))

            if not user.email_verified:
                return Return.err(
                    Error("EMAIL_NOT_VERIFIED", "User has not verified their email address")
                )

            if user.status == UserStatus.active:
                return Return.err(Error("INVALID_STATE", "User is already active"))

            previous_status = user.status.value
            user.status = UserStatus.active
            await self.uow.users.update(user)

            await record_security_event(
                self.uow,
                SecurityEventType.user_approved,
                SecurityOutcome.success,
                client=client,
                user_id=actor_id,
                details={"target_user_id": str(user.id), "previous_status": previous_status},
            )
            await self.uow.commit()

        await notify_safely(self.notifier, approval_notification(user.email, user.first_name))

        return Return.ok(
            UserActionResponse(
                status="approved",
                message="User approved",
                user=UserProfile.from_user(user),
            )
        )
