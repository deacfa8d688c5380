"""
Reject User Use Case

Administrative rejection of a registration: notify, then hard-delete.
"""

from typing import Optional
from uuid import UUID

from libs.result import Error, Result, Return
from src.app.services.notification import (
    INotificationSink,
    notify_safely,
    rejection_notification,
)
from src.app.services.security_audit import ClientInfo, record_security_event, refuse_self_target
from src.app.services.session_registry import SessionRegistry
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import SecurityEventType, SecurityOutcome, UserStatus
from .dtos import UserActionResponse


class RejectUserUseCase:
    """
    Business Rules:
    - An admin cannot reject their own account
    - Only registrations awaiting verification or approval can be rejected
    - The rejection notice is sent before deletion; a failed send does not stop it
    - Audit history for the user is kept
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
                self.uow, actor_id, "reject", "You cannot reject your own account", client
            )

        async with self.uow:
            user = await self.uow.users.get_by_id(target_user_id)
            if user is None:
                return Return.err(Error("USER_NOT_FOUND", "User not found"))

            if user.status not in (
                UserStatus.pending_email_verification,
                UserStatus.pending_admin_approval,
            ):
                return Return.err(
                    Error("INVALID_STATE", "Only pending registrations can be rejected")
                )

            await notify_safely(
                self.notifier, rejection_notification(user.email, user.first_name, reason)
            )

            email = user.email
            await SessionRegistry(self.uow).revoke_all(user.id, actor_id)
            await self.uow.users.delete(user)

            await record_security_event(
                self.uow,
                SecurityEventType.user_rejected,
                SecurityOutcome.success,
                client=client,
                user_id=actor_id,
                details={"target_user_id": str(target_user_id), "email": email, "reason": reason},
            )
            await self.uow.commit()

            return Return.ok(UserActionResponse(status="rejected", message="User rejected"))
