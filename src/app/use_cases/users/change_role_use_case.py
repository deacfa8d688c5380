"""
Change User Role Use Case

Handles promoting or demoting a user between the user and admin roles.
"""

from typing import Optional
from uuid import UUID

from libs.result import Error, Result, Return
from src.app.services.notification import (
    INotificationSink,
    notify_safely,
    role_change_notification,
)
from src.app.services.security_audit import ClientInfo, record_security_event, refuse_self_target
from src.app.services.session_registry import SessionRegistry
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import SecurityEventType, SecurityOutcome, UserRole
from .dtos import UserActionResponse, UserProfile


class ChangeRoleUseCase:
    """
    Use case for changing a user's role.

    Business Rules:
    - Role must be one of the closed enum, validated before any state change
    - An admin cannot change their own role
    - Target user must exist
    - Demoting an admin revokes all of their admin sessions
    - Audit entry records old role, new role and reason
    - The affected user is notified (best-effort)
    """

    def __init__(self, uow: UnitOfWork, notifier: INotificationSink):
        self.uow = uow
        self.notifier = notifier

    async def execute(
        self,
        actor_id: UUID,
        target_user_id: UUID,
        new_role: str,
        reason: Optional[str],
        client: ClientInfo,
    ) -> Result[UserActionResponse]:
        """
        Execute change role use case.

        Args:
            actor_id: Administrator making the change
            target_user_id: User whose role is being changed
            new_role: New role to assign (user/admin)
            reason: Free-text justification recorded in the audit log
            client: Request origin

        Returns:
            Result with updated user info, or Error
        """
        try:
            role = UserRole(new_role)
        except ValueError:
            return Return.err(
                Error(
                    "INVALID_ROLE",
                    f"Invalid role: {new_role}. Must be one of: user, admin",
                )
            )

        if actor_id == target_user_id:
            return await refuse_self_target(
                self.uow, actor_id, "change_role", "You cannot change your own role", client
            )

        async with self.uow:
            user = await self.uow.users.get_by_id(target_user_id)
            if user is None:
                return Return.err(Error("USER_NOT_FOUND", "User not found"))

            old_role = user.role
            user.role = role
            await self.uow.users.update(user)

            revoked = 0
            if old_role == UserRole.admin and role != UserRole.admin:
                revoked = await SessionRegistry(self.uow).revoke_all(user.id, actor_id)

            await record_security_event(
                self.uow,
                SecurityEventType.role_change,
                SecurityOutcome.success,
                client=client,
                user_id=actor_id,
                details={
                    "target_user_id": str(user.id),
                    "old_role": old_role.value,
                    "new_role": role.value,
                    "reason": reason,
                    "sessions_revoked": revoked,
                },
            )
            await self.uow.commit()

        await notify_safely(
            self.notifier,
            role_change_notification(user.email, user.first_name, role.value, reason),
        )

        return Return.ok(
            UserActionResponse(
                status="updated", message="Role updated", user=UserProfile.from_user(user)
            )
        )
