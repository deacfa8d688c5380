from datetime import timedelta
from typing import Optional
from uuid import UUID

from libs.result import Error, Result, Return
from src.app.services.auth_policy import AuthPolicy
from src.app.services.notification import (
    INotificationSink,
    approval_notification,
    notify_safely,
    rejection_notification,
    verification_notification,
)
from src.app.services.security_audit import ClientInfo, record_security_event
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.auth.dtos import MessageResponse, RegisterCommand
from src.app.use_cases.auth.register_use_case import check_registration
from src.app.use_cases.users.dtos import UserActionResponse, UserProfile
from src.domain.base import generate_token, utc_now
from src.domain.entities import (
    PendingUser,
    PendingUserStatus,
    SecurityEventType,
    SecurityOutcome,
    User,
    UserRole,
    UserStatus,
)
from src.domain.entities.user import hash_password
from src.domain.validation import normalize_email
from .dtos import PendingUserInfo, PendingUserListResponse

PROFILE_COPY_FIELDS = (
    "first_name",
    "last_name",
    "company_name",
    "tax_id",
    "phone",
    "company_country",
    "street",
    "postal_code",
    "city",
)


class SubmitStagedRegistrationUseCase:
    """Same validation as direct registration, stored as a PendingUser"""

    def __init__(self, uow: UnitOfWork, notifier: INotificationSink, policy: AuthPolicy = None):
        self.uow = uow
        self.notifier = notifier
        self.policy = policy or AuthPolicy()

    async def execute(self, command: RegisterCommand, client: ClientInfo) -> Result[MessageResponse]:
        error = check_registration(command)
        if error:
            return Return.err(error)

        email = normalize_email(command.email)

        async with self.uow:
            if await self.uow.users.get_by_email(email) or await self.uow.pending_users.get_by_email(email):
                return Return.err(Error("EMAIL_ALREADY_EXISTS", "Email already registered"))

            if command.tax_id and await self.uow.users.get_by_tax_id(command.tax_id):
                return Return.err(
                    Error("TAX_ID_ALREADY_EXISTS", "An account with this tax id already exists")
                )

            token = generate_token(32)
            pending = PendingUser(
                email=email,
                password_hash=hash_password(command.password),
                email_verification_token=token,
                email_verification_expires_at=utc_now()
                + timedelta(hours=self.policy.email_verification_ttl_hours),
                **command.profile_fields(),
            )
            pending = await self.uow.pending_users.create(pending)

            await record_security_event(
                self.uow,
                SecurityEventType.registration,
                SecurityOutcome.success,
                client=client,
                details={"pending_user_id": str(pending.id), "staged": True},
            )
            await self.uow.commit()

        await notify_safely(
            self.notifier, verification_notification(email, token, self.policy.frontend_url)
        )
        return Return.ok(
            MessageResponse(
                status="pending_email_verification",
                message="Registration received. Please check your email to verify your account.",
            )
        )


class AcceptPendingUserUseCase:
    """
    Business Rules:
    - Staged registration must have verified its email
    - Email must still be free among Users
    - Creates an active, verified User with the stored hash, then deletes the staged row
    """

    def __init__(self, uow: UnitOfWork, notifier: INotificationSink):
        self.uow = uow
        self.notifier = notifier

    async def execute(
        self, actor_id: UUID, pending_user_id: UUID, client: ClientInfo
    ) -> Result[UserActionResponse]:
        async with self.uow:
            pending = await self.uow.pending_users.get_by_id(pending_user_id)
            if pending is None:
                return Return.err(Error("PENDING_USER_NOT_FOUND", "Pending user not found"))

            if pending.status != PendingUserStatus.pending_admin_approval:
                return Return.err(
                    Error("INVALID_STATE", "Pending user must verify their email before acceptance")
                )

            if await self.uow.users.get_by_email(pending.email):
                return Return.err(Error("EMAIL_ALREADY_EXISTS", "Email already registered"))

            user = User(
                email=pending.email,
                password_hash=pending.password_hash,
                role=UserRole.user,
                status=UserStatus.active,
                email_verified=True,
                **{field: getattr(pending, field) for field in PROFILE_COPY_FIELDS},
            )
            user = await self.uow.users.create(user)
            await self.uow.pending_users.delete(pending)

            await record_security_event(
                self.uow,
                SecurityEventType.user_approved,
                SecurityOutcome.success,
                client=client,
                user_id=actor_id,
                details={"target_user_id": str(user.id), "pending_user_id": str(pending_user_id)},
            )
            await self.uow.commit()

        await notify_safely(self.notifier, approval_notification(user.email, user.first_name))
        return Return.ok(
            UserActionResponse(status="accepted", message="User accepted", user=UserProfile.from_user(user))
        )


class RejectPendingUserUseCase:
    def __init__(self, uow: UnitOfWork, notifier: INotificationSink):
        self.uow = uow
        self.notifier = notifier

    async def execute(
        self,
        actor_id: UUID,
        pending_user_id: UUID,
        reason: Optional[str],
        client: ClientInfo,
    ) -> Result[MessageResponse]:
        async with self.uow:
            pending = await self.uow.pending_users.get_by_id(pending_user_id)
            if pending is None:
                return Return.err(Error("PENDING_USER_NOT_FOUND", "Pending user not found"))

            if pending.status == PendingUserStatus.rejected:
                return Return.err(Error("INVALID_STATE", "Pending user is already rejected"))

            pending.status = PendingUserStatus.rejected
            pending.email_verification_token = None
            pending.email_verification_expires_at = None
            await self.uow.pending_users.update(pending)

            await record_security_event(
                self.uow,
                SecurityEventType.user_rejected,
                SecurityOutcome.success,
                client=client,
                user_id=actor_id,
                details={"pending_user_id": str(pending.id), "reason": reason},
            )
            await self.uow.commit()

        await notify_safely(
            self.notifier, rejection_notification(pending.email, pending.first_name, reason)
        )
        return Return.ok(MessageResponse(status="rejected", message="Pending user rejected"))


class ListPendingUsersUseCase:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, status: Optional[str] = None) -> Result[PendingUserListResponse]:
        status_filter = None
        if status:
            try:
                status_filter = PendingUserStatus(status)
            except ValueError:
                return Return.err(Error("VALIDATION_ERROR", f"Invalid status: {status}"))

        async with self.uow:
            items = await self.uow.pending_users.list_by_status(status_filter)
            return Return.ok(
                PendingUserListResponse(items=[PendingUserInfo.from_pending(p) for p in items])
            )
