from datetime import timedelta

from libs.result import Error, Result, Return
from src.app.services.auth_policy import AuthPolicy
from src.app.services.notification import (
    INotificationSink,
    notify_safely,
    verification_notification,
)
from src.app.services.security_audit import ClientInfo, record_security_event
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.users.dtos import UserProfile
from src.domain.base import utc_now
from src.domain.entities import SecurityEventType, SecurityOutcome, User, UserRole, UserStatus
from src.domain.validation import normalize_email, password_policy_violations, validate_profile
from .dtos import RegisterCommand, RegisterResponse


def check_registration(command: RegisterCommand):
    """Password policy and role-dispatched profile rules. Returns an Error or None."""
    weak = password_policy_violations(command.password)
    if weak:
        return Error(
            "WEAK_PASSWORD",
            "Password must contain " + ", ".join(weak),
            {"password": weak},
        )

    field_errors = validate_profile(UserRole.user, command.profile_fields())
    if field_errors:
        return Error("VALIDATION_ERROR", "Invalid registration data", field_errors)
    return None


class RegisterUseCase:
    """
    Register Use Case

    Business Logic:
    1. Validate password strength and profile fields
    2. Reject duplicate email and duplicate tax id (two distinct errors)
    3. Create User with status pending_email_verification, password hashed
    4. Issue a 24-hour verification token
    5. Record registration audit entry and commit
    6. Request verification email (best-effort, never fails registration)
    """

    def __init__(self, uow: UnitOfWork, notifier: INotificationSink, policy: AuthPolicy = None):
        self.uow = uow
        self.notifier = notifier
        self.policy = policy or AuthPolicy()

    async def execute(self, command: RegisterCommand, client: ClientInfo) -> Result[RegisterResponse]:
        error = check_registration(command)
        if error:
            return Return.err(error)

        email = normalize_email(command.email)

        async with self.uow:
            if await self.uow.users.get_by_email(email):
                return Return.err(Error("EMAIL_ALREADY_EXISTS", "Email already registered"))

            if command.tax_id and await self.uow.users.get_by_tax_id(command.tax_id):
                return Return.err(
                    Error("TAX_ID_ALREADY_EXISTS", "An account with this tax id already exists")
                )

            user = User(
                email=email,
                role=UserRole.user,
                status=UserStatus.pending_email_verification,
                **command.profile_fields(),
            )
            user.set_password(command.password)
            token = user.issue_verification_token(
                utc_now(), timedelta(hours=self.policy.email_verification_ttl_hours)
            )
            user = await self.uow.users.create(user)

            await record_security_event(
                self.uow,
                SecurityEventType.registration,
                SecurityOutcome.success,
                client=client,
                user_id=user.id,
            )
            await self.uow.commit()

        await notify_safely(
            self.notifier, verification_notification(user.email, token, self.policy.frontend_url)
        )

        return Return.ok(
            RegisterResponse(
                user=UserProfile.from_user(user),
                message="Registration successful. Please check your email to verify your account.",
            )
        )
