"""
Login Use Case

Credential verification with brute-force lockout and optional second factor.
"""

import logging
from datetime import timedelta

from libs.result import Error, Result, Return
from src.app.services.auth_policy import AuthPolicy
from src.app.services.security_audit import ClientInfo, record_security_event
from src.app.services.suspicious_activity import SuspiciousActivityMonitor
from src.app.services.token_authority import TokenAuthority
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utc_now
from src.domain.entities import SecurityEventType, SecurityOutcome, UserStatus
from src.domain.entities.user import check_password
from src.domain.validation import normalize_email
from .dtos import LoginResponse
from .login_completion import complete_login

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS_MESSAGE = "Invalid email or password"

# Compared against when the email is unknown so both paths pay for one bcrypt check
_DUMMY_HASH = "$2b$12$C6UzMDM.H6dfI/f/IKcEeO6Ai9Vx.UiPvDxEt7HHuOn8mmcUCgBBa"


class LoginUseCase:
    """
    Use case for user login.

    Business Rules (evaluated strictly in order, each short-circuits):
    1. Unknown email -> generic INVALID_CREDENTIALS
    2. Email not verified -> ACCOUNT_NOT_ACTIVATED
    3. Status not active -> ACCOUNT_PENDING_APPROVAL / ACCOUNT_BLOCKED
    4. Lock in the future -> ACCOUNT_LOCKED, password is not compared
    5. Wrong password -> atomic counter increment, lock at threshold,
       generic INVALID_CREDENTIALS
    6. Correct password -> counter reset, last_login_at updated
    7. Active TOTP secret -> intermediate token only
    8. Otherwise final token (admins also get an AdminSession)

    Every failure is written to the security log and followed by a
    suspicious-activity inspection for the client IP.
    """

    def __init__(
        self,
        uow: UnitOfWork,
        tokens: TokenAuthority,
        monitor: SuspiciousActivityMonitor,
        policy: AuthPolicy = None,
    ):
        self.uow = uow
        self.tokens = tokens
        self.monitor = monitor
        self.policy = policy or AuthPolicy()

    async def _fail(self, error: Error, client: ClientInfo, user_id=None, outcome=SecurityOutcome.failure, details=None):
        await record_security_event(
            self.uow,
            SecurityEventType.login_failure,
            outcome,
            client=client,
            user_id=user_id,
            details=details,
        )
        await self.monitor.inspect(self.uow, client, user_id)
        await self.uow.commit()
        return Return.err(error)

    async def execute(
        self, email: str, password: str, client: ClientInfo, remember_me: bool = False
    ) -> Result[LoginResponse]:
        """
        Execute login use case.

        Args:
            email: User email (normalized before lookup)
            password: Plain text password
            client: Request origin for the audit trail
            remember_me: Extends administrator session lifetime

        Returns:
            Result with LoginResponse (final or intermediate token), or Error
        """
        email = normalize_email(email)

        async with self.uow:
            user = await self.uow.users.get_by_email(email)

            # 1. Unknown email
            if user is None:
                check_password(password, _DUMMY_HASH)
                return await self._fail(
                    Error("INVALID_CREDENTIALS", INVALID_CREDENTIALS_MESSAGE),
                    client,
                    details={"reason": "unknown_email", "email": email},
                )

            # 2. Email not verified
            if not user.email_verified:
                return await self._fail(
                    Error(
                        "ACCOUNT_NOT_ACTIVATED",
                        "Account not activated. Please verify your email address.",
                    ),
                    client,
                    user_id=user.id,
                    details={"reason": "email_not_verified"},
                )

            # 3. Lifecycle status
            if user.status != UserStatus.active:
                if user.status == UserStatus.inactive:
                    error = Error("ACCOUNT_BLOCKED", "Account has been blocked")
                else:
                    error = Error("ACCOUNT_PENDING_APPROVAL", "Account is pending approval")
                return await self._fail(
                    error,
                    client,
                    user_id=user.id,
                    details={"reason": "status_" + user.status.value},
                )

            # 4. Lockout, checked strictly before the password
            now = utc_now()
            if user.is_locked(now):
                return await self._fail(
                    Error(
                        "ACCOUNT_LOCKED",
                        "Account is temporarily locked due to too many failed login attempts",
                        {"locked_until": user.account_locked_until.isoformat()},
                    ),
                    client,
                    user_id=user.id,
                    outcome=SecurityOutcome.locked,
                    details={"reason": "account_locked"},
                )

            if user.has_expired_lock(now):
                user.reset_failed_logins()
                await self.uow.users.update(user)

            # 5. Password mismatch
            if not user.verify_password(password):
                attempts, locked_until = await self.uow.users.register_failed_login(
                    user.id,
                    self.policy.lockout_threshold,
                    now + timedelta(minutes=self.policy.lockout_minutes),
                )
                if locked_until is not None and locked_until > now:
                    logger.warning("Account %s locked after %d failed logins", user.id, attempts)
                    await record_security_event(
                        self.uow,
                        SecurityEventType.account_locked,
                        SecurityOutcome.locked,
                        client=client,
                        user_id=user.id,
                        details={"attempts": attempts, "locked_until": locked_until.isoformat()},
                    )
                return await self._fail(
                    Error("INVALID_CREDENTIALS", INVALID_CREDENTIALS_MESSAGE),
                    client,
                    user_id=user.id,
                    details={"reason": "bad_password", "attempts": attempts},
                )

            # 6. Success
            user.reset_failed_logins()
            user.last_login_at = now
            await self.uow.users.update(user)

            # 7. Second factor required
            if user.has_two_factor:
                await record_security_event(
                    self.uow,
                    SecurityEventType.login_success,
                    SecurityOutcome.pending_2fa,
                    client=client,
                    user_id=user.id,
                )
                await self.uow.commit()
                temp_token = self.tokens.issue_two_factor_token(
                    user,
                    timedelta(minutes=self.policy.two_factor_token_ttl_minutes),
                    remember_me=remember_me,
                )
                return Return.ok(LoginResponse(requires_2fa=True, temp_token=temp_token))

            # 8. Final token
            response = await complete_login(
                self.uow, self.tokens, self.monitor, self.policy, user, client, remember_me
            )
            await self.uow.commit()
            return Return.ok(response)
