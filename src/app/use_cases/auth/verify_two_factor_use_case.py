"""
Verify Two-Factor Use Case

Exchanges an intermediate (temp) token plus a TOTP code for a final token.
"""

from typing import Optional
from uuid import UUID

from libs.result import Error, Result, Return
from src.app.services.auth_policy import AuthPolicy
from src.app.services.security_audit import ClientInfo, record_security_event
from src.app.services.suspicious_activity import SuspiciousActivityMonitor
from src.app.services.token_authority import TokenAuthority
from src.app.services.totp import verify_code
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import SecurityEventType, SecurityOutcome, UserStatus
from .dtos import LoginResponse
from .login_completion import complete_login


class VerifyTwoFactorUseCase:
    """
    Business Rules:
    - Intermediate token must be validly signed, unexpired, not denylisted
      and carry the temp marker
    - Code is checked against the active secret with +/-2 time steps
    - Every failure returns the same INVALID_TWO_FACTOR outcome
    - The intermediate token is single-use: it is denylisted on success
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

    async def _fail(self, client: ClientInfo, reason: str, user_id: Optional[UUID] = None):
        await record_security_event(
            self.uow,
            SecurityEventType.two_factor_failure,
            SecurityOutcome.failure,
            client=client,
            user_id=user_id,
            details={"reason": reason},
        )
        await self.monitor.inspect(self.uow, client, user_id)
        await self.uow.commit()
        return Return.err(Error("INVALID_TWO_FACTOR", "Invalid or expired two-factor code"))

    async def execute(self, temp_token: str, code: str, client: ClientInfo) -> Result[LoginResponse]:
        async with self.uow:
            payload = await self.tokens.verify(temp_token)
            if payload is None or not payload.get("temp"):
                return await self._fail(client, "invalid_temp_token")

            try:
                user_id = UUID(payload["id"])
            except (KeyError, ValueError):
                return await self._fail(client, "invalid_temp_token")

            user = await self.uow.users.get_by_id(user_id)
            if user is None or user.status != UserStatus.active or not user.has_two_factor:
                return await self._fail(client, "user_not_eligible", user_id)

            if not verify_code(user.two_factor_secret, code):
                return await self._fail(client, "wrong_code", user.id)

            await record_security_event(
                self.uow,
                SecurityEventType.two_factor_success,
                SecurityOutcome.success,
                client=client,
                user_id=user.id,
            )
            response = await complete_login(
                self.uow,
                self.tokens,
                self.monitor,
                self.policy,
                user,
                client,
                remember_me=bool(payload.get("rememberMe")),
                via_two_factor=True,
            )
            await self.uow.commit()

        await self.tokens.invalidate(temp_token)
        return Return.ok(response)
