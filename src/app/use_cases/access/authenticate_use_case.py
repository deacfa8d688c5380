"""
Request authentication and the admin authorization gate.

Signature validity alone never grants access: the user must still exist,
and a token bound to an AdminSession is only honoured while that session
is active and unexpired. Every rejection is written to the security log.
"""

import logging
from typing import Optional
from uuid import UUID

from libs.result import Error, Result, Return
from src.app.services.rate_limiter import IRateLimiter
from src.app.services.security_audit import ClientInfo, record_security_event
from src.app.services.session_registry import SessionRegistry
from src.app.services.suspicious_activity import SuspiciousActivityMonitor
from src.app.services.token_authority import TokenAuthority
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import SecurityEventType, SecurityOutcome, User, UserRole, UserStatus
from .dtos import CurrentUser

logger = logging.getLogger(__name__)

ADMIN_ACTION_RULE = "admin_action"


class AuthenticateUserUseCase:
    def __init__(self, uow: UnitOfWork, tokens: TokenAuthority):
        self.uow = uow
        self.tokens = tokens

    async def _deny(
        self,
        error: Error,
        client: ClientInfo,
        reason: str,
        user_id: Optional[UUID] = None,
        path: Optional[str] = None,
    ):
        await record_security_event(
            self.uow,
            SecurityEventType.access_denied,
            SecurityOutcome.denied,
            client=client,
            user_id=user_id,
            details={"reason": reason, "path": path},
        )
        await self.uow.commit()
        return Return.err(error)

    async def _resolve(
        self, token: Optional[str], client: ClientInfo, path: Optional[str]
    ) -> Result[User]:
        """Token -> live user, with session check. Caller is inside the uow."""
        unauthorized = Error("UNAUTHORIZED", "Invalid or expired token")

        if not token:
            return await self._deny(
                Error("UNAUTHORIZED", "Authentication required"), client, "missing_token", path=path
            )

        payload = await self.tokens.verify(token)
        if payload is None:
            return await self._deny(unauthorized, client, "invalid_token", path=path)

        if payload.get("temp"):
            return await self._deny(unauthorized, client, "two_factor_pending", path=path)

        try:
            user_id = UUID(payload["id"])
        except (KeyError, ValueError):
            return await self._deny(unauthorized, client, "malformed_claims", path=path)

        user = await self.uow.users.get_by_id(user_id)
        if user is None:
            return await self._deny(unauthorized, client, "unknown_user", path=path)

        if user.status != UserStatus.active:
            return await self._deny(
                Error("UNAUTHORIZED", "Account is not active"),
                client,
                "status_" + user.status.value,
                user_id=user.id,
                path=path,
            )

        session_id = payload.get("sessionId")
        if session_id:
            registry = SessionRegistry(self.uow)
            if await registry.validate(session_id, user.id) is None:
                return await self._deny(
                    Error("UNAUTHORIZED", "Session expired or revoked"),
                    client,
                    "session_invalid",
                    user_id=user.id,
                    path=path,
                )
            await registry.touch(session_id)

        return Return.ok(user)

    async def execute(
        self, token: Optional[str], client: ClientInfo, path: Optional[str] = None
    ) -> Result[CurrentUser]:
        async with self.uow:
            result = await self._resolve(token, client, path)
            if result.is_err():
                return result
            await self.uow.commit()

        user = result.value
        payload = self.tokens.decode(token)
        return Return.ok(
            CurrentUser(
                id=user.id,
                email=user.email,
                role=user.role.value,
                session_id=payload.get("sessionId"),
                token=token,
            )
        )


class AuthorizeAdminUseCase(AuthenticateUserUseCase):
    """
    Admin authorization gate.

    Order:
    1. Token signature, expiry and denylist
    2. User exists and is active
    3. Role is admin
    4. Token is bound to an active, unexpired AdminSession (touched)
    5. Per-actor admin_action rate limit
    6. admin_action audit entry and suspicious-activity inspection
    """

    def __init__(
        self,
        uow: UnitOfWork,
        tokens: TokenAuthority,
        monitor: SuspiciousActivityMonitor,
        rate_limiter: Optional[IRateLimiter] = None,
    ):
        super().__init__(uow, tokens)
        self.monitor = monitor
        self.rate_limiter = rate_limiter

    async def execute(
        self, token: Optional[str], client: ClientInfo, path: Optional[str] = None
    ) -> Result[CurrentUser]:
        async with self.uow:
            result = await self._resolve(token, client, path)
            if result.is_err():
                return result
            user = result.value

            if user.role != UserRole.admin:
                return await self._deny(
                    Error("FORBIDDEN", "Administrator privileges required"),
                    client,
                    "not_admin",
                    user_id=user.id,
                    path=path,
                )

            session_id = self.tokens.decode(token).get("sessionId")
            if not session_id:
                return await self._deny(
                    Error("UNAUTHORIZED", "Administrator session required"),
                    client,
                    "missing_session",
                    user_id=user.id,
                    path=path,
                )

            if self.rate_limiter is not None:
                decision = await self.rate_limiter.hit(ADMIN_ACTION_RULE, f"admin:{user.id}")
                if not decision.allowed:
                    await record_security_event(
                        self.uow,
                        SecurityEventType.rate_limit_exceeded,
                        SecurityOutcome.denied,
                        client=client,
                        user_id=user.id,
                        details={"rule": ADMIN_ACTION_RULE, "path": path},
                    )
                    await self.monitor.inspect(self.uow, client, user.id)
                    await self.uow.commit()
                    return Return.err(
                        Error(
                            "RATE_LIMITED",
                            "Too many requests, please try again later",
                            {"retry_after": decision.retry_after},
                        )
                    )

            await record_security_event(
                self.uow,
                SecurityEventType.admin_action,
                SecurityOutcome.success,
                client=client,
                user_id=user.id,
                details={"action": path, "session_id": session_id},
            )
            await self.monitor.inspect(self.uow, client, user.id)
            await self.uow.commit()

            return Return.ok(
                CurrentUser(
                    id=user.id,
                    email=user.email,
                    role=user.role.value,
                    session_id=session_id,
                    token=token,
                )
            )
