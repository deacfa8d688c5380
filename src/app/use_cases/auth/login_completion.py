"""
Final step shared by password login and second-factor verification:
mint the bearer token and, for administrators, open an AdminSession.
"""

from datetime import timedelta

from src.app.services.auth_policy import AuthPolicy
from src.app.services.security_audit import ClientInfo, record_security_event
from src.app.services.session_registry import SessionRegistry
from src.app.services.suspicious_activity import SuspiciousActivityMonitor
from src.app.services.token_authority import TokenAuthority
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.users.dtos import UserProfile
from src.domain.entities import SecurityEventType, SecurityOutcome, User, UserRole
from .dtos import LoginResponse


async def complete_login(
    uow: UnitOfWork,
    tokens: TokenAuthority,
    monitor: SuspiciousActivityMonitor,
    policy: AuthPolicy,
    user: User,
    client: ClientInfo,
    remember_me: bool = False,
    via_two_factor: bool = False,
) -> LoginResponse:
    """Caller owns the commit."""
    session_id = None
    if user.role == UserRole.admin:
        ttl_hours = (
            policy.admin_remember_me_ttl_hours if remember_me else policy.admin_session_ttl_hours
        )
        session = await SessionRegistry(uow).create_session(user.id, client, ttl_hours)
        session_id = session.id
    else:
        ttl_hours = policy.user_token_ttl_hours

    expires_in = timedelta(hours=ttl_hours)
    token = tokens.issue_access_token(user, expires_in, session_id=session_id)

    await record_security_event(
        uow,
        SecurityEventType.login_success,
        SecurityOutcome.success,
        client=client,
        user_id=user.id,
        details={"session_id": session_id, "two_factor": via_two_factor},
    )

    if session_id is not None:
        await monitor.inspect(uow, client, user.id)

    return LoginResponse(
        requires_2fa=False,
        token=token,
        expires_in=int(expires_in.total_seconds()),
        session_id=session_id,
        user=UserProfile.from_user(user),
    )
