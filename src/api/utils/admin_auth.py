"""
Admin Authorization Gate

FastAPI dependency guarding every administrator route.
"""

from typing import Optional

from fastapi import Depends, Request

from src.api.error import to_http_error
from src.app.services.rate_limiter import IRateLimiter
from src.app.services.security_audit import ClientInfo
from src.app.services.suspicious_activity import SuspiciousActivityMonitor
from src.app.services.token_authority import TokenAuthority
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.access import AuthorizeAdminUseCase, CurrentUser
from src.depends import (
    get_activity_monitor,
    get_bearer_token,
    get_client_info,
    get_rate_limiter,
    get_token_authority,
    get_unit_of_work,
)


async def require_admin(
    request: Request,
    token: Optional[str] = Depends(get_bearer_token),
    client: ClientInfo = Depends(get_client_info),
    uow: UnitOfWork = Depends(get_unit_of_work),
    tokens: TokenAuthority = Depends(get_token_authority),
    monitor: SuspiciousActivityMonitor = Depends(get_activity_monitor),
    rate_limiter: Optional[IRateLimiter] = Depends(get_rate_limiter),
) -> CurrentUser:
    """
    Verify the caller is an active administrator with a live session.

    Raises:
        ClientError: 401 invalid token or session, 403 not an admin,
        429 admin action rate limit exceeded
    """
    action = f"{request.method} {request.url.path}"
    use_case = AuthorizeAdminUseCase(uow, tokens, monitor, rate_limiter)
    result = await use_case.execute(token, client, action)
    if result.is_err():
        raise to_http_error(result.error)
    return result.value
