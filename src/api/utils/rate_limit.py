"""
Per-route rate limiting dependency.

Requests over the limit are rejected before any use case runs, audited as
rate_limit_exceeded and answered with 429 and a Retry-After header.
"""

from typing import Optional

from fastapi import Depends, Request, status

from libs.result import Error
from src.api.error import ClientError
from src.app.services.rate_limiter import IRateLimiter
from src.app.services.security_audit import ClientInfo
from src.app.services.suspicious_activity import SuspiciousActivityMonitor
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.access import RecordRateLimitUseCase
from src.depends import get_activity_monitor, get_client_info, get_rate_limiter, get_unit_of_work


def rate_limit(rule: str):
    """Build a dependency enforcing the named rule per client IP."""

    async def dependency(
        request: Request,
        client: ClientInfo = Depends(get_client_info),
        limiter: Optional[IRateLimiter] = Depends(get_rate_limiter),
        uow: UnitOfWork = Depends(get_unit_of_work),
        monitor: SuspiciousActivityMonitor = Depends(get_activity_monitor),
    ) -> None:
        if limiter is None:
            return

        decision = await limiter.hit(rule, client.ip_address or "unknown")
        if decision.allowed:
            return

        await RecordRateLimitUseCase(uow, monitor).execute(
            rule, decision, client, path=request.url.path
        )
        raise ClientError(
            Error(
                "RATE_LIMITED",
                "Too many requests, please try again later",
                {"retry_after": decision.retry_after},
            ),
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            headers={"Retry-After": str(decision.retry_after)},
        )

    dependency.__name__ = f"rate_limit_{rule}"
    return dependency
