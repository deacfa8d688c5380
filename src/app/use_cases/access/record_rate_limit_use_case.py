from typing import Optional
from uuid import UUID

from libs.result import Result, Return
from src.app.services.rate_limiter import RateLimitDecision
from src.app.services.security_audit import ClientInfo, record_security_event
from src.app.services.suspicious_activity import SuspiciousActivityMonitor
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import SecurityEventType, SecurityOutcome


class RecordRateLimitUseCase:
    """Audit a rejected (rate-limited) request and run the activity monitor."""

    def __init__(self, uow: UnitOfWork, monitor: SuspiciousActivityMonitor):
        self.uow = uow
        self.monitor = monitor

    async def execute(
        self,
        rule: str,
        decision: RateLimitDecision,
        client: ClientInfo,
        user_id: Optional[UUID] = None,
        path: Optional[str] = None,
    ) -> Result[None]:
        async with self.uow:
            await record_security_event(
                self.uow,
                SecurityEventType.rate_limit_exceeded,
                SecurityOutcome.denied,
                client=client,
                user_id=user_id,
                details={
                    "rule": rule,
                    "limit": decision.limit,
                    "retry_after": decision.retry_after,
                    "path": path,
                },
            )
            await self.monitor.inspect(self.uow, client, user_id)
            await self.uow.commit()
        return Return.ok(None)
