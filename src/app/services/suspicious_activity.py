"""
Suspicious Activity Monitor

Counts recent audit entries per source IP against configured patterns and
appends a suspicious_activity entry when a pattern is breached. A pattern
already alerted for the same IP inside its window is not alerted again.
Advisory only: the request that triggered the inspection is never blocked
here.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable, List, Mapping, Optional, Tuple
from uuid import UUID

from src.app.services.security_audit import ClientInfo, record_security_event
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utc_now
from src.domain.entities import SecurityEventType, SecurityOutcome

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SuspiciousPattern:
    name: str
    event_types: Tuple[str, ...]
    max_events: int
    window_seconds: int


class SuspiciousActivityMonitor:
    def __init__(self, patterns: Iterable[SuspiciousPattern]):
        self.patterns = list(patterns)

    @classmethod
    def from_config(cls, raw_patterns: Iterable[Mapping]) -> "SuspiciousActivityMonitor":
        return cls(
            SuspiciousPattern(
                name=raw["name"],
                event_types=tuple(raw["event_types"]),
                max_events=int(raw["max_events"]),
                window_seconds=int(raw["window_seconds"]),
            )
            for raw in raw_patterns
        )

    async def _already_alerted(
        self, uow: UnitOfWork, ip_address: str, pattern_name: str, since: datetime
    ) -> bool:
        alerts = await uow.security_logs.get_recent(
            ip_address, SecurityEventType.suspicious_activity.value, since
        )
        return any((alert.details or {}).get("pattern") == pattern_name for alert in alerts)

    async def inspect(
        self, uow: UnitOfWork, client: ClientInfo, user_id: Optional[UUID] = None
    ) -> List[str]:
        """
        Evaluate every pattern for the client's IP.

        Returns:
            Names of the newly breached patterns (an alert entry was written for each)
        """
        if not client.ip_address:
            return []

        now = utc_now()
        breached = []
        for pattern in self.patterns:
            since = now - timedelta(seconds=pattern.window_seconds)
            count = await uow.security_logs.count_recent(
                client.ip_address, pattern.event_types, since
            )
            if count < pattern.max_events:
                continue

            if await self._already_alerted(uow, client.ip_address, pattern.name, since):
                continue

            breached.append(pattern.name)
            logger.warning(
                "Suspicious activity from %s: %s (%d events in %ds)",
                client.ip_address,
                pattern.name,
                count,
                pattern.window_seconds,
            )
            await record_security_event(
                uow,
                SecurityEventType.suspicious_activity,
                SecurityOutcome.alert,
                client=client,
                user_id=user_id,
                details={
                    "pattern": pattern.name,
                    "count": count,
                    "threshold": pattern.max_events,
                    "window_seconds": pattern.window_seconds,
                },
            )
        return breached
