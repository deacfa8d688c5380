"""
Security Audit Log helpers.

Every authentication/authorization outcome is appended through
record_security_event so entries carry the same shape everywhere.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union
from uuid import UUID

from libs.result import Error, Return
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import SecurityEventType, SecurityLogEntry, SecurityOutcome

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClientInfo:
    """Request origin recorded alongside audit entries"""

    ip_address: Optional[str] = None
    user_agent: Optional[str] = None


async def record_security_event(
    uow: UnitOfWork,
    event_type: Union[SecurityEventType, str],
    outcome: Union[SecurityOutcome, str],
    client: Optional[ClientInfo] = None,
    user_id: Optional[UUID] = None,
    details: Optional[Dict[str, Any]] = None,
) -> SecurityLogEntry:
    """Append an entry; the caller owns the commit."""
    client = client or ClientInfo()
    entry = SecurityLogEntry(
        user_id=user_id,
        event_type=SecurityEventType(event_type).value,
        outcome=SecurityOutcome(outcome).value,
        ip_address=client.ip_address,
        user_agent=client.user_agent,
        details=details,
    )
    logger.debug(
        "security event %s/%s user=%s ip=%s",
        entry.event_type,
        entry.outcome,
        user_id,
        client.ip_address,
    )
    return await uow.security_logs.create(entry)


async def refuse_self_target(
    uow: UnitOfWork,
    actor_id: UUID,
    action: str,
    message: str,
    client: Optional[ClientInfo] = None,
):
    """Record an administrator acting on their own account and return the refusal."""
    async with uow:
        await record_security_event(
            uow,
            SecurityEventType.access_denied,
            SecurityOutcome.denied,
            client=client,
            user_id=actor_id,
            details={"reason": "self_target", "action": action},
        )
        await uow.commit()
    return Return.err(Error("CANNOT_TARGET_SELF", message))
