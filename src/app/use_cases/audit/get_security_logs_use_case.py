"""
Get Security Logs Use Case

Retrieves security audit log entries with filters and pagination.
"""

from typing import Any, Dict, Optional
from uuid import UUID

from libs.result import Error, Result, Return
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import SecurityEventType


class GetSecurityLogsUseCase:
    """
    Use case for retrieving security log entries (admin only, enforced by the API gate).

    Business Rules:
    - Results ordered by newest first
    - Supports cursor-based pagination
    - Optional filters: event type, actor user id, source IP
    - Each entry includes the actor's email when the actor still exists
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self,
        limit: int = 50,
        cursor: Optional[str] = None,
        event_type: Optional[str] = None,
        user_id: Optional[UUID] = None,
        ip_address: Optional[str] = None,
    ) -> Result[Dict[str, Any]]:
        """
        Execute get security logs use case.

        Args:
            limit: Maximum number of entries to return (1-100)
            cursor: Pagination cursor (optional)
            event_type: Filter by event type
            user_id: Filter by actor
            ip_address: Filter by source IP

        Returns:
            Result with entries list and next_cursor, or Error
        """
        if event_type:
            try:
                SecurityEventType(event_type)
            except ValueError:
                return Return.err(Error("VALIDATION_ERROR", f"Unknown event type: {event_type}"))

        limit = max(1, min(limit, 100))

        async with self.uow:
            entries, next_cursor = await self.uow.security_logs.get_paginated(
                limit=limit,
                cursor=cursor,
                event_type=event_type,
                user_id=user_id,
                ip_address=ip_address,
            )

            emails = {}
            entries_list = []
            for entry in entries:
                user_email = None
                if entry.user_id:
                    if entry.user_id not in emails:
                        user = await self.uow.users.get_by_id(entry.user_id)
                        emails[entry.user_id] = user.email if user else None
                    user_email = emails[entry.user_id]

                entries_list.append(
                    {
                        "id": entry.id,
                        "event_type": entry.event_type,
                        "outcome": entry.outcome,
                        "user_id": str(entry.user_id) if entry.user_id else None,
                        "user_email": user_email,
                        "ip_address": entry.ip_address,
                        "user_agent": entry.user_agent,
                        "timestamp": entry.created_at.isoformat() + "Z",
                        "details": entry.details or {},
                    }
                )

            return Return.ok({"entries": entries_list, "next_cursor": next_cursor})
