import base64
from datetime import datetime
from typing import List, Optional, Sequence, Tuple
from uuid import UUID

from sqlalchemy import func
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.security_log_repository import ISecurityLogRepository
from src.domain.entities import SecurityLogEntry


class SecurityLogRepository(ISecurityLogRepository):
    """SecurityLogEntry repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, entry: SecurityLogEntry) -> SecurityLogEntry:
        """Create a new security log entry (immutable)"""
        self.session.add(entry)
        await self.session.flush()
        await self.session.refresh(entry)
        return entry

    async def count_recent(
        self, ip_address: str, event_types: Sequence[str], since: datetime
    ) -> int:
        stmt = (
            select(func.count())
            .select_from(SecurityLogEntry)
            .where(
                SecurityLogEntry.ip_address == ip_address,
                SecurityLogEntry.event_type.in_(list(event_types)),
                SecurityLogEntry.created_at >= since,
            )
        )
        result = await self.session.exec(stmt)
        return result.one()

    async def get_recent(
        self, ip_address: str, event_type: str, since: datetime
    ) -> List[SecurityLogEntry]:
        stmt = (
            select(SecurityLogEntry)
            .where(
                SecurityLogEntry.ip_address == ip_address,
                SecurityLogEntry.event_type == event_type,
                SecurityLogEntry.created_at >= since,
            )
            .order_by(SecurityLogEntry.created_at, SecurityLogEntry.id)
        )
        result = await self.session.exec(stmt)
        return list(result.all())

    async def get_paginated(
        self,
        limit: int = 50,
        cursor: Optional[str] = None,
        event_type: Optional[str] = None,
        user_id: Optional[UUID] = None,
        ip_address: Optional[str] = None,
    ) -> Tuple[List[SecurityLogEntry], Optional[str]]:
        """
        Get security log entries with cursor-based pagination.

        Cursor format: base64-encoded "<ISO timestamp of created_at>|<id>"
        """
        stmt = select(SecurityLogEntry)
        if event_type:
            stmt = stmt.where(SecurityLogEntry.event_type == event_type)
        if user_id:
            stmt = stmt.where(SecurityLogEntry.user_id == user_id)
        if ip_address:
            stmt = stmt.where(SecurityLogEntry.ip_address == ip_address)

        if cursor:
            try:
                cursor_str = base64.b64decode(cursor).decode("utf-8")
                timestamp_str, _, id_str = cursor_str.partition("|")
                cursor_timestamp = datetime.fromisoformat(timestamp_str)
                cursor_id = int(id_str)
                # Entries written in the same instant are ordered by id
                stmt = stmt.where(
                    (SecurityLogEntry.created_at < cursor_timestamp)
                    | (
                        (SecurityLogEntry.created_at == cursor_timestamp)
                        & (SecurityLogEntry.id < cursor_id)
                    )
                )
            except (ValueError, TypeError):
                # Invalid cursor, ignore and return from beginning
                pass

        stmt = stmt.order_by(
            SecurityLogEntry.created_at.desc(), SecurityLogEntry.id.desc()
        ).limit(limit + 1)

        result = await self.session.exec(stmt)
        entries = list(result.all())

        has_more = len(entries) > limit
        if has_more:
            entries = entries[:limit]

        next_cursor = None
        if has_more and entries:
            last_entry = entries[-1]
            cursor_str = f"{last_entry.created_at.isoformat()}|{last_entry.id}"
            next_cursor = base64.b64encode(cursor_str.encode("utf-8")).decode("utf-8")

        return entries, next_cursor
