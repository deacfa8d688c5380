from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional, Sequence, Tuple
from uuid import UUID

from src.domain.entities import SecurityLogEntry


class ISecurityLogRepository(ABC):
    """SecurityLogEntry repository interface - application layer"""

    @abstractmethod
    async def create(self, entry: SecurityLogEntry) -> SecurityLogEntry:
        """Append a new entry (immutable)"""
        pass

    @abstractmethod
    async def count_recent(
        self, ip_address: str, event_types: Sequence[str], since: datetime
    ) -> int:
        """Count entries from an IP with one of the event types since a point in time"""
        pass

    @abstractmethod
    async def get_recent(
        self, ip_address: str, event_type: str, since: datetime
    ) -> List[SecurityLogEntry]:
        """Entries of one type from an IP since a point in time, oldest first"""
        pass

    @abstractmethod
    async def get_paginated(
        self,
        limit: int = 50,
        cursor: Optional[str] = None,
        event_type: Optional[str] = None,
        user_id: Optional[UUID] = None,
        ip_address: Optional[str] = None,
    ) -> Tuple[List[SecurityLogEntry], Optional[str]]:
        """
        Get entries with cursor-based pagination.

        Returns:
            Tuple of (entries list, next_cursor)
            - entries: ordered newest first
            - next_cursor: Cursor for next page, None if no more entries
        """
        pass
