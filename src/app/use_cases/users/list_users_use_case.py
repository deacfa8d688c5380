from typing import Optional

from libs.result import Error, Result, Return
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import UserStatus
from .dtos import UserListResponse, UserProfile


class ListUsersUseCase:
    """Admin listing of users, newest first, optionally filtered by status"""

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self, status: Optional[str] = None, limit: int = 50, offset: int = 0
    ) -> Result[UserListResponse]:
        status_filter = None
        if status:
            try:
                status_filter = UserStatus(status)
            except ValueError:
                return Return.err(
                    Error(
                        "VALIDATION_ERROR",
                        f"Invalid status: {status}",
                        {"status": "Must be one of: " + ", ".join(s.value for s in UserStatus)},
                    )
                )

        limit = max(1, min(limit, 100))
        offset = max(0, offset)

        async with self.uow:
            users, total = await self.uow.users.list_paginated(status_filter, limit, offset)
            return Return.ok(
                UserListResponse(
                    items=[UserProfile.from_user(u) for u in users],
                    total=total,
                    limit=limit,
                    offset=offset,
                )
            )
