"""
Audit API Routes

Security log retrieval for administrators.
"""

from typing import Any, Dict, List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel

from src.api.error import to_http_error
from src.api.utils.admin_auth import require_admin
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.access import CurrentUser
from src.app.use_cases.audit import GetSecurityLogsUseCase
from src.depends import get_unit_of_work

router = APIRouter(tags=["Audit"])


class SecurityLogEntryResponse(BaseModel):
    """Single security log entry in response"""

    id: int
    event_type: str
    outcome: str
    user_id: Optional[str]
    user_email: Optional[str]
    ip_address: Optional[str]
    user_agent: Optional[str]
    timestamp: str
    details: Dict[str, Any]


class SecurityLogsResponse(BaseModel):
    """GET /security-logs response payload"""

    entries: List[SecurityLogEntryResponse]
    next_cursor: Optional[str]


@router.get(
    "/security-logs",
    status_code=status.HTTP_200_OK,
    response_model=SecurityLogsResponse,
)
async def get_security_logs(
    admin: CurrentUser = Depends(require_admin),
    uow: UnitOfWork = Depends(get_unit_of_work),
    limit: int = Query(50, ge=1, le=100, description="Maximum number of entries to return"),
    cursor: Optional[str] = Query(None, description="Pagination cursor"),
    event_type: Optional[str] = Query(None, description="Filter by event type"),
    user_id: Optional[UUID] = Query(None, description="Filter by actor"),
    ip_address: Optional[str] = Query(None, description="Filter by source IP"),
):
    """
    Get Security Logs

    Query Parameters:
        - limit: Maximum number of entries to return (1-100, default 50)
        - cursor: Pagination cursor for fetching next page
        - event_type, user_id, ip_address: Optional filters

    Returns:
        - entries: Security log entries ordered by newest first
        - next_cursor: Cursor for next page (null if no more entries)

    Raises:
        - 400 Bad Request: Invalid cursor or event type
        - 401 Unauthorized: Invalid or expired token, revoked session
        - 403 Forbidden: Not an administrator
    """
    use_case = GetSecurityLogsUseCase(uow)
    result = await use_case.execute(
        limit=limit,
        cursor=cursor,
        event_type=event_type,
        user_id=user_id,
        ip_address=ip_address,
    )
    if result.is_err():
        raise to_http_error(result.error)
    return result.value
