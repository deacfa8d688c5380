from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field

from src.api.error import to_http_error
from src.api.utils.admin_auth import require_admin
from src.app.services.notification import INotificationSink
from src.app.services.security_audit import ClientInfo
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.access import CurrentUser
from src.app.use_cases.auth import MessageResponse
from src.app.use_cases.pending import (
    AcceptPendingUserUseCase,
    ListPendingUsersUseCase,
    PendingUserListResponse,
    RejectPendingUserUseCase,
)
from src.app.use_cases.users import UserActionResponse
from src.depends import get_client_info, get_notifier, get_unit_of_work

router = APIRouter(tags=["Pending Users"])


class RejectPendingRequest(BaseModel):
    reason: Optional[str] = Field(None, max_length=500)


@router.get("/pending-users", status_code=status.HTTP_200_OK, response_model=PendingUserListResponse)
async def list_pending_users(
    status_filter: Optional[str] = Query(None, alias="status"),
    admin: CurrentUser = Depends(require_admin),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    result = await ListPendingUsersUseCase(uow).execute(status_filter)
    if result.is_err():
        raise to_http_error(result.error)
    return result.value


@router.post(
    "/pending-users/{pending_user_id}/accept",
    status_code=status.HTTP_200_OK,
    response_model=UserActionResponse,
)
async def accept_pending_user(
    pending_user_id: UUID,
    admin: CurrentUser = Depends(require_admin),
    uow: UnitOfWork = Depends(get_unit_of_work),
    notifier: INotificationSink = Depends(get_notifier),
    client: ClientInfo = Depends(get_client_info),
):
    """
    Convert a verified staged registration into an active user.

    Raises:
        - 400 Bad Request: Email not verified, or email already taken
        - 404 Not Found: PENDING_USER_NOT_FOUND
    """
    result = await AcceptPendingUserUseCase(uow, notifier).execute(admin.id, pending_user_id, client)
    if result.is_err():
        raise to_http_error(result.error)
    return result.value


@router.post(
    "/pending-users/{pending_user_id}/reject",
    status_code=status.HTTP_200_OK,
    response_model=MessageResponse,
)
async def reject_pending_user(
    pending_user_id: UUID,
    request: Optional[RejectPendingRequest] = None,
    admin: CurrentUser = Depends(require_admin),
    uow: UnitOfWork = Depends(get_unit_of_work),
    notifier: INotificationSink = Depends(get_notifier),
    client: ClientInfo = Depends(get_client_info),
):
    reason = request.reason if request else None
    result = await RejectPendingUserUseCase(uow, notifier).execute(
        admin.id, pending_user_id, reason, client
    )
    if result.is_err():
        raise to_http_error(result.error)
    return result.value
