"""
Admin API Routes - User Lifecycle Administration

Every endpoint requires an administrator bearer token bound to an active
AdminSession; each call is written to the security log as an admin_action.
"""

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
from src.app.use_cases.users import (
    ApproveUserUseCase,
    BlockUserUseCase,
    ChangeRoleUseCase,
    DeleteUserUseCase,
    ListUsersUseCase,
    RejectUserUseCase,
    UnblockUserUseCase,
    UserActionResponse,
    UserListResponse,
)
from src.depends import get_client_info, get_notifier, get_unit_of_work

router = APIRouter(tags=["Admin"])


class ChangeRoleRequest(BaseModel):
    role: str = Field(..., description="New role: user or admin")
    reason: Optional[str] = Field(None, max_length=500)


class ReasonRequest(BaseModel):
    reason: Optional[str] = Field(None, max_length=500)


@router.get("/users", status_code=status.HTTP_200_OK, response_model=UserListResponse)
async def list_users(
    status_filter: Optional[str] = Query(None, alias="status", description="Filter by status"),
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
    admin: CurrentUser = Depends(require_admin),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    result = await ListUsersUseCase(uow).execute(status_filter, limit, offset)
    if result.is_err():
        raise to_http_error(result.error)
    return result.value


@router.put("/users/{user_id}/role", status_code=status.HTTP_200_OK, response_model=UserActionResponse)
async def change_role(
    user_id: UUID,
    request: ChangeRoleRequest,
    admin: CurrentUser = Depends(require_admin),
    uow: UnitOfWork = Depends(get_unit_of_work),
    notifier: INotificationSink = Depends(get_notifier),
    client: ClientInfo = Depends(get_client_info),
):
    """
    Change a user's role.

    Demotion from admin revokes every session of the target.

    Raises:
        - 400 Bad Request: Invalid role, or the caller targets themselves
        - 404 Not Found: USER_NOT_FOUND
    """
    result = await ChangeRoleUseCase(uow, notifier).execute(
        admin.id, user_id, request.role, request.reason, client
    )
    if result.is_err():
        raise to_http_error(result.error)
    return result.value


@router.post("/users/{user_id}/approve", status_code=status.HTTP_200_OK, response_model=UserActionResponse)
async def approve_user(
    user_id: UUID,
    admin: CurrentUser = Depends(require_admin),
    uow: UnitOfWork = Depends(get_unit_of_work),
    notifier: INotificationSink = Depends(get_notifier),
    client: ClientInfo = Depends(get_client_info),
):
    """
    Approve a verified registration.

    Raises:
        - 400 Bad Request: Email not verified yet, or already active
        - 404 Not Found: USER_NOT_FOUND
    """
    result = await ApproveUserUseCase(uow, notifier).execute(admin.id, user_id, client)
    if result.is_err():
        raise to_http_error(result.error)
    return result.value


@router.post("/users/{user_id}/reject", status_code=status.HTTP_200_OK, response_model=UserActionResponse)
async def reject_user(
    user_id: UUID,
    request: Optional[ReasonRequest] = None,
    admin: CurrentUser = Depends(require_admin),
    uow: UnitOfWork = Depends(get_unit_of_work),
    notifier: INotificationSink = Depends(get_notifier),
    client: ClientInfo = Depends(get_client_info),
):
    reason = request.reason if request else None
    result = await RejectUserUseCase(uow, notifier).execute(admin.id, user_id, reason, client)
    if result.is_err():
        raise to_http_error(result.error)
    return result.value


@router.post("/users/{user_id}/block", status_code=status.HTTP_200_OK, response_model=UserActionResponse)
async def block_user(
    user_id: UUID,
    request: Optional[ReasonRequest] = None,
    admin: CurrentUser = Depends(require_admin),
    uow: UnitOfWork = Depends(get_unit_of_work),
    notifier: INotificationSink = Depends(get_notifier),
    client: ClientInfo = Depends(get_client_info),
):
    """
    Block an active user and revoke all of their sessions.

    Raises:
        - 400 Bad Request: Self-target, or user is not active
        - 404 Not Found: USER_NOT_FOUND
    """
    reason = request.reason if request else None
    result = await BlockUserUseCase(uow, notifier).execute(admin.id, user_id, reason, client)
    if result.is_err():
        raise to_http_error(result.error)
    return result.value


@router.post("/users/{user_id}/unblock", status_code=status.HTTP_200_OK, response_model=UserActionResponse)
async def unblock_user(
    user_id: UUID,
    admin: CurrentUser = Depends(require_admin),
    uow: UnitOfWork = Depends(get_unit_of_work),
    client: ClientInfo = Depends(get_client_info),
):
    result = await UnblockUserUseCase(uow).execute(admin.id, user_id, client)
    if result.is_err():
        raise to_http_error(result.error)
    return result.value


@router.delete("/users/{user_id}", status_code=status.HTTP_200_OK, response_model=UserActionResponse)
async def delete_user(
    user_id: UUID,
    admin: CurrentUser = Depends(require_admin),
    uow: UnitOfWork = Depends(get_unit_of_work),
    client: ClientInfo = Depends(get_client_info),
):
    """
    Hard-delete a user. Security log history is retained.

    Raises:
        - 400 Bad Request: Self-target
        - 404 Not Found: USER_NOT_FOUND
    """
    result = await DeleteUserUseCase(uow).execute(admin.id, user_id, client)
    if result.is_err():
        raise to_http_error(result.error)
    return result.value
