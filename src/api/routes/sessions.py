from uuid import UUID

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel

from src.api.error import to_http_error
from src.api.utils.admin_auth import require_admin
from src.app.services.security_audit import ClientInfo
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.access import CurrentUser
from src.app.use_cases.sessions import RevokeSessionsUseCase, SessionListResponse
from src.depends import get_client_info, get_unit_of_work

router = APIRouter(tags=["Sessions"])


class RevokeSessionResponse(BaseModel):
    """Response for session revocation operations"""

    message: str
    revoked_count: int


class RevokeSpecificSessionResponse(BaseModel):
    """Response for specific session revocation"""

    message: str
    session_id: str
    revoked: bool


@router.get("/sessions", status_code=status.HTTP_200_OK, response_model=SessionListResponse)
async def list_sessions(
    admin: CurrentUser = Depends(require_admin),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """Active sessions of the calling administrator; the current one is flagged."""
    result = await RevokeSessionsUseCase(uow).list_sessions(admin.id, admin.session_id)
    if result.is_err():
        raise to_http_error(result.error)
    return result.value


@router.delete(
    "/sessions/{session_id}",
    status_code=status.HTTP_200_OK,
    response_model=RevokeSpecificSessionResponse,
)
async def revoke_session(
    session_id: str,
    admin: CurrentUser = Depends(require_admin),
    uow: UnitOfWork = Depends(get_unit_of_work),
    client: ClientInfo = Depends(get_client_info),
):
    """
    Revoke Specific Session

    Logs out one device. Revoking the current session ends this token too.

    Raises:
        - 404 Not Found: Unknown, foreign or already revoked session
    """
    result = await RevokeSessionsUseCase(uow).revoke_session(session_id, admin.id, client)
    if result.is_err():
        raise to_http_error(result.error)

    data = result.value
    return {
        "message": "Session revoked successfully",
        "session_id": data["session_id"],
        "revoked": data["revoked"],
    }


@router.post(
    "/users/{user_id}/sessions/revoke",
    status_code=status.HTTP_200_OK,
    response_model=RevokeSessionResponse,
)
async def revoke_all_sessions(
    user_id: UUID,
    admin: CurrentUser = Depends(require_admin),
    uow: UnitOfWork = Depends(get_unit_of_work),
    client: ClientInfo = Depends(get_client_info),
):
    """
    Revoke All Sessions

    Useful after a suspected compromise of an administrator account.

    Raises:
        - 404 Not Found: User not found
    """
    result = await RevokeSessionsUseCase(uow).revoke_all_sessions(user_id, admin.id, client)
    if result.is_err():
        raise to_http_error(result.error)

    data = result.value
    return {
        "message": f"Successfully revoked {data['revoked_count']} session(s)",
        "revoked_count": data["revoked_count"],
    }
