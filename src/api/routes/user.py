from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from src.api.error import to_http_error
from src.app.services.security_audit import ClientInfo
from src.app.services.token_authority import TokenAuthority
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.access import CurrentUser
from src.app.use_cases.users import (
    DeleteAccountUseCase,
    GetProfileUseCase,
    UserActionResponse,
    UserProfile,
)
from src.depends import get_client_info, get_current_user, get_token_authority, get_unit_of_work

router = APIRouter(tags=["User"])


class DeleteAccountRequest(BaseModel):
    password: str = Field(..., min_length=1, description="Current password")


@router.get("/profile", status_code=status.HTTP_200_OK, response_model=UserProfile)
async def get_profile(
    current_user: CurrentUser = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Current user's profile (no password hash, tokens or secrets).

    Raises:
        - 401 Unauthorized: Invalid, expired or revoked token
    """
    result = await GetProfileUseCase(uow).execute(current_user.id)
    if result.is_err():
        raise to_http_error(result.error)
    return result.value


@router.delete("/profile", status_code=status.HTTP_200_OK, response_model=UserActionResponse)
async def delete_profile(
    request: DeleteAccountRequest,
    current_user: CurrentUser = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
    tokens: TokenAuthority = Depends(get_token_authority),
    client: ClientInfo = Depends(get_client_info),
):
    """Self-service deletion: anonymizes the account and ends the current token."""
    result = await DeleteAccountUseCase(uow, tokens).execute(
        current_user.id, request.password, current_user.token, client
    )
    if result.is_err():
        raise to_http_error(result.error)
    return result.value
