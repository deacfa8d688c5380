from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, EmailStr, Field

from config import ApplicationConfig
from src.api.error import to_http_error
from src.api.utils.rate_limit import rate_limit
from src.app.services.auth_policy import AuthPolicy
from src.app.services.notification import INotificationSink
from src.app.services.security_audit import ClientInfo
from src.app.services.suspicious_activity import SuspiciousActivityMonitor
from src.app.services.token_authority import TokenAuthority
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.access import CurrentUser
from src.app.use_cases.auth import (
    ConfirmPasswordResetUseCase,
    LoginResponse,
    LoginUseCase,
    LogoutUseCase,
    MessageResponse,
    RegisterCommand,
    RegisterResponse,
    RegisterUseCase,
    RequestPasswordResetUseCase,
    ResendVerificationUseCase,
    TwoFactorEnrollmentUseCase,
    TwoFactorSetupResponse,
    TwoFactorStatusResponse,
    VerifyEmailUseCase,
    VerifyTwoFactorUseCase,
)
from src.app.use_cases.pending import SubmitStagedRegistrationUseCase
from src.depends import (
    get_activity_monitor,
    get_bearer_token,
    get_client_info,
    get_current_user,
    get_notifier,
    get_token_authority,
    get_unit_of_work,
)

router = APIRouter(tags=["Authentication"])


def get_auth_policy() -> AuthPolicy:
    return AuthPolicy.from_config(ApplicationConfig)


class LoginRequest(BaseModel):
    """
    Login HTTP request payload

    Validates incoming login request.
    """

    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., min_length=1, description="User password")
    remember_me: bool = Field(False, description="Extend administrator session lifetime")


class TwoFactorVerifyRequest(BaseModel):
    temp_token: Optional[str] = Field(
        None, description="Intermediate token returned by /login; defaults to the bearer token"
    )
    code: str = Field(..., min_length=6, max_length=8, description="TOTP code")


class TwoFactorCodeRequest(BaseModel):
    code: str = Field(..., min_length=6, max_length=8, description="TOTP code")


class EmailRequest(BaseModel):
    email: EmailStr = Field(..., description="User email address")


class ConfirmPasswordResetRequest(BaseModel):
    token: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=1)


@router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    response_model=RegisterResponse,
    dependencies=[Depends(rate_limit("register"))],
)
async def register(
    request: RegisterCommand,
    uow: UnitOfWork = Depends(get_unit_of_work),
    notifier: INotificationSink = Depends(get_notifier),
    client: ClientInfo = Depends(get_client_info),
    policy: AuthPolicy = Depends(get_auth_policy),
):
    """
    Register a customer account.

    The account starts in pending_email_verification; a verification link is
    sent by email (best-effort).

    Raises:
        - 400 Bad Request: Validation error, weak password, duplicate email or tax id
        - 429 Too Many Requests: Registration rate limit
    """
    result = await RegisterUseCase(uow, notifier, policy).execute(request, client)
    if result.is_err():
        raise to_http_error(result.error)
    return result.value


@router.post(
    "/register/staged",
    status_code=status.HTTP_201_CREATED,
    response_model=MessageResponse,
    dependencies=[Depends(rate_limit("register"))],
)
async def register_staged(
    request: RegisterCommand,
    uow: UnitOfWork = Depends(get_unit_of_work),
    notifier: INotificationSink = Depends(get_notifier),
    client: ClientInfo = Depends(get_client_info),
    policy: AuthPolicy = Depends(get_auth_policy),
):
    """Staged registration: stored as a pending user until an admin accepts it."""
    result = await SubmitStagedRegistrationUseCase(uow, notifier, policy).execute(request, client)
    if result.is_err():
        raise to_http_error(result.error)
    return result.value


@router.get("/verify-email", status_code=status.HTTP_200_OK, response_model=MessageResponse)
async def verify_email(
    token: str = Query("", description="Verification token from the email link"),
    uow: UnitOfWork = Depends(get_unit_of_work),
    client: ClientInfo = Depends(get_client_info),
):
    """
    Verify Email

    Raises:
        - 400 Bad Request: Invalid or expired token (indistinguishable)
    """
    result = await VerifyEmailUseCase(uow).execute(token, client)
    if result.is_err():
        raise to_http_error(result.error)
    return result.value


@router.post(
    "/resend-verification",
    status_code=status.HTTP_200_OK,
    response_model=MessageResponse,
    dependencies=[Depends(rate_limit("register"))],
)
async def resend_verification(
    request: EmailRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
    notifier: INotificationSink = Depends(get_notifier),
    policy: AuthPolicy = Depends(get_auth_policy),
):
    """Always answers the same way, whether or not the email is known."""
    result = await ResendVerificationUseCase(uow, notifier, policy).execute(request.email)
    if result.is_err():
        raise to_http_error(result.error)
    return result.value


@router.post(
    "/login",
    status_code=status.HTTP_200_OK,
    response_model=LoginResponse,
    response_model_exclude_none=True,
    dependencies=[Depends(rate_limit("login"))],
)
async def login(
    request: LoginRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
    tokens: TokenAuthority = Depends(get_token_authority),
    monitor: SuspiciousActivityMonitor = Depends(get_activity_monitor),
    client: ClientInfo = Depends(get_client_info),
    policy: AuthPolicy = Depends(get_auth_policy),
):
    """
    User Login

    Returns a bearer token, or requires_2fa with an intermediate token when
    two-factor authentication is enabled.

    Raises:
        - 401 Unauthorized: Invalid email or password
        - 403 Forbidden: Account not activated, pending approval or blocked
        - 423 Locked: Too many failed attempts
        - 429 Too Many Requests: Login rate limit
    """
    use_case = LoginUseCase(uow, tokens, monitor, policy)
    result = await use_case.execute(request.email, request.password, client, request.remember_me)
    if result.is_err():
        raise to_http_error(result.error)
    return result.value


@router.post(
    "/2fa/verify",
    status_code=status.HTTP_200_OK,
    response_model=LoginResponse,
    response_model_exclude_none=True,
    dependencies=[Depends(rate_limit("login"))],
)
async def verify_two_factor(
    request: TwoFactorVerifyRequest,
    bearer_token: Optional[str] = Depends(get_bearer_token),
    uow: UnitOfWork = Depends(get_unit_of_work),
    tokens: TokenAuthority = Depends(get_token_authority),
    monitor: SuspiciousActivityMonitor = Depends(get_activity_monitor),
    client: ClientInfo = Depends(get_client_info),
    policy: AuthPolicy = Depends(get_auth_policy),
):
    """
    Complete a login with a TOTP code.

    Raises:
        - 401 Unauthorized: Any failure (token or code), deliberately generic
    """
    use_case = VerifyTwoFactorUseCase(uow, tokens, monitor, policy)
    temp_token = request.temp_token or bearer_token or ""
    result = await use_case.execute(temp_token, request.code, client)
    if result.is_err():
        raise to_http_error(result.error)
    return result.value


@router.post("/2fa/setup", status_code=status.HTTP_200_OK, response_model=TwoFactorSetupResponse)
async def setup_two_factor(
    current_user: CurrentUser = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
    client: ClientInfo = Depends(get_client_info),
    policy: AuthPolicy = Depends(get_auth_policy),
):
    result = await TwoFactorEnrollmentUseCase(uow, policy.totp_issuer).setup(current_user.id, client)
    if result.is_err():
        raise to_http_error(result.error)
    return result.value


@router.post("/2fa/confirm", status_code=status.HTTP_200_OK, response_model=MessageResponse)
async def confirm_two_factor(
    request: TwoFactorCodeRequest,
    current_user: CurrentUser = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
    client: ClientInfo = Depends(get_client_info),
):
    result = await TwoFactorEnrollmentUseCase(uow).confirm(current_user.id, request.code, client)
    if result.is_err():
        raise to_http_error(result.error)
    return result.value


@router.post("/2fa/disable", status_code=status.HTTP_200_OK, response_model=MessageResponse)
async def disable_two_factor(
    request: TwoFactorCodeRequest,
    current_user: CurrentUser = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
    client: ClientInfo = Depends(get_client_info),
):
    result = await TwoFactorEnrollmentUseCase(uow).disable(current_user.id, request.code, client)
    if result.is_err():
        raise to_http_error(result.error)
    return result.value


@router.get("/2fa/status", status_code=status.HTTP_200_OK, response_model=TwoFactorStatusResponse)
async def two_factor_status(
    current_user: CurrentUser = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    result = await TwoFactorEnrollmentUseCase(uow).status(current_user.id)
    if result.is_err():
        raise to_http_error(result.error)
    return result.value


@router.post("/logout", status_code=status.HTTP_200_OK, response_model=MessageResponse)
async def logout(
    current_user: CurrentUser = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
    tokens: TokenAuthority = Depends(get_token_authority),
    client: ClientInfo = Depends(get_client_info),
):
    """Denylist the presented token and revoke its admin session, if any."""
    result = await LogoutUseCase(uow, tokens).execute(
        current_user.id, current_user.token, current_user.session_id, client
    )
    if result.is_err():
        raise to_http_error(result.error)
    return result.value


@router.post(
    "/password-reset/request",
    status_code=status.HTTP_200_OK,
    response_model=MessageResponse,
    dependencies=[Depends(rate_limit("password_reset"))],
)
async def request_password_reset(
    request: EmailRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
    notifier: INotificationSink = Depends(get_notifier),
    client: ClientInfo = Depends(get_client_info),
    policy: AuthPolicy = Depends(get_auth_policy),
):
    """Always answers the same way, whether or not the email is known."""
    result = await RequestPasswordResetUseCase(uow, notifier, policy).execute(request.email, client)
    if result.is_err():
        raise to_http_error(result.error)
    return result.value


@router.post(
    "/password-reset/confirm",
    status_code=status.HTTP_200_OK,
    response_model=MessageResponse,
    dependencies=[Depends(rate_limit("password_reset"))],
)
async def confirm_password_reset(
    request: ConfirmPasswordResetRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
    client: ClientInfo = Depends(get_client_info),
):
    """
    Raises:
        - 400 Bad Request: Weak password, or invalid/expired/used token
    """
    result = await ConfirmPasswordResetUseCase(uow).execute(
        request.token, request.new_password, client
    )
    if result.is_err():
        raise to_http_error(result.error)
    return result.value
