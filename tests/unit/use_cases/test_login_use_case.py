from datetime import timedelta
from uuid import uuid4

import pytest

from src.app.services.auth_policy import AuthPolicy
from src.app.use_cases.auth.login_use_case import INVALID_CREDENTIALS_MESSAGE, LoginUseCase
from src.domain.base import utc_now
from src.domain.entities import User, UserRole, UserStatus
from src.domain.entities.user import hash_password
from tests.utils.security_log import logged_event_types

PASSWORD = "Str0ng!Pass"
PASSWORD_HASH = hash_password(PASSWORD)


def make_user(**overrides) -> User:
    fields = dict(
        id=uuid4(),
        email="user@example.com",
        password_hash=PASSWORD_HASH,
        first_name="Anna",
        last_name="Kowalska",
        role=UserRole.user,
        status=UserStatus.active,
        email_verified=True,
    )
    fields.update(overrides)
    return User(**fields)


@pytest.mark.asyncio
async def test_successful_login(mock_uow, tokens, monitor, client_info):
    """Active, verified user without 2FA receives a final token and no session"""
    user = make_user(failed_login_attempts=3)
    mock_uow.users.get_by_email.return_value = user

    result = await LoginUseCase(mock_uow, tokens, monitor).execute(
        "User@Example.com ", PASSWORD, client_info
    )

    assert result.is_ok()
    data = result.value
    assert data.requires_2fa is False
    assert data.token
    assert data.session_id is None
    assert data.expires_in == 24 * 3600
    assert data.user.email == "user@example.com"

    claims = await tokens.verify(data.token)
    assert claims["id"] == str(user.id)
    assert claims["role"] == "user"
    assert "sessionId" not in claims

    assert user.failed_login_attempts == 0
    assert user.last_login_at is not None
    mock_uow.users.get_by_email.assert_called_once_with("user@example.com")
    mock_uow.admin_sessions.create.assert_not_called()
    assert logged_event_types(mock_uow) == ["login_success"]
    mock_uow.commit.assert_called()


@pytest.mark.asyncio
async def test_admin_login_opens_session(mock_uow, tokens, monitor, client_info):
    """Administrator tokens are bound to a freshly created AdminSession"""
    admin = make_user(email="admin@example.com", role=UserRole.admin)
    mock_uow.users.get_by_email.return_value = admin

    result = await LoginUseCase(mock_uow, tokens, monitor).execute(
        "admin@example.com", PASSWORD, client_info
    )

    assert result.is_ok()
    data = result.value
    mock_uow.admin_sessions.create.assert_called_once()
    session = mock_uow.admin_sessions.create.call_args.args[0]
    assert session.user_id == admin.id
    assert session.ip_address == "203.0.113.7"
    assert data.session_id == session.id
    assert data.expires_in == 8 * 3600

    claims = await tokens.verify(data.token)
    assert claims["sessionId"] == session.id
    monitor.inspect.assert_called_once()


@pytest.mark.asyncio
async def test_admin_remember_me_extends_session(mock_uow, tokens, monitor, client_info):
    admin = make_user(role=UserRole.admin)
    mock_uow.users.get_by_email.return_value = admin

    result = await LoginUseCase(mock_uow, tokens, monitor).execute(
        "user@example.com", PASSWORD, client_info, remember_me=True
    )

    assert result.is_ok()
    session = mock_uow.admin_sessions.create.call_args.args[0]
    assert session.expires_at - session.created_at == timedelta(days=7)


@pytest.mark.asyncio
async def test_unknown_email_returns_generic_error(mock_uow, tokens, monitor, client_info):
    """Unknown email and wrong password are indistinguishable to the caller"""
    mock_uow.users.get_by_email.return_value = None

    result = await LoginUseCase(mock_uow, tokens, monitor).execute(
        "ghost@example.com", PASSWORD, client_info
    )

    assert result.is_err()
    assert result.error.code == "INVALID_CREDENTIALS"
    assert result.error.message == INVALID_CREDENTIALS_MESSAGE
    assert logged_event_types(mock_uow) == ["login_failure"]
    monitor.inspect.assert_called_once()
    mock_uow.commit.assert_called_once()


@pytest.mark.asyncio
async def test_wrong_password_returns_same_error_as_unknown_email(
    mock_uow, tokens, monitor, client_info
):
    user = make_user()
    mock_uow.users.get_by_email.return_value = user
    mock_uow.users.register_failed_login.return_value = (1, None)

    result = await LoginUseCase(mock_uow, tokens, monitor).execute(
        "user@example.com", "Wr0ng!Pass", client_info
    )

    assert result.is_err()
    assert result.error.code == "INVALID_CREDENTIALS"
    assert result.error.message == INVALID_CREDENTIALS_MESSAGE
    mock_uow.users.register_failed_login.assert_called_once()
    args = mock_uow.users.register_failed_login.call_args.args
    assert args[0] == user.id
    assert args[1] == 5
    assert logged_event_types(mock_uow) == ["login_failure"]


@pytest.mark.asyncio
async def test_fifth_failure_locks_account(mock_uow, tokens, monitor, client_info):
    """Reaching the threshold records an account_locked entry in addition to the failure"""
    user = make_user()
    mock_uow.users.get_by_email.return_value = user
    mock_uow.users.register_failed_login.return_value = (5, utc_now() + timedelta(minutes=30))

    result = await LoginUseCase(mock_uow, tokens, monitor).execute(
        "user@example.com", "Wr0ng!Pass", client_info
    )

    assert result.is_err()
    assert result.error.code == "INVALID_CREDENTIALS"
    assert logged_event_types(mock_uow) == ["account_locked", "login_failure"]


@pytest.mark.asyncio
async def test_locked_account_rejected_before_password_check(
    mock_uow, tokens, monitor, client_info
):
    """A locked account reports ACCOUNT_LOCKED even with the correct password"""
    user = make_user(failed_login_attempts=5, account_locked_until=utc_now() + timedelta(minutes=10))
    mock_uow.users.get_by_email.return_value = user

    result = await LoginUseCase(mock_uow, tokens, monitor).execute(
        "user@example.com", PASSWORD, client_info
    )

    assert result.is_err()
    assert result.error.code == "ACCOUNT_LOCKED"
    assert "locked_until" in result.error.details
    mock_uow.users.register_failed_login.assert_not_called()
    entry = mock_uow.security_logs.create.call_args.args[0]
    assert entry.event_type == "login_failure"
    assert entry.outcome == "locked"


@pytest.mark.asyncio
async def test_expired_lock_is_cleared_before_password_check(
    mock_uow, tokens, monitor, client_info
):
    user = make_user(failed_login_attempts=5, account_locked_until=utc_now() - timedelta(minutes=1))
    mock_uow.users.get_by_email.return_value = user

    result = await LoginUseCase(mock_uow, tokens, monitor).execute(
        "user@example.com", PASSWORD, client_info
    )

    assert result.is_ok()
    assert user.failed_login_attempts == 0
    assert user.account_locked_until is None


@pytest.mark.asyncio
async def test_expired_lock_then_wrong_password_counts_from_zero(
    mock_uow, tokens, monitor, client_info
):
    user = make_user(failed_login_attempts=5, account_locked_until=utc_now() - timedelta(minutes=1))
    mock_uow.users.get_by_email.return_value = user
    mock_uow.users.register_failed_login.return_value = (1, None)

    result = await LoginUseCase(mock_uow, tokens, monitor).execute(
        "user@example.com", "Wr0ng!Pass", client_info
    )

    assert result.is_err()
    assert result.error.code == "INVALID_CREDENTIALS"
    # Counter was reset and persisted before the atomic increment
    assert user.failed_login_attempts == 0
    mock_uow.users.update.assert_called()
    mock_uow.users.register_failed_login.assert_called_once()


@pytest.mark.asyncio
async def test_unverified_email_rejected(mock_uow, tokens, monitor, client_info):
    user = make_user(email_verified=False, status=UserStatus.pending_email_verification)
    mock_uow.users.get_by_email.return_value = user

    result = await LoginUseCase(mock_uow, tokens, monitor).execute(
        "user@example.com", PASSWORD, client_info
    )

    assert result.is_err()
    assert result.error.code == "ACCOUNT_NOT_ACTIVATED"
    assert "not activated" in result.error.message.lower()


@pytest.mark.asyncio
async def test_pending_approval_rejected(mock_uow, tokens, monitor, client_info):
    user = make_user(status=UserStatus.pending_admin_approval)
    mock_uow.users.get_by_email.return_value = user

    result = await LoginUseCase(mock_uow, tokens, monitor).execute(
        "user@example.com", PASSWORD, client_info
    )

    assert result.is_err()
    assert result.error.code == "ACCOUNT_PENDING_APPROVAL"
    assert "pending approval" in result.error.message.lower()


@pytest.mark.asyncio
async def test_blocked_user_rejected(mock_uow, tokens, monitor, client_info):
    user = make_user(status=UserStatus.inactive)
    mock_uow.users.get_by_email.return_value = user

    result = await LoginUseCase(mock_uow, tokens, monitor).execute(
        "user@example.com", PASSWORD, client_info
    )

    assert result.is_err()
    assert result.error.code == "ACCOUNT_BLOCKED"


@pytest.mark.asyncio
async def test_two_factor_user_receives_intermediate_token(
    mock_uow, tokens, monitor, client_info
):
    user = make_user(role=UserRole.admin, two_factor_secret="JBSWY3DPEHPK3PXP")
    mock_uow.users.get_by_email.return_value = user

    result = await LoginUseCase(mock_uow, tokens, monitor).execute(
        "user@example.com", PASSWORD, client_info, remember_me=True
    )

    assert result.is_ok()
    data = result.value
    assert data.requires_2fa is True
    assert data.token is None
    assert data.temp_token

    claims = await tokens.verify(data.temp_token)
    assert claims["temp"] is True
    assert claims["rememberMe"] is True
    # No session before the second factor
    mock_uow.admin_sessions.create.assert_not_called()
    entry = mock_uow.security_logs.create.call_args.args[0]
    assert entry.outcome == "pending_2fa"


@pytest.mark.asyncio
async def test_custom_lockout_policy(mock_uow, tokens, monitor, client_info):
    user = make_user()
    mock_uow.users.get_by_email.return_value = user
    policy = AuthPolicy(lockout_threshold=3, lockout_minutes=5)

    await LoginUseCase(mock_uow, tokens, monitor, policy).execute(
        "user@example.com", "Wr0ng!Pass", client_info
    )

    user_id, threshold, lock_until = mock_uow.users.register_failed_login.call_args.args
    assert threshold == 3
    assert timedelta(minutes=4) < lock_until - utc_now() <= timedelta(minutes=5)
