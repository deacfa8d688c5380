import hashlib
from datetime import timedelta
from uuid import uuid4

import pytest

from src.app.use_cases.auth import (
    ConfirmPasswordResetUseCase,
    RegisterCommand,
    RegisterUseCase,
    RequestPasswordResetUseCase,
    ResendVerificationUseCase,
    VerifyEmailUseCase,
)
from src.app.use_cases.pending import AcceptPendingUserUseCase, SubmitStagedRegistrationUseCase
from src.domain.base import utc_now
from src.domain.entities import (
    PasswordResetToken,
    PendingUser,
    PendingUserStatus,
    User,
    UserRole,
    UserStatus,
)
from tests.fixtures.json_loader import TestDataLoader
from tests.utils.security_log import logged_event_types


def registration(email: str = "alice@example.com", **overrides) -> RegisterCommand:
    return RegisterCommand(**TestDataLoader.registration(email, **overrides))


def make_user(**overrides) -> User:
    fields = dict(
        id=uuid4(),
        email="alice@example.com",
        password_hash="unused",
        first_name="Alice",
        last_name="Nowak",
        role=UserRole.user,
        status=UserStatus.pending_email_verification,
    )
    fields.update(overrides)
    return User(**fields)


# ---------------------------------------------------------------------------
# Register
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_register_creates_pending_user(mock_uow, notifier, client_info):
    result = await RegisterUseCase(mock_uow, notifier).execute(
        registration(email="Alice@Example.com"), client_info
    )

    assert result.is_ok()
    created = mock_uow.users.create.call_args.args[0]
    assert created.email == "alice@example.com"
    assert created.status == UserStatus.pending_email_verification
    assert created.role == UserRole.user
    assert created.password_hash.startswith("$2b$12$")
    assert created.verify_password("Str0ng!Pass")
    assert len(created.email_verification_token) == 64
    ttl = created.email_verification_expires_at - utc_now()
    assert timedelta(hours=23) < ttl <= timedelta(hours=24)

    assert logged_event_types(mock_uow) == ["registration"]
    notification = notifier.send.call_args.args[0]
    assert created.email_verification_token in notification.body
    assert "password_hash" not in result.value.user.model_dump()


@pytest.mark.asyncio
async def test_register_rejects_weak_password(mock_uow, notifier, client_info):
    result = await RegisterUseCase(mock_uow, notifier).execute(
        registration(password="weakpass"), client_info
    )

    assert result.is_err()
    assert result.error.code == "WEAK_PASSWORD"
    mock_uow.users.create.assert_not_called()


@pytest.mark.asyncio
async def test_register_reports_field_errors(mock_uow, notifier, client_info):
    result = await RegisterUseCase(mock_uow, notifier).execute(
        registration(postal_code="12345", city=None), client_info
    )

    assert result.is_err()
    assert result.error.code == "VALIDATION_ERROR"
    assert set(result.error.details) == {"postal_code", "city"}


@pytest.mark.asyncio
async def test_register_duplicate_email(mock_uow, notifier, client_info):
    mock_uow.users.get_by_email.return_value = make_user()

    result = await RegisterUseCase(mock_uow, notifier).execute(registration(), client_info)

    assert result.is_err()
    assert result.error.code == "EMAIL_ALREADY_EXISTS"


@pytest.mark.asyncio
async def test_register_duplicate_tax_id(mock_uow, notifier, client_info):
    mock_uow.users.get_by_tax_id.return_value = make_user(email="other@example.com")
    command = RegisterCommand(**TestDataLoader.get_copy("company_registration"))

    result = await RegisterUseCase(mock_uow, notifier).execute(command, client_info)

    assert result.is_err()
    assert result.error.code == "TAX_ID_ALREADY_EXISTS"
    mock_uow.users.get_by_tax_id.assert_called_once_with("123456789")


@pytest.mark.asyncio
async def test_register_survives_notification_failure(mock_uow, notifier, client_info):
    notifier.send.side_effect = RuntimeError("smtp unavailable")

    result = await RegisterUseCase(mock_uow, notifier).execute(registration(), client_info)

    assert result.is_ok()
    mock_uow.commit.assert_called_once()


# ---------------------------------------------------------------------------
# Email verification
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_verify_email_moves_user_to_admin_approval(mock_uow, client_info):
    user = make_user(email_verification_token="a" * 64)
    mock_uow.users.get_by_valid_verification_token.return_value = user

    result = await VerifyEmailUseCase(mock_uow).execute("a" * 64, client_info)

    assert result.is_ok()
    assert user.email_verified is True
    assert user.status == UserStatus.pending_admin_approval
    assert user.email_verification_token is None
    assert logged_event_types(mock_uow) == ["email_verified"]


@pytest.mark.asyncio
async def test_verify_email_invalid_token(mock_uow, client_info):
    result = await VerifyEmailUseCase(mock_uow).execute("unknown", client_info)

    assert result.is_err()
    assert result.error.code == "INVALID_TOKEN"


@pytest.mark.asyncio
async def test_verify_email_empty_token(mock_uow, client_info):
    result = await VerifyEmailUseCase(mock_uow).execute("", client_info)

    assert result.is_err()
    assert result.error.code == "INVALID_TOKEN"
    mock_uow.users.get_by_valid_verification_token.assert_not_called()


@pytest.mark.asyncio
async def test_verify_email_for_staged_registration(mock_uow, client_info):
    pending = PendingUser(
        id=uuid4(),
        email="staged@example.com",
        password_hash="unused",
        first_name="Stan",
        last_name="Staged",
        email_verification_token="b" * 64,
        email_verification_expires_at=utc_now() + timedelta(hours=1),
    )
    mock_uow.pending_users.get_by_valid_verification_token.return_value = pending

    result = await VerifyEmailUseCase(mock_uow).execute("b" * 64, client_info)

    assert result.is_ok()
    assert pending.status == PendingUserStatus.pending_admin_approval
    assert pending.email_verification_token is None


@pytest.mark.asyncio
async def test_resend_verification_is_silent_for_unknown_email(mock_uow, notifier):
    result = await ResendVerificationUseCase(mock_uow, notifier).execute("ghost@example.com")

    assert result.is_ok()
    notifier.send.assert_not_called()


@pytest.mark.asyncio
async def test_resend_verification_reissues_token(mock_uow, notifier):
    user = make_user(email_verification_token="c" * 64)
    mock_uow.users.get_by_email.return_value = user

    result = await ResendVerificationUseCase(mock_uow, notifier).execute("alice@example.com")

    assert result.is_ok()
    assert user.email_verification_token != "c" * 64
    notifier.send.assert_called_once()


# ---------------------------------------------------------------------------
# Staged registration
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_staged_registration_creates_pending_user(mock_uow, notifier, client_info):
    result = await SubmitStagedRegistrationUseCase(mock_uow, notifier).execute(
        registration(), client_info
    )

    assert result.is_ok()
    pending = mock_uow.pending_users.create.call_args.args[0]
    assert pending.email == "alice@example.com"
    assert pending.status == PendingUserStatus.pending_email_verification
    mock_uow.users.create.assert_not_called()


@pytest.mark.asyncio
async def test_accept_requires_verified_staged_email(mock_uow, notifier, client_info):
    pending = PendingUser(
        id=uuid4(),
        email="staged@example.com",
        password_hash="unused",
        first_name="Stan",
        last_name="Staged",
    )
    mock_uow.pending_users.get_by_id.return_value = pending

    result = await AcceptPendingUserUseCase(mock_uow, notifier).execute(
        uuid4(), pending.id, client_info
    )

    assert result.is_err()
    assert result.error.code == "INVALID_STATE"


@pytest.mark.asyncio
async def test_accept_converts_to_active_user(mock_uow, notifier, client_info):
    pending = PendingUser(
        id=uuid4(),
        email="staged@example.com",
        password_hash="$2b$12$hash",
        first_name="Stan",
        last_name="Staged",
        city="Praha",
        status=PendingUserStatus.pending_admin_approval,
    )
    mock_uow.pending_users.get_by_id.return_value = pending

    result = await AcceptPendingUserUseCase(mock_uow, notifier).execute(
        uuid4(), pending.id, client_info
    )

    assert result.is_ok()
    user = mock_uow.users.create.call_args.args[0]
    assert user.status == UserStatus.active
    assert user.email_verified is True
    assert user.password_hash == "$2b$12$hash"
    assert user.city == "Praha"
    mock_uow.pending_users.delete.assert_called_once_with(pending)


# ---------------------------------------------------------------------------
# Password reset
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_password_reset_request_is_silent_for_unknown_email(mock_uow, notifier, client_info):
    result = await RequestPasswordResetUseCase(mock_uow, notifier).execute(
        "ghost@example.com", client_info
    )

    assert result.is_ok()
    mock_uow.password_reset_tokens.create.assert_not_called()
    notifier.send.assert_not_called()


@pytest.mark.asyncio
async def test_password_reset_request_stores_only_hash(mock_uow, notifier, client_info):
    user = make_user(status=UserStatus.active, email_verified=True)
    mock_uow.users.get_by_email.return_value = user

    result = await RequestPasswordResetUseCase(mock_uow, notifier).execute(
        "alice@example.com", client_info
    )

    assert result.is_ok()
    stored = mock_uow.password_reset_tokens.create.call_args.args[0]
    body = notifier.send.call_args.args[0].body
    plain = body.split("token=")[1].split()[0]
    assert stored.token_hash == hashlib.sha256(plain.encode()).hexdigest()
    mock_uow.password_reset_tokens.invalidate_all_for_user.assert_called_once()


@pytest.mark.asyncio
async def test_password_reset_confirm_sets_password_and_revokes_sessions(mock_uow, client_info):
    user = make_user(status=UserStatus.active, failed_login_attempts=5,
                     account_locked_until=utc_now() + timedelta(minutes=20))
    token = PasswordResetToken(
        user_id=user.id,
        token_hash=hashlib.sha256(b"reset-token").hexdigest(),
        expires_at=utc_now() + timedelta(minutes=30),
    )
    mock_uow.password_reset_tokens.get_by_hash.return_value = token
    mock_uow.users.get_by_id.return_value = user

    result = await ConfirmPasswordResetUseCase(mock_uow).execute(
        "reset-token", "N3w!Password", client_info
    )

    assert result.is_ok()
    assert user.verify_password("N3w!Password")
    assert user.account_locked_until is None
    assert token.used_at is not None
    mock_uow.admin_sessions.revoke_all_by_user_id.assert_called_once()


@pytest.mark.asyncio
async def test_password_reset_confirm_rejects_used_token(mock_uow, client_info):
    token = PasswordResetToken(
        user_id=uuid4(),
        token_hash=hashlib.sha256(b"reset-token").hexdigest(),
        used_at=utc_now() - timedelta(minutes=5),
        expires_at=utc_now() + timedelta(minutes=30),
    )
    mock_uow.password_reset_tokens.get_by_hash.return_value = token

    result = await ConfirmPasswordResetUseCase(mock_uow).execute(
        "reset-token", "N3w!Password", client_info
    )

    assert result.is_err()
    assert result.error.code == "INVALID_TOKEN"


@pytest.mark.asyncio
async def test_password_reset_confirm_rejects_expired_token(mock_uow, client_info):
    token, secret = PasswordResetToken.issue(uuid4(), timedelta(minutes=60), utc_now() - timedelta(hours=2))
    mock_uow.password_reset_tokens.get_by_hash.return_value = token

    result = await ConfirmPasswordResetUseCase(mock_uow).execute(secret, "N3w!Password", client_info)

    assert result.is_err()
    assert result.error.code == "INVALID_TOKEN"
    mock_uow.users.get_by_id.assert_not_called()
