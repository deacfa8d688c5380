import pytest
from unittest.mock import AsyncMock, MagicMock

from src.adapter.services.token_denylist import InMemoryTokenDenylist
from src.app.services.security_audit import ClientInfo
from src.app.services.token_authority import TokenAuthority


@pytest.fixture
def mock_uow():
    """Mock UnitOfWork with all repositories"""
    uow = MagicMock()
    uow.__aenter__ = AsyncMock(return_value=uow)
    uow.__aexit__ = AsyncMock(return_value=False)  # Must return False to not suppress exceptions
    uow.commit = AsyncMock()
    uow.rollback = AsyncMock()

    uow.users = MagicMock()
    uow.users.get_by_email = AsyncMock(return_value=None)
    uow.users.get_by_id = AsyncMock(return_value=None)
    uow.users.get_by_tax_id = AsyncMock(return_value=None)
    uow.users.get_by_valid_verification_token = AsyncMock(return_value=None)
    uow.users.create = AsyncMock(side_effect=lambda user: user)
    uow.users.update = AsyncMock(side_effect=lambda user: user)
    uow.users.delete = AsyncMock()
    uow.users.register_failed_login = AsyncMock(return_value=(1, None))

    uow.admin_sessions = MagicMock()
    uow.admin_sessions.create = AsyncMock(side_effect=lambda session: session)
    uow.admin_sessions.get_by_id = AsyncMock(return_value=None)
    uow.admin_sessions.get_active = AsyncMock(return_value=None)
    uow.admin_sessions.touch = AsyncMock()
    uow.admin_sessions.revoke = AsyncMock(return_value=True)
    uow.admin_sessions.revoke_all_by_user_id = AsyncMock(return_value=0)
    uow.admin_sessions.list_active_by_user_id = AsyncMock(return_value=[])

    uow.security_logs = MagicMock()
    uow.security_logs.create = AsyncMock(side_effect=lambda entry: entry)
    uow.security_logs.count_recent = AsyncMock(return_value=0)
    uow.security_logs.get_recent = AsyncMock(return_value=[])

    uow.pending_users = MagicMock()
    uow.pending_users.get_by_email = AsyncMock(return_value=None)
    uow.pending_users.get_by_id = AsyncMock(return_value=None)
    uow.pending_users.get_by_valid_verification_token = AsyncMock(return_value=None)
    uow.pending_users.create = AsyncMock(side_effect=lambda pending: pending)
    uow.pending_users.update = AsyncMock(side_effect=lambda pending: pending)
    uow.pending_users.delete = AsyncMock()

    uow.password_reset_tokens = MagicMock()
    uow.password_reset_tokens.create = AsyncMock(side_effect=lambda token: token)
    uow.password_reset_tokens.update = AsyncMock(side_effect=lambda token: token)
    uow.password_reset_tokens.get_by_hash = AsyncMock(return_value=None)
    uow.password_reset_tokens.invalidate_all_for_user = AsyncMock()
    return uow


@pytest.fixture
def tokens():
    return TokenAuthority("unit-test-secret", InMemoryTokenDenylist())


@pytest.fixture
def monitor():
    monitor = MagicMock()
    monitor.inspect = AsyncMock(return_value=[])
    return monitor


@pytest.fixture
def notifier():
    notifier = MagicMock()
    notifier.send = AsyncMock()
    return notifier


@pytest.fixture
def client_info():
    return ClientInfo(ip_address="203.0.113.7", user_agent="pytest")
