import asyncio
from datetime import timedelta
from uuid import uuid4

import pytest
from jose import jwt

from src.adapter.services.token_denylist import InMemoryTokenDenylist
from src.app.services.token_authority import TokenAuthority
from src.domain.entities import User, UserRole


def make_user(role=UserRole.user) -> User:
    return User(
        id=uuid4(), email="claims@example.com", password_hash="x",
        first_name="Cla", last_name="Ims", role=role,
    )


def test_missing_secret_is_a_startup_error():
    with pytest.raises(RuntimeError):
        TokenAuthority("", InMemoryTokenDenylist())


@pytest.mark.asyncio
async def test_access_token_claims(tokens):
    user = make_user(UserRole.admin)

    token = tokens.issue_access_token(user, timedelta(hours=8), session_id="abc")
    claims = await tokens.verify(token)

    assert claims["id"] == str(user.id)
    assert claims["email"] == "claims@example.com"
    assert claims["role"] == "admin"
    assert claims["sessionId"] == "abc"
    assert claims["exp"] - claims["iat"] == 8 * 3600


@pytest.mark.asyncio
async def test_foreign_signature_is_rejected(tokens):
    forged = jwt.encode({"id": str(uuid4()), "role": "admin"}, "other-secret", algorithm="HS256")

    assert await tokens.verify(forged) is None
    assert tokens.decode("garbage") is None


@pytest.mark.asyncio
async def test_expired_token_is_rejected(tokens):
    token = tokens.issue_access_token(make_user(), timedelta(seconds=-1))

    assert await tokens.verify(token) is None


@pytest.mark.asyncio
async def test_invalidate_denylists_until_expiry(tokens):
    token = tokens.issue_access_token(make_user(), timedelta(hours=1))
    other = tokens.issue_access_token(make_user(), timedelta(hours=1))

    await tokens.invalidate(token)

    assert await tokens.verify(token) is None
    assert await tokens.verify(other) is not None
    # Signature is still valid; only the denylist rejects it
    assert tokens.decode(token) is not None


@pytest.mark.asyncio
async def test_invalidating_garbage_is_a_noop(tokens):
    await tokens.invalidate("not-a-token")

    assert len(tokens.denylist) == 0


@pytest.mark.asyncio
async def test_denylist_entries_expire():
    denylist = InMemoryTokenDenylist()

    await denylist.add("short-lived", 1)
    assert await denylist.contains("short-lived") is True

    await asyncio.sleep(1.1)
    assert await denylist.contains("short-lived") is False
    assert len(denylist) == 0
