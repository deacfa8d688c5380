import pytest
from httpx import AsyncClient

from src.domain.entities import UserRole
from tests.utils.api import bearer, create_user, login, security_events
from tests.utils.totp import current_code, wrong_code


async def _enable_two_factor(client: AsyncClient, token: str) -> str:
    setup = await client.post("/2fa/setup", headers=bearer(token))
    assert setup.status_code == 200
    secret = setup.json()["secret"]
    confirm = await client.post("/2fa/confirm", json={"code": current_code(secret)}, headers=bearer(token))
    assert confirm.status_code == 200
    return secret


@pytest.mark.asyncio
async def test_two_factor_enrollment_and_login(client: AsyncClient, db_session):
    """End-to-end second factor

    Given an active administrator starts two-factor setup
    When they confirm with a wrong code the setup stays pending
    And when they confirm with the current code two-factor is enabled
    Then the next login asks for a code and returns an intermediate token
    And the intermediate token cannot be used as a bearer token
    And exchanging it with the current code yields a working session token
    And the intermediate token cannot be replayed
    """
    await create_user(db_session, "quinn@example.com", role=UserRole.admin)
    token = (await login(client, "quinn@example.com")).json()["token"]

    setup = await client.post("/2fa/setup", headers=bearer(token))
    assert setup.status_code == 200
    secret = setup.json()["secret"]
    assert setup.json()["provisioning_uri"].startswith("otpauth://totp/")

    response = await client.post("/2fa/confirm", json={"code": wrong_code(secret)}, headers=bearer(token))
    assert response.status_code == 401
    assert response.json()["error"]["code"] == "INVALID_TWO_FACTOR"

    status = (await client.get("/2fa/status", headers=bearer(token))).json()
    assert status == {"enabled": False, "pending_setup": True}

    response = await client.post("/2fa/confirm", json={"code": current_code(secret)}, headers=bearer(token))
    assert response.status_code == 200

    response = await login(client, "quinn@example.com")
    assert response.status_code == 200
    body = response.json()
    assert body["requires_2fa"] is True
    assert "token" not in body
    temp_token = body["temp_token"]

    assert (await client.get("/profile", headers=bearer(temp_token))).status_code == 401

    response = await client.post("/2fa/verify", json={"temp_token": temp_token, "code": current_code(secret)})
    assert response.status_code == 200
    verified = response.json()
    assert verified["session_id"]

    profile = await client.get("/profile", headers=bearer(verified["token"]))
    assert profile.status_code == 200
    assert profile.json()["two_factor_enabled"] is True

    replay = await client.post("/2fa/verify", json={"temp_token": temp_token, "code": current_code(secret)})
    assert replay.status_code == 401
    assert replay.json()["error"]["code"] == "INVALID_TWO_FACTOR"


@pytest.mark.asyncio
async def test_two_factor_verify_accepts_bearer_header(client: AsyncClient, db_session):
    """
    Given a user with two-factor enabled has an intermediate token
    When /2fa/verify is called with the token in the Authorization header
    Then the final token is issued
    """
    await create_user(db_session, "rita@example.com")
    token = (await login(client, "rita@example.com")).json()["token"]
    secret = await _enable_two_factor(client, token)

    temp_token = (await login(client, "rita@example.com")).json()["temp_token"]
    response = await client.post(
        "/2fa/verify", json={"code": current_code(secret)}, headers=bearer(temp_token)
    )

    assert response.status_code == 200
    assert response.json()["token"]


@pytest.mark.asyncio
async def test_wrong_two_factor_code_is_logged(client: AsyncClient, db_session):
    """
    Given a user with two-factor enabled
    When the second step is attempted with a wrong code
    Then it fails with 401 and a two_factor_failure entry is logged
    """
    await create_user(db_session, "sam@example.com")
    token = (await login(client, "sam@example.com")).json()["token"]
    secret = await _enable_two_factor(client, token)
    temp_token = (await login(client, "sam@example.com")).json()["temp_token"]

    response = await client.post("/2fa/verify", json={"temp_token": temp_token, "code": wrong_code(secret)})

    assert response.status_code == 401
    failures = await security_events(db_session, "two_factor_failure")
    assert failures[-1].details["reason"] == "wrong_code"


@pytest.mark.asyncio
async def test_disable_two_factor_requires_valid_code(client: AsyncClient, db_session):
    """
    Given a user with two-factor enabled
    When they disable it with a wrong code, then with the current code
    Then the first attempt fails and the second turns two-factor off
    And the next login issues a final token directly
    """
    await create_user(db_session, "tom@example.com")
    token = (await login(client, "tom@example.com")).json()["token"]
    secret = await _enable_two_factor(client, token)

    response = await client.post("/2fa/disable", json={"code": wrong_code(secret)}, headers=bearer(token))
    assert response.status_code == 401

    response = await client.post("/2fa/disable", json={"code": current_code(secret)}, headers=bearer(token))
    assert response.status_code == 200

    body = (await login(client, "tom@example.com")).json()
    assert body["requires_2fa"] is False
    assert body["token"]


@pytest.mark.asyncio
async def test_setup_rejected_when_already_enabled(client: AsyncClient, db_session):
    await create_user(db_session, "uma@example.com")
    token = (await login(client, "uma@example.com")).json()["token"]
    await _enable_two_factor(client, token)

    response = await client.post("/2fa/setup", headers=bearer(token))

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "TWO_FACTOR_ALREADY_ENABLED"
