import pytest
from httpx import AsyncClient

from tests.utils.api import bearer, create_user, fetch_user, login


@pytest.mark.asyncio
async def test_customer_lifecycle_from_registration_to_profile(
    client: AsyncClient, db_session, admin_token, test_data, notifier
):
    """Registration, verification, approval and first login

    Given a new customer registers
    When they try to log in before verifying
    Then login is refused with ACCOUNT_NOT_ACTIVATED
    And after verifying, login is refused with ACCOUNT_PENDING_APPROVAL
    And after an administrator approves, login succeeds
    And the profile never exposes the password hash
    """
    payload = test_data.registration("alice@example.com")

    response = await client.post("/register", json=payload)
    assert response.status_code == 201
    data = response.json()
    assert data["user"]["status"] == "pending_email_verification"
    assert "password_hash" not in data["user"]
    assert len(notifier.to("alice@example.com")) == 1

    response = await login(client, "alice@example.com")
    assert response.status_code == 403
    assert response.json()["error"]["code"] == "ACCOUNT_NOT_ACTIVATED"

    user = await fetch_user(db_session, "alice@example.com")
    token = user.email_verification_token
    assert token

    response = await client.get("/verify-email", params={"token": token})
    assert response.status_code == 200

    response = await login(client, "alice@example.com")
    assert response.status_code == 403
    assert response.json()["error"]["code"] == "ACCOUNT_PENDING_APPROVAL"

    user_id = data["user"]["id"]
    response = await client.post(f"/users/{user_id}/approve", headers=bearer(admin_token))
    assert response.status_code == 200
    assert response.json()["user"]["status"] == "active"

    response = await login(client, "alice@example.com")
    assert response.status_code == 200
    body = response.json()
    assert body["requires_2fa"] is False
    # Customers get a plain token without an admin session
    assert "session_id" not in body

    response = await client.get("/profile", headers=bearer(body["token"]))
    assert response.status_code == 200
    profile = response.json()
    assert profile["email"] == "alice@example.com"
    assert profile["company_country"] == "PL"
    assert "password_hash" not in profile


@pytest.mark.asyncio
async def test_verification_token_is_single_use(client: AsyncClient, db_session, test_data):
    """
    Given a registered user who has verified their email
    When the same verification link is opened again
    Then the request fails with 400 INVALID_TOKEN
    """
    await client.post("/register", json=test_data.registration("alice@example.com"))
    token = (await fetch_user(db_session, "alice@example.com")).email_verification_token

    first = await client.get("/verify-email", params={"token": token})
    second = await client.get("/verify-email", params={"token": token})

    assert first.status_code == 200
    assert second.status_code == 400
    assert second.json()["error"]["code"] == "INVALID_TOKEN"


@pytest.mark.asyncio
async def test_register_rejects_duplicate_email_case_insensitively(client: AsyncClient, test_data):
    """
    Given alice@example.com is registered
    When ALICE@example.com registers
    Then the request fails with EMAIL_ALREADY_EXISTS
    """
    assert (await client.post("/register", json=test_data.registration("alice@example.com"))).status_code == 201

    response = await client.post("/register", json=test_data.registration("ALICE@example.com"))

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "EMAIL_ALREADY_EXISTS"


@pytest.mark.asyncio
async def test_register_rejects_weak_password(client: AsyncClient, test_data):
    """
    Given a registration whose password has no digit or special character
    When it is submitted
    Then the request fails with 400 WEAK_PASSWORD listing what is missing
    """
    payload = test_data.registration("bob@example.com", password="onlyletters")

    response = await client.post("/register", json=payload)

    assert response.status_code == 400
    error = response.json()["error"]
    assert error["code"] == "WEAK_PASSWORD"
    assert error["details"]["password"]


@pytest.mark.asyncio
async def test_register_rejects_password_longer_than_bcrypt_accepts(client: AsyncClient, test_data):
    """
    Given a password meeting every character rule but 84 bytes long
    When it is submitted
    Then the request fails with 400 WEAK_PASSWORD instead of reaching bcrypt
    """
    payload = test_data.registration("bob@example.com", password="Aa1!" + "x" * 80)

    response = await client.post("/register", json=payload)

    assert response.status_code == 400
    error = response.json()["error"]
    assert error["code"] == "WEAK_PASSWORD"
    assert "at most 72 bytes" in error["details"]["password"]

    staged = await client.post("/register/staged", json=payload)
    assert staged.status_code == 400
    assert staged.json()["error"]["code"] == "WEAK_PASSWORD"


@pytest.mark.asyncio
async def test_register_rejects_postal_code_in_wrong_country_format(client: AsyncClient, test_data):
    """
    Given a Polish address with a German-style postal code
    When the registration is submitted
    Then the request fails with VALIDATION_ERROR naming postal_code
    """
    payload = test_data.registration("bob@example.com", postal_code="12345")

    response = await client.post("/register", json=payload)

    assert response.status_code == 400
    error = response.json()["error"]
    assert error["code"] == "VALIDATION_ERROR"
    assert "postal_code" in error["details"]


@pytest.mark.asyncio
async def test_blocked_user_cannot_log_in(client: AsyncClient, db_session, admin_token):
    """
    Given an active user is blocked by an administrator
    When the user logs in with the right password
    Then login is refused with ACCOUNT_BLOCKED
    And unblocking restores access
    """
    user_id = await create_user(db_session, "carol@example.com")

    response = await client.post(
        f"/users/{user_id}/block", json={"reason": "fraud review"}, headers=bearer(admin_token)
    )
    assert response.status_code == 200

    response = await login(client, "carol@example.com")
    assert response.status_code == 403
    assert response.json()["error"]["code"] == "ACCOUNT_BLOCKED"

    response = await client.post(f"/users/{user_id}/unblock", headers=bearer(admin_token))
    assert response.status_code == 200

    response = await login(client, "carol@example.com")
    assert response.status_code == 200
