"""
Tests for the bearer-token gate and the /api/auth routes
"""
from datetime import timedelta

import pytest

from auth import authenticate_header
from auth_utils import create_jwt, verify_token
from backend.utils.responses import INVALID_TOKEN, MISSING_TOKEN
from models.user import Identity
from tests.conftest import T0, TEST_SECRET
from utils.shared_utils import utcnow


@pytest.mark.parametrize("header", [None, "", "Bearer", "Bearer ", "Basic dXNlcjpwYXNz", "Token abc.def.ghi"])
def test_missing_or_malformed_header_is_missing_token(header):
    result = authenticate_header(header, TEST_SECRET, now=T0)

    assert result["is_error"] is True
    assert result["error"] == MISSING_TOKEN


def test_unverifiable_token_is_invalid_token():
    result = authenticate_header("Bearer not.a.token", TEST_SECRET, now=T0)

    assert result["is_error"] is True
    assert result["error"] == INVALID_TOKEN


def test_expired_and_forged_tokens_report_the_same_message():
    expired = create_jwt("u1", "a@x.com", TEST_SECRET, ttl=timedelta(hours=1), now=T0)
    forged = create_jwt("u1", "a@x.com", "some-other-secret", ttl=timedelta(days=7), now=T0)

    expired_result = authenticate_header(f"Bearer {expired}", TEST_SECRET, now=T0 + timedelta(hours=2))
    forged_result = authenticate_header(f"Bearer {forged}", TEST_SECRET, now=T0)

    assert expired_result == forged_result
    assert expired_result["error"] == INVALID_TOKEN


def test_valid_token_resolves_identity():
    token = create_jwt("u1", "a@x.com", TEST_SECRET, now=T0)

    result = authenticate_header(f"bearer {token}", TEST_SECRET, now=T0 + timedelta(minutes=5))

    assert result["is_error"] is False
    assert result["data"] == Identity(uid="u1", email="a@x.com")


@pytest.mark.asyncio
async def test_verify_without_header_returns_401(async_client):
    response = await async_client.get("/api/auth/verify")

    assert response.status_code == 401
    assert response.json()["detail"] == "Access token required"
    assert response.headers["www-authenticate"] == "Bearer"


@pytest.mark.asyncio
async def test_verify_with_wrong_scheme_returns_401(async_client):
    response = await async_client.get("/api/auth/verify", headers={"Authorization": "Basic dXNlcjpwYXNz"})

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_verify_with_invalid_token_returns_403(async_client):
    response = await async_client.get("/api/auth/verify", headers={"Authorization": "Bearer garbage"})

    assert response.status_code == 403
    assert response.json()["detail"] == "Invalid or expired token"


@pytest.mark.asyncio
async def test_authentication_failure_expired_token(async_client):
    """An expired token is rejected with 403 even though its signature is valid."""
    expired_token = create_jwt(
        "u1", "a@x.com", TEST_SECRET, ttl=timedelta(hours=1), now=utcnow() - timedelta(hours=2)
    )

    response = await async_client.get("/api/auth/verify", headers={"Authorization": f"Bearer {expired_token}"})

    assert response.status_code == 403
    assert "invalid or expired" in response.json()["detail"].lower()


@pytest.mark.asyncio
async def test_verify_with_valid_token(async_client, auth_headers):
    response = await async_client.get("/api/auth/verify", headers=auth_headers("u1", "a@x.com"))

    assert response.status_code == 200
    body = response.json()
    assert body["ok"] is True
    assert body["data"] == {"valid": True, "user": {"uid": "u1", "email": "a@x.com"}}


@pytest.mark.asyncio
async def test_generate_token_requires_uid_and_email(async_client):
    for payload in ({}, {"uid": "u1"}, {"email": "a@x.com"}, {"uid": "", "email": "a@x.com"}):
        response = await async_client.post("/api/auth/generate-token", json=payload)

        assert response.status_code == 400, payload
        assert response.json()["error"] == "MISSING_FIELDS"


@pytest.mark.asyncio
async def test_generate_token_without_body_returns_400(async_client):
    response = await async_client.post("/api/auth/generate-token")

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_generate_token_issues_verifiable_token(async_client):
    response = await async_client.post(
        "/api/auth/generate-token",
        json={"uid": "u1", "email": "a@x.com", "displayName": "Ada", "photoURL": None},
    )

    assert response.status_code == 200
    token = response.json()["data"]["token"]
    assert verify_token(token, TEST_SECRET) == Identity(uid="u1", email="a@x.com")
    # Default TTL is seven days
    assert verify_token(token, TEST_SECRET, now=utcnow() + timedelta(days=6, hours=23)) is not None
    assert verify_token(token, TEST_SECRET, now=utcnow() + timedelta(days=7, minutes=1)) is None

    verify_response = await async_client.get("/api/auth/verify", headers={"Authorization": f"Bearer {token}"})
    assert verify_response.status_code == 200


@pytest.mark.asyncio
async def test_logout_is_an_acknowledgment_only(async_client, auth_headers):
    headers = auth_headers()

    response = await async_client.post("/api/auth/logout", headers=headers)
    assert response.status_code == 200
    assert response.json()["message"] == "Logged out successfully"

    # No revocation: the same token keeps working
    again = await async_client.get("/api/auth/verify", headers=headers)
    assert again.status_code == 200


@pytest.mark.asyncio
async def test_health_requires_auth(async_client, auth_headers):
    assert (await async_client.get("/api/health")).status_code == 401

    response = await async_client.get("/api/health", headers=auth_headers(email="a@x.com"))

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["status"] == "healthy"
    assert data["user"] == "a@x.com"
    assert data["server"] == "lyncx-api"


@pytest.mark.asyncio
async def test_unknown_endpoint_returns_404(async_client):
    response = await async_client.get("/api/does-not-exist")

    assert response.status_code == 404
    assert response.json()["error"] == "ENDPOINT_NOT_FOUND"
