"""
Tests of the auth gate: token checks and the user directory upsert that runs
on every authenticated request.
"""
import uuid

import pytest
from sqlalchemy.exc import OperationalError

from recap.main import app
from recap.api.dependencies import get_user_directory
from recap.core.providers.identity_provider import IdentityClaims


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "headers",
    [
        {},
        {"Authorization": "Token abc"},
        {"Authorization": "Bearer"},
        {"Authorization": "Bearer not-a-known-token"},
    ],
)
async def test_rejected_credentials(client, count_summaries, llm_provider, headers):
    response = await client.post(
        "/api/v1/summary/generate",
        json={"videoUrl": "https://youtu.be/dQw4w9WgXcQ", "title": "T", "transcript": "text"},
        headers=headers,
    )

    assert response.status_code == 401
    assert response.json()["success"] is False
    assert response.headers["www-authenticate"] == "Bearer"
    assert llm_provider.calls == []
    assert await count_summaries() == 0


@pytest.mark.asyncio
async def test_first_request_creates_user_with_initial_credits(client, identities, get_credits):
    user_id = uuid.uuid4()
    identities["fresh"] = IdentityClaims(id=user_id, email="new@example.com", name="New", provider="google")

    response = await client.get("/api/v1/auth/me", headers={"Authorization": "Bearer fresh"})

    assert response.status_code == 200
    profile = response.json()["data"]
    assert profile["id"] == str(user_id)
    assert profile["credits"] == 10
    assert profile["provider"] == "google"
    assert await get_credits(user_id) == 10


@pytest.mark.asyncio
async def test_returning_user_keeps_balance(client, identities, make_user, get_credits):
    user_id, headers = await make_user(credits=2, name="Before")
    token = headers["Authorization"].split(" ", 1)[1]
    identities[token] = IdentityClaims(
        id=user_id,
        email="renamed@example.com",
        name="After",
        image_url="https://img.example.com/a.png",
        provider="google",
    )

    response = await client.get("/api/v1/auth/me", headers=headers)

    profile = response.json()["data"]
    assert profile["name"] == "After"
    assert profile["email"] == "renamed@example.com"
    assert profile["imageUrl"] == "https://img.example.com/a.png"
    assert profile["credits"] == 2
    assert await get_credits(user_id) == 2


class FailingDirectory:
    async def sync(self, claims):
        raise OperationalError("select", {}, Exception("database is down"))


@pytest.mark.asyncio
async def test_directory_failure_does_not_block_authentication(client, make_user):
    _, headers = await make_user(credits=1)
    app.dependency_overrides[get_user_directory] = lambda: FailingDirectory()

    response = await client.get("/api/v1/summary", headers=headers)

    assert response.status_code == 200
    assert response.json()["data"]["total"] == 0
