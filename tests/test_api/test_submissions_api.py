from __future__ import annotations

from typing import Dict
from uuid import UUID, uuid4

import httpx
import jwt
import pytest
import pytest_asyncio
from asgi_lifespan import LifespanManager
from fastapi import status

from launchit.core.config import settings
from launchit.main import create_application
from launchit.schemas.submission import AIEnrichmentResult
from launchit.services import limits as limits_service
from launchit.services.local_drafts import RedisLocalDraftStore
from launchit.services.media import MediaUploader
from launchit.services.sessions import SessionRegistry
from launchit.services.submission import SubmissionSession
from conftest import encode_image


API_PREFIX = f"{settings.API_PREFIX}/v1"
TEST_SECRET = "launchit-test-secret-with-enough-bytes"


def build_auth_header(user_id: UUID) -> Dict[str, str]:
    token = jwt.encode({"user_id": str(user_id)}, TEST_SECRET, algorithm=settings.JWT_ALG)
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def test_app(tmp_path, monkeypatch, fake_redis, ai, storage, clock, http_client):
    """Application on a throwaway SQLite file with fake AI, storage and Redis."""

    monkeypatch.setattr(settings, "DATABASE_URI", f"sqlite+aiosqlite:///{tmp_path / 'api.db'}")
    monkeypatch.setattr(settings, "JWT_SECRET", TEST_SECRET)
    monkeypatch.setattr(limits_service, "_redis_client", fake_redis, raising=False)

    app = create_application()
    async with LifespanManager(app):
        gateway = app.state.gateway
        local_drafts = RedisLocalDraftStore(fake_redis)

        def _new_session(user_id, client_key):
            return SubmissionSession(
                gateway,
                MediaUploader(storage, http_client),
                ai,
                clock,
                user_id=user_id,
                local_drafts=local_drafts,
                client_key=client_key,
            )

        app.state.registry = SessionRegistry(_new_session)
        yield app


@pytest_asyncio.fixture
async def client(test_app):
    transport = httpx.ASGITransport(app=test_app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as async_client:
        yield async_client


@pytest.fixture
def auth(user_id) -> Dict[str, str]:
    return build_auth_header(user_id)


async def open_session(client, auth, **body) -> str:
    response = await client.post(f"{API_PREFIX}/submissions", json=body, headers=auth)
    assert response.status_code == status.HTTP_201_CREATED, response.text
    return response.json()["session_id"]


@pytest.mark.asyncio
async def test_requests_need_a_valid_token(client):
    response = await client.post(
        f"{API_PREFIX}/submissions", json={}, headers={"Authorization": "Bearer nope"}
    )
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json() == {"message": "Invalid token"}


@pytest.mark.asyncio
async def test_open_session_starts_editing(client, auth):
    response = await client.post(f"{API_PREFIX}/submissions", json={}, headers=auth)

    assert response.status_code == status.HTTP_201_CREATED
    view = response.json()["view"]
    assert view["state"] == "editing"
    assert view["form"]["links"] == [""]
    assert view["categories"]


@pytest.mark.asyncio
async def test_save_draft_then_list_it(client, auth, fake_redis, user_id):
    session_id = await open_session(client, auth, client_key="browser-1")
    base = f"{API_PREFIX}/submissions/{session_id}"

    response = await client.patch(
        f"{base}/fields", json={"name": "Acme", "website_url": "https://acme.io"}, headers=auth
    )
    assert response.json()["view"]["should_warn_before_unload"] is True
    assert f"launch_draft:{user_id}:browser-1" in fake_redis.store

    response = await client.post(f"{base}/draft", headers=auth)
    view = response.json()["view"]
    assert view["redirect_to"] == "/dashboard"
    assert view["autosave"]["status"] == "saved"
    assert view["notification"]["message"] == "Draft saved!"

    drafts = (await client.get(f"{API_PREFIX}/drafts", headers=auth)).json()
    assert [d["name"] for d in drafts] == ["Acme"]

    # a fresh session now offers the draft
    response = await client.post(f"{API_PREFIX}/submissions", json={}, headers=auth)
    assert response.json()["view"]["state"] == "draft_selection"
    second = response.json()["session_id"]

    response = await client.post(
        f"{API_PREFIX}/submissions/{second}/continue",
        json={"project_id": drafts[0]["id"]},
        headers=auth,
    )
    assert response.json()["view"]["form"]["website_url"] == "https://acme.io"


@pytest.mark.asyncio
async def test_sessions_are_private(client, auth):
    session_id = await open_session(client, auth)

    response = await client.get(
        f"{API_PREFIX}/submissions/{session_id}", headers=build_auth_header(uuid4())
    )
    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json() == {"message": "Submission session not found"}


@pytest.mark.asyncio
async def test_publish_through_the_api(client, auth, storage):
    session_id = await open_session(client, auth)
    base = f"{API_PREFIX}/submissions/{session_id}"

    await client.patch(
        f"{base}/fields",
        json={
            "name": "Acme",
            "website_url": "https://acme.io",
            "tagline": "Rockets for everyone",
            "description": "Reusable rockets.",
        },
        headers=auth,
    )
    await client.put(f"{base}/category", json={"value": "saas"}, headers=auth)
    await client.put(f"{base}/tags", json={"items": ["space", " ", "rockets"]}, headers=auth)
    for slot in ("cover-0", "cover-1"):
        response = await client.post(
            f"{base}/images/{slot}",
            files={"file": (f"{slot}.png", encode_image(), "image/png")},
            headers=auth,
        )
        assert response.status_code == status.HTTP_200_OK, response.text

    response = await client.post(f"{base}/publish", headers=auth)

    view = response.json()["view"]
    assert view["state"] == "published"
    assert view["slug"].startswith("acme-")
    assert len(storage.uploads) == 2

    # published sessions are released
    response = await client.patch(f"{base}/fields", json={"name": "Again"}, headers=auth)
    assert response.status_code == status.HTTP_404_NOT_FOUND


@pytest.mark.asyncio
async def test_publish_validation_error_is_in_view(client, auth):
    session_id = await open_session(client, auth)

    response = await client.post(f"{API_PREFIX}/submissions/{session_id}/publish", headers=auth)

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["view"]["validation_error"] == "Startup name is required"


@pytest.mark.asyncio
async def test_ai_fill_is_rate_limited(client, auth, ai, monkeypatch):
    monkeypatch.setattr(settings.limits, "ai_fill_rpm", 1)
    ai.queue(AIEnrichmentResult(name="Acme", tagline="Rockets", description="We build rockets."))
    session_id = await open_session(client, auth)
    base = f"{API_PREFIX}/submissions/{session_id}"
    await client.patch(f"{base}/fields", json={"website_url": "https://acme.io"}, headers=auth)

    response = await client.post(f"{base}/ai-fill", headers=auth)
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["view"]["form"]["name"] == "Acme"

    response = await client.post(f"{base}/ai-fill", headers=auth)
    assert response.status_code == status.HTTP_429_TOO_MANY_REQUESTS
    assert response.json() == {"message": "Too many AI requests, please wait a minute"}


@pytest.mark.asyncio
async def test_smart_fill_without_pending_result_conflicts(client, auth):
    session_id = await open_session(client, auth)

    response = await client.post(
        f"{API_PREFIX}/submissions/{session_id}/smart-fill", json={"mode": "all"}, headers=auth
    )

    assert response.status_code == status.HTTP_409_CONFLICT


@pytest.mark.asyncio
async def test_links_and_unknown_slots(client, auth):
    session_id = await open_session(client, auth)
    base = f"{API_PREFIX}/submissions/{session_id}"

    await client.put(f"{base}/links/0", json={"url": "https://youtu.be/x"}, headers=auth)
    response = await client.post(f"{base}/links", json={"url": "https://acme.io"}, headers=auth)
    assert response.json()["view"]["form"]["links"] == ["https://youtu.be/x", "https://acme.io"]

    response = await client.delete(f"{base}/links/5", headers=auth)
    assert response.status_code == status.HTTP_400_BAD_REQUEST

    response = await client.put(
        f"{base}/images/banner/url", json={"url": "https://acme.io/b.png"}, headers=auth
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json() == {"message": "Unknown image slot: banner"}


@pytest.mark.asyncio
async def test_close_session(client, auth):
    session_id = await open_session(client, auth)
    base = f"{API_PREFIX}/submissions/{session_id}"

    response = await client.delete(base, headers=auth)
    assert response.status_code == status.HTTP_204_NO_CONTENT

    response = await client.get(base, headers=auth)
    assert response.status_code == status.HTTP_404_NOT_FOUND


@pytest.mark.asyncio
async def test_token_without_user_is_rejected(client):
    token = jwt.encode({"sub": "someone"}, TEST_SECRET, algorithm=settings.JWT_ALG)

    response = await client.get(f"{API_PREFIX}/drafts", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json() == {"message": "User missing in token"}
