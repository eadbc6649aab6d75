"""API tests for generation endpoints.

GenerationService runs for real over FakeGenerationClient; the quota checks
are exercised through HTTP.
"""

import pytest

from sumvid.api.conftest import _auth_headers
from sumvid.core.exceptions import ExternalServiceError
from sumvid.domains.users.tests.conftest import _make_user

TRANSCRIPT = "[0:00] Volcanoes form where magma reaches the surface of the earth."


class TestSummary:
    """Tests for POST /generate/summary."""

    @pytest.mark.asyncio
    async def test_returns_content_and_usage(self, client, fake_user_repo):
        fake_user_repo.seed(_make_user())

        response = await client.post(
            "/generate/summary",
            json={"transcript": TRANSCRIPT, "title": "Volcanoes"},
            headers=_auth_headers(),
        )

        assert response.status_code == 200
        data = response.json()
        assert data["content"] == "fake completion"
        assert data["usage"]["used"] == 1
        assert data["usage"]["subscriptionStatus"] == "freemium"

    @pytest.mark.asyncio
    async def test_requires_token(self, client):
        response = await client.post("/generate/summary", json={"transcript": TRANSCRIPT})

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_limit_reached_is_403_with_usage(self, client, fake_user_repo):
        fake_user_repo.seed(_make_user())
        for _ in range(10):
            await client.post(
                "/generate/summary", json={"transcript": TRANSCRIPT}, headers=_auth_headers()
            )

        response = await client.post(
            "/generate/summary", json={"transcript": TRANSCRIPT}, headers=_auth_headers()
        )

        assert response.status_code == 403
        data = response.json()
        assert data["kind"] == "limit_reached"
        assert data["usage"]["used"] == 10
        assert data["usage"]["remaining"] == 0

    @pytest.mark.asyncio
    async def test_short_transcript_is_400_and_free(self, client, fake_user_repo):
        fake_user_repo.seed(_make_user())

        response = await client.post(
            "/generate/summary", json={"transcript": "[0:01]"}, headers=_auth_headers()
        )

        assert response.status_code == 400
        assert fake_user_repo.snapshot(1).usage_count == 0

    @pytest.mark.asyncio
    async def test_upstream_failure_is_502(self, client, fake_user_repo, fake_generation_client):
        fake_user_repo.seed(_make_user())
        fake_generation_client._should_raise = ExternalServiceError("OpenAI", "down")

        response = await client.post(
            "/generate/summary", json={"transcript": TRANSCRIPT}, headers=_auth_headers()
        )

        assert response.status_code == 502
        assert fake_user_repo.snapshot(1).usage_count == 1


class TestQuizAndQa:
    """Tests for POST /generate/quiz and POST /generate/qa."""

    @pytest.mark.asyncio
    async def test_quiz(self, client, fake_user_repo):
        fake_user_repo.seed(_make_user())

        response = await client.post(
            "/generate/quiz",
            json={"summary": "Volcanoes erupt.", "difficulty": "easy"},
            headers=_auth_headers(),
        )

        assert response.status_code == 200
        assert response.json()["usage"]["used"] == 1

    @pytest.mark.asyncio
    async def test_qa_forwards_history(self, client, fake_user_repo, fake_generation_client):
        fake_user_repo.seed(_make_user())

        response = await client.post(
            "/generate/qa",
            json={
                "question": "Why do they erupt?",
                "transcript": TRANSCRIPT,
                "chatHistory": [{"role": "assistant", "content": "Ask me anything."}],
            },
            headers=_auth_headers(),
        )

        assert response.status_code == 200
        roles = [m["role"] for m in fake_generation_client.calls[0]["messages"]]
        assert roles == ["system", "assistant", "user"]
