"""Tests for GenerationService.

Uses the real QuotaService over FakeUserRepository and FakeGenerationClient.
"""

import pytest

from sumvid.adapters.generation.fake import FakeGenerationClient
from sumvid.core.exceptions import BadRequestError, ExternalServiceError
from sumvid.domains.billing.tests.conftest import _make_ctx
from sumvid.domains.billing.types import UNLIMITED_SENTINEL
from sumvid.domains.generation.exceptions import GenerationUpstreamError, TranscriptTooShortError
from sumvid.domains.generation.service import GenerationService
from sumvid.domains.generation.types import GenerationKind
from sumvid.domains.usage.exceptions import UsageLimitReachedError
from sumvid.domains.usage.service import QuotaService
from sumvid.domains.users.fakes.repository import FakeUserRepository
from sumvid.domains.users.tests.conftest import TODAY, _make_user

TRANSCRIPT = "[0:00] Volcanoes form where magma reaches the surface of the earth."
QUIZ = '<div class="question">q</div>' * 3


def _make_service(
    client: FakeGenerationClient | None = None, **user_overrides
) -> tuple[GenerationService, FakeUserRepository, FakeGenerationClient]:
    repo = FakeUserRepository()
    repo.seed(_make_user(last_reset_date=TODAY, **user_overrides))
    client = client or FakeGenerationClient()
    quota = QuotaService(user_repo=repo, today=lambda: TODAY)
    return GenerationService(quota=quota, client=client), repo, client


class TestSummarize:
    @pytest.mark.asyncio
    async def test_consumes_one_unit(self, db):
        svc, repo, client = _make_service()

        result = await svc.summarize(db, _make_ctx(), transcript=TRANSCRIPT, title="Volcanoes")

        assert result.kind is GenerationKind.SUMMARY
        assert result.content == "fake completion"
        assert result.usage.used == 1
        assert repo.snapshot(1).usage_count == 1
        assert client.calls[0]["max_tokens"] == 360
        assert "[0:00]" not in client.calls[0]["messages"][1]["content"]

    @pytest.mark.asyncio
    async def test_short_transcript_does_not_consume_quota(self, db):
        svc, repo, client = _make_service()

        with pytest.raises(TranscriptTooShortError):
            await svc.summarize(db, _make_ctx(), transcript="[0:01] hi")

        assert repo.snapshot(1).usage_count == 0
        assert client.calls == []

    @pytest.mark.asyncio
    async def test_limit_reached_raises_with_usage(self, db):
        svc, _, client = _make_service(usage_count=10)

        with pytest.raises(UsageLimitReachedError) as exc_info:
            await svc.summarize(db, _make_ctx(), transcript=TRANSCRIPT)

        assert exc_info.value.usage.used == 10
        assert exc_info.value.usage.remaining == 0
        assert client.calls == []

    @pytest.mark.asyncio
    async def test_upstream_failure_keeps_unit_consumed(self, db):
        client = FakeGenerationClient(should_raise=ExternalServiceError("OpenAI", "boom"))
        svc, repo, _ = _make_service(client)

        with pytest.raises(GenerationUpstreamError):
            await svc.summarize(db, _make_ctx(), transcript=TRANSCRIPT)

        assert repo.snapshot(1).usage_count == 1

    @pytest.mark.asyncio
    async def test_premium_is_not_limited(self, db):
        svc, _, _ = _make_service(
            usage_count=500,
            usage_limit=UNLIMITED_SENTINEL,
            subscription_status="premium",
        )

        result = await svc.summarize(db, _make_ctx(), transcript=TRANSCRIPT)

        assert result.usage.used == 501
        assert result.usage.is_unlimited


class TestQuiz:
    @pytest.mark.asyncio
    async def test_requires_transcript_or_summary(self, db):
        svc, repo, _ = _make_service()

        with pytest.raises(BadRequestError):
            await svc.quiz(db, _make_ctx(), transcript=None, summary=None)

        assert repo.snapshot(1).usage_count == 0

    @pytest.mark.asyncio
    async def test_generates_quiz(self, db):
        svc, _, client = _make_service(FakeGenerationClient(reply=QUIZ))

        result = await svc.quiz(db, _make_ctx(), transcript=None, summary="A summary")

        assert result.kind is GenerationKind.QUIZ
        assert result.content == QUIZ
        assert client.calls[0]["max_tokens"] == 1500

    @pytest.mark.asyncio
    async def test_wrong_question_count_is_still_returned(self, db):
        svc, _, _ = _make_service(FakeGenerationClient(reply='<div class="question">q</div>'))

        result = await svc.quiz(db, _make_ctx(), transcript=TRANSCRIPT)

        assert result.content.count("question") == 1
        assert result.usage.used == 1


class TestAnswer:
    @pytest.mark.asyncio
    async def test_requires_question(self, db):
        svc, _, client = _make_service()

        with pytest.raises(BadRequestError):
            await svc.answer(db, _make_ctx(), question="", transcript=TRANSCRIPT)

        assert client.calls == []

    @pytest.mark.asyncio
    async def test_answers_with_history(self, db):
        svc, _, client = _make_service()

        result = await svc.answer(
            db,
            _make_ctx(),
            question="Why?",
            transcript=TRANSCRIPT,
            chat_history=[{"role": "user", "content": "Hi"}],
        )

        assert result.kind is GenerationKind.QA
        assert client.calls[0]["max_tokens"] == 500
        assert [m["role"] for m in client.calls[0]["messages"]] == ["system", "user", "user"]
