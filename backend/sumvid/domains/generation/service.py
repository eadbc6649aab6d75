"""Generation service: validate, consume one quota unit, then call the model.

Requests are validated before any quota is consumed. Once the unit is
consumed it is not refunded, even if the model call fails afterwards.
"""

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from sumvid.core.context import BaseContext
from sumvid.core.exceptions import BadRequestError, ExternalServiceError
from sumvid.core.protocols.generation import GenerationClient
from sumvid.domains.generation.exceptions import GenerationUpstreamError
from sumvid.domains.generation.protocols import GenerationServiceProtocol
from sumvid.domains.generation.types import (
    QUIZ_QUESTION_COUNT,
    GenerationKind,
    GenerationResult,
    build_qa_messages,
    build_quiz_messages,
    build_summary_messages,
    clean_transcript,
    count_quiz_questions,
)
from sumvid.domains.usage.protocols import QuotaServiceProtocol
from sumvid.domains.usage.types import UsageSnapshot


class GenerationService(GenerationServiceProtocol):
    """Quota-gated front for the generation client."""

    def __init__(self, quota: QuotaServiceProtocol, client: GenerationClient) -> None:
        """Initialize with the quota service and a generation client."""
        self._quota = quota
        self._client = client

    async def summarize(
        self,
        db: AsyncSession,
        ctx: BaseContext,
        *,
        transcript: Optional[str],
        title: Optional[str] = None,
        context: Optional[str] = None,
    ) -> GenerationResult:
        """Summarize a video transcript."""
        cleaned = clean_transcript(transcript)
        messages, max_tokens = build_summary_messages(cleaned, title, context)
        usage = await self._consume(db, ctx)
        content = await self._complete(ctx, messages, max_tokens=max_tokens)
        return GenerationResult(GenerationKind.SUMMARY, content, usage)

    async def quiz(
        self,
        db: AsyncSession,
        ctx: BaseContext,
        *,
        transcript: Optional[str],
        summary: Optional[str] = None,
        title: Optional[str] = None,
        difficulty: Optional[str] = None,
    ) -> GenerationResult:
        """Generate a three-question multiple-choice quiz."""
        if not transcript and not summary:
            raise BadRequestError("Transcript or summary is required")
        messages = build_quiz_messages(transcript, summary, title, difficulty)
        usage = await self._consume(db, ctx)
        content = await self._complete(ctx, messages, max_tokens=1500)

        questions = count_quiz_questions(content)
        if questions != QUIZ_QUESTION_COUNT:
            ctx.logger.warning(f"Generated {questions} quiz questions instead of 3")
        return GenerationResult(GenerationKind.QUIZ, content, usage)

    async def answer(
        self,
        db: AsyncSession,
        ctx: BaseContext,
        *,
        question: Optional[str],
        transcript: Optional[str],
        summary: Optional[str] = None,
        title: Optional[str] = None,
        chat_history: Optional[list[dict[str, str]]] = None,
    ) -> GenerationResult:
        """Answer a question about the video."""
        if not question:
            raise BadRequestError("Question is required")
        if not transcript and not summary:
            raise BadRequestError("Transcript or summary is required")
        messages = build_qa_messages(question, transcript, summary, title, chat_history)
        usage = await self._consume(db, ctx)
        content = await self._complete(ctx, messages, max_tokens=500)
        return GenerationResult(GenerationKind.QA, content, usage)

    async def _consume(self, db: AsyncSession, ctx: BaseContext) -> UsageSnapshot:
        result = await self._quota.increment_if_allowed(db, ctx.user_id, ctx)
        return result.raise_for_limit().usage

    async def _complete(
        self, ctx: BaseContext, messages: list[dict[str, str]], *, max_tokens: int
    ) -> str:
        try:
            return await self._client.complete(messages, max_tokens=max_tokens)
        except ExternalServiceError as e:
            ctx.logger.error(f"Generation failed after quota was consumed: {e.message}")
            raise GenerationUpstreamError(message=e.message) from e
