"""Generation domain protocols."""

from typing import Optional, Protocol, runtime_checkable

from sqlalchemy.ext.asyncio import AsyncSession

from sumvid.core.context import BaseContext
from sumvid.domains.generation.types import GenerationResult


@runtime_checkable
class GenerationServiceProtocol(Protocol):
    """Quota-gated summaries, quizzes and answers."""

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
        ...

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
        ...

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
        ...
