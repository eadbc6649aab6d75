"""API endpoints for quota-gated generation.

Each successful call consumes one unit of the caller's daily quota.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from sumvid import schemas
from sumvid.api import deps
from sumvid.api.context import ApiContext
from sumvid.api.deps import Inject
from sumvid.domains.generation.protocols import GenerationServiceProtocol
from sumvid.domains.generation.types import GenerationResult

router = APIRouter()


def _to_response(result: GenerationResult) -> schemas.GenerationResponse:
    return schemas.GenerationResponse(
        content=result.content, usage=schemas.UsageResponse.from_snapshot(result.usage)
    )


@router.post("/summary", response_model=schemas.GenerationResponse)
async def summary(
    request: schemas.SummaryRequest,
    db: AsyncSession = Depends(deps.get_db),
    ctx: ApiContext = Depends(deps.get_context),
    generation: GenerationServiceProtocol = Inject(GenerationServiceProtocol),
) -> schemas.GenerationResponse:
    """Summarize a video transcript."""
    result = await generation.summarize(
        db, ctx, transcript=request.transcript, title=request.title, context=request.context
    )
    return _to_response(result)


@router.post("/quiz", response_model=schemas.GenerationResponse)
async def quiz(
    request: schemas.QuizRequest,
    db: AsyncSession = Depends(deps.get_db),
    ctx: ApiContext = Depends(deps.get_context),
    generation: GenerationServiceProtocol = Inject(GenerationServiceProtocol),
) -> schemas.GenerationResponse:
    """Generate a multiple-choice quiz from a transcript or summary."""
    result = await generation.quiz(
        db,
        ctx,
        transcript=request.transcript,
        summary=request.summary,
        title=request.title,
        difficulty=request.difficulty,
    )
    return _to_response(result)


@router.post("/qa", response_model=schemas.GenerationResponse)
async def qa(
    request: schemas.QaRequest,
    db: AsyncSession = Depends(deps.get_db),
    ctx: ApiContext = Depends(deps.get_context),
    generation: GenerationServiceProtocol = Inject(GenerationServiceProtocol),
) -> schemas.GenerationResponse:
    """Answer a question about a video."""
    result = await generation.answer(
        db,
        ctx,
        question=request.question,
        transcript=request.transcript,
        summary=request.summary,
        title=request.title,
        chat_history=[m.model_dump() for m in request.chat_history],
    )
    return _to_response(result)
