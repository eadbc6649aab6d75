"""Health check endpoint."""

from fastapi import APIRouter, Depends, Response
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from sumvid import schemas
from sumvid.api import deps
from sumvid.core.logging import logger

router = APIRouter()


@router.get("", response_model=schemas.HealthResponse)
async def health_check(
    response: Response, db: AsyncSession = Depends(deps.get_db)
) -> schemas.HealthResponse:
    """Check that the API can reach the database.

    Returns:
    --------
        HealthResponse: 200 when the database answers, 503 otherwise.
    """
    try:
        await db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error(f"Health check failed: {e}")
        response.status_code = 503
        return schemas.HealthResponse(status="unhealthy", database="down", error=str(e))
    return schemas.HealthResponse(status="healthy", database="up")
