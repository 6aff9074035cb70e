"""
Health Check Endpoints.

Basic status endpoints used by load balancers and deployment checks.
"""

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from transparent_trust import __version__
from transparent_trust.core.database import get_session
from transparent_trust.core.logging_config import get_logger

logger = get_logger(__name__)

router = APIRouter()


@router.get(
    "/health",
    summary="Health Check",
    description="Check that the server is up and the database answers.",
    response_description="Status object.",
)
async def health_check(session: AsyncSession = Depends(get_session)):
    """
    Health check endpoint.

    ``status`` is ``ok`` when the database answers a trivial query and
    ``degraded`` otherwise; the endpoint itself always answers 200.
    """
    database = "ok"
    try:
        await session.execute(text("SELECT 1"))
    except Exception as e:
        logger.warning(f"Health check database probe failed: {e}")
        database = "error"
    return {
        "data": {
            "status": "ok" if database == "ok" else "degraded",
            "database": database,
            "version": __version__,
        }
    }
