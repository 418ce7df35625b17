"""
Health check endpoints
"""

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.logging import get_logger
from app.infra.db import get_db

router = APIRouter(tags=["health"])
logger = get_logger(__name__)


@router.get("/health")
async def health_check(db: AsyncSession = Depends(get_db)):
    """
    Check health of the database connection
    """
    status = {"api": "ok", "db": "unknown"}

    try:
        await db.execute(text("SELECT 1"))
        status["db"] = "ok"
    except SQLAlchemyError as e:
        logger.warning("health.db_unavailable", error=str(e))
        status["db"] = f"error: {e.__class__.__name__}"

    return status
