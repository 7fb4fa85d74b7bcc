"""Health check router."""

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from wppd import __version__
from wppd.database import get_db
from wppd.models.schemas import envelope

router = APIRouter()


@router.get("/health")
async def health_check(db: AsyncSession = Depends(get_db)):
    """Check API and database health."""
    try:
        await db.execute(text("SELECT 1"))
        db_status = "healthy"
    except Exception as e:
        db_status = f"unhealthy: {str(e)}"

    return envelope(
        "API is healthy" if db_status == "healthy" else "API is degraded",
        {
            "status": "healthy" if db_status == "healthy" else "degraded",
            "database": db_status,
            "version": __version__,
        },
    )
