import logging

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.infrastructure.db.database import get_db

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health")
async def health():
    return {"status": "ok"}


@router.get("/ready")
async def ready(db: AsyncSession = Depends(get_db)):
    """DB reachability plus which summary store the sync will write to"""
    try:
        await db.execute(text("SELECT 1"))
        db_connected = True
    except SQLAlchemyError as exc:
        logger.warning(f"Readiness DB check failed: {exc}")
        db_connected = False

    return {
        "status": "ready" if db_connected else "not_ready",
        "db_connected": db_connected,
        "summary_store": settings.SUMMARY_STORE_BACKEND,
        "sharepoint_configured": bool(settings.SHAREPOINT_SITE_URL),
    }
