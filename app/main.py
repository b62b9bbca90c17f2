"""
FastAPI Main Application
Monthly KPI aggregation and summary synchronization
"""

from fastapi import FastAPI
from contextlib import asynccontextmanager
import logging
from typing import AsyncGenerator

from app.config import settings
from app.core.logging import setup_logging
from app.infrastructure.db.database import init_db, close_db
from app.api.routes import health, monthly
from app.scheduler.scheduler import start_scheduler, shutdown_scheduler

setup_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """
    Application lifespan manager
    Handles startup and shutdown of all services
    """
    # ===================
    # STARTUP
    # ===================
    logger.info("=" * 60)
    logger.info("🚀 Starting Monthly KPI Service")
    logger.info("=" * 60)

    logger.info("📊 Initializing database...")
    await init_db()
    logger.info("✅ Database initialized")

    logger.info(f"   🗂️  Summary store: {settings.SUMMARY_STORE_BACKEND}")
    logger.info(
        f"   📐 KPI policy: rows_per_day={settings.KPI_ROWS_PER_DAY}, "
        f"working_days={settings.KPI_USE_WORKING_DAYS}"
    )

    if settings.SCHEDULER_ENABLED:
        try:
            logger.info("📅 Starting scheduler...")
            start_scheduler()
        except Exception as e:
            logger.error(f"❌ Failed to start scheduler: {e}")
    else:
        logger.info("⏰ Scheduler disabled")

    yield

    # ===================
    # SHUTDOWN
    # ===================
    logger.info("🛑 Shutting down Monthly KPI Service...")
    shutdown_scheduler()

    logger.info("📊 Closing database connections...")
    await close_db()
    logger.info("👋 Shutdown complete")


# Create FastAPI app
app = FastAPI(
    title="Facility Operations - Monthly KPI",
    description="Monthly KPI aggregation and idempotent summary synchronization",
    version="1.0.0",
    lifespan=lifespan
)

app.include_router(health.router, tags=["Health"])
app.include_router(monthly.router, prefix="/api/v1/monthly", tags=["Monthly KPI"])


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=settings.DEBUG,
    )
