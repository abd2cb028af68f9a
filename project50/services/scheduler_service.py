"""APScheduler jobs (runs in-process with single uvicorn worker)."""
import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from project50.config import get_settings
from project50.database import AsyncSessionLocal

logger = logging.getLogger(__name__)

scheduler = AsyncIOScheduler()


async def _sync_local_store():
    """Push local progress copies that are newer than the remote documents."""
    from project50.services import sync_service
    from project50.services.storage_service import get_local_store

    pushed = await sync_service.sync_local_store(AsyncSessionLocal, get_local_store())
    if pushed:
        logger.info("Background sync pushed %d progress documents", pushed)


def setup_scheduler():
    """Register all jobs. Call once at app startup."""
    settings = get_settings()
    if settings.SYNC_ENABLED:
        scheduler.add_job(
            _sync_local_store,
            IntervalTrigger(minutes=settings.SYNC_INTERVAL_MINUTES),
            id="sync_local_store",
            replace_existing=True,
        )
    logger.info("Scheduler jobs registered: %s", [j.id for j in scheduler.get_jobs()])
